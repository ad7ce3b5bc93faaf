"""Scheduling error taxonomy."""

from enum import Enum
from typing import Optional


class RejectionReason(str, Enum):
    """Why a booking submission was refused."""
    NOT_WORKING_DAY = "not-working-day"
    IN_PAST = "in-past"
    TIME_ALREADY_PASSED = "time-already-passed"
    SLOT_ALREADY_BOOKED = "slot-already-booked"
    OUTSIDE_WORKING_HOURS = "outside-working-hours"
    BEYOND_BOOKING_WINDOW = "beyond-booking-window"
    TOO_SHORT_NOTICE = "too-short-notice"


REJECTION_MESSAGES = {
    RejectionReason.NOT_WORKING_DAY: "O profissional não atende nesta data.",
    RejectionReason.IN_PAST: "Não é possível agendar em datas passadas.",
    RejectionReason.TIME_ALREADY_PASSED: "Não é possível agendar em horários que já passaram.",
    RejectionReason.SLOT_ALREADY_BOOKED: "Este horário já está ocupado.",
    RejectionReason.OUTSIDE_WORKING_HOURS: "Horário fora do expediente configurado.",
    RejectionReason.BEYOND_BOOKING_WINDOW: "Esta data ultrapassa a antecedência máxima para agendamento.",
    RejectionReason.TOO_SHORT_NOTICE: "Este horário não respeita a antecedência mínima para agendamento.",
}


class SchedulingError(Exception):
    """Base exception for scheduling failures."""

    def __init__(self, message: str, *, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfigError(SchedulingError):
    """Working-hours configuration is missing or unusable."""


class EmptyWorkingDaysError(ConfigError):
    """The professional has no working days, so nothing can be booked."""

    def __init__(self, professional_id: Optional[str] = None):
        who = f" for professional {professional_id}" if professional_id else ""
        super().__init__(f"No working days configured{who}")
        self.professional_id = professional_id


class ValidationRejected(SchedulingError):
    """A booking failed validation. Retryable after correction."""

    def __init__(self, reason: RejectionReason):
        super().__init__(REJECTION_MESSAGES[reason])
        self.reason = reason


class RaceLost(SchedulingError):
    """
    The store refused a booking that passed validation.

    Another booking for the same slot was committed between the
    pre-check and the insert.
    """

    def __init__(self, message: str = "Slot was taken by a concurrent booking", *, cause: Optional[Exception] = None):
        super().__init__(message, cause=cause)


class AppointmentNotFound(SchedulingError):
    """No appointment exists with the given id."""

    def __init__(self, appointment_id: str):
        super().__init__(f"Appointment {appointment_id} not found")
        self.appointment_id = appointment_id
