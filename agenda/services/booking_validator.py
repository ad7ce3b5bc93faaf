"""Submission-time validation of new bookings."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..models import Appointment, BookingRequest, WorkingHoursConfig
from ..utils.helpers import combine, minutes_of_day
from .calendar_policy import check_date
from .exceptions import RejectionReason, ValidationRejected

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingDecision:
    """Outcome of validating a booking: accepted, or rejected with a reason."""
    reason: Optional[RejectionReason] = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def accept(cls) -> "BookingDecision":
        return cls()

    @classmethod
    def reject(cls, reason: RejectionReason) -> "BookingDecision":
        return cls(reason=reason)

    def raise_for_rejection(self) -> None:
        """Raise ValidationRejected if the booking was rejected."""
        if self.reason is not None:
            raise ValidationRejected(self.reason)


class BookingValidator:
    """
    Re-checks a proposed booking against a fresh snapshot.

    The UI may have shown the slot as free minutes ago. Time has moved on
    and other bookings may have landed, so every check runs again here.
    This is a fast path only: the partial unique index on appointments is
    what actually guarantees one active booking per slot.
    """

    def validate(
        self,
        proposed: BookingRequest,
        appointments: Iterable[Appointment],
        config: WorkingHoursConfig,
        now: datetime,
        slots: Optional[Sequence[str]] = None,
    ) -> BookingDecision:
        """
        Validate a proposed booking. Checks run in order and stop at the
        first failure.

        1. The date must pass the calendar policy, booking window included.
        2. On the current day the time must be strictly after ``now``.
        3. The minimum notice, when configured, must be respected.
        4. No other active appointment of the professional on that slot.
        5. The time must be one of the professional's slots, when given.

        Args:
            proposed: The booking request
            appointments: Current appointments of the professional
            config: Professional's working hours and booking limits
            now: Naive local time captured once for this operation
            slots: Generated slot times for the professional

        Returns:
            BookingDecision
        """
        target = proposed.requested_date

        reason = check_date(target, config.working_days, now.date(), config.max_advance_days)
        if reason is not None:
            return self._reject(proposed, reason)

        if target == now.date():
            now_minutes = now.hour * 60 + now.minute
            # Minute precision: a booking for the current minute is already late
            if minutes_of_day(proposed.appointment_time) <= now_minutes:
                return self._reject(proposed, RejectionReason.TIME_ALREADY_PASSED)

        if config.min_advance_hours:
            cutoff = now + timedelta(hours=config.min_advance_hours)
            if combine(target, proposed.appointment_time) < cutoff:
                return self._reject(proposed, RejectionReason.TOO_SHORT_NOTICE)

        for apt in appointments:
            if apt.profile_id == proposed.professional_id and apt.occupies(target, proposed.appointment_time):
                return self._reject(proposed, RejectionReason.SLOT_ALREADY_BOOKED)

        if slots is not None and proposed.appointment_time not in slots:
            return self._reject(proposed, RejectionReason.OUTSIDE_WORKING_HOURS)

        return BookingDecision.accept()

    def _reject(self, proposed: BookingRequest, reason: RejectionReason) -> BookingDecision:
        logger.info(
            f"Rejected booking for {proposed.professional_id} on "
            f"{proposed.appointment_date} at {proposed.appointment_time}: {reason.value}"
        )
        return BookingDecision.reject(reason)
