"""Reminder notification derivation."""

import logging
from datetime import datetime
from typing import AbstractSet, Any, Iterable, List, Optional, Union

from pydantic import ValidationError

from ..models import (
    Appointment,
    AppointmentStatus,
    ConcludedReminder,
    DerivedNotification,
    ReminderConfig,
    UpcomingReminder,
)
from ..models.notification import NotificationKey
from ..utils.helpers import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_NAME = "Cliente"
UPCOMING_TITLE = "Lembrete de Agendamento"

# status -> (title, message suffix) for appointments whose time has passed
CONCLUDED_COPY = {
    AppointmentStatus.COMPLETED.value: ("Consulta Concluída", "Consulta concluída"),
    AppointmentStatus.CANCELLED.value: ("Consulta Cancelada", "Consulta cancelada"),
    AppointmentStatus.NO_SHOW.value: ("Cliente Não Compareceu", "Não compareceu à consulta"),
    AppointmentStatus.SCHEDULED.value: ("Agendamento Realizado", "Consulta realizada"),
}


def select_lead_time(hours_until: float, lead_hours: Iterable[int]) -> Optional[int]:
    """
    The most specific reminder tier that has fired.

    With tiers 24, 12 and 2 and 9 hours to go, the 24h and 12h tiers have
    both fired; only 12h is shown. Returns None before the largest tier.
    """
    fired = [lead for lead in lead_hours if hours_until <= lead]
    return min(fired) if fired else None


class ReminderEngine:
    """Derives the notification feed of a professional. Stateless."""

    def __init__(self, upcoming_window_days: int = 30, concluded_window_hours: int = 24):
        """
        Initialize the engine.

        Args:
            upcoming_window_days: Future appointments further out are ignored
            concluded_window_hours: Past appointments older than this are ignored
        """
        self.upcoming_window_hours = upcoming_window_days * 24
        self.concluded_window_hours = concluded_window_hours

    def derive_notifications(
        self,
        appointments: Iterable[Union[Appointment, dict]],
        reminder_config: Optional[ReminderConfig],
        now: datetime,
        read_keys: AbstractSet[NotificationKey] = frozenset(),
    ) -> List[DerivedNotification]:
        """
        Derive notifications for a set of appointments.

        Each appointment yields at most one notification: a reminder while
        it is upcoming and inside a lead-time tier, or a status notice for
        up to ``concluded_window_hours`` after its start. Records that
        cannot be read are skipped.

        Args:
            appointments: Appointment models or raw rows
            reminder_config: Lead-time tiers, 24h when None
            now: Naive local time captured once for this operation
            read_keys: Keys acknowledged by the user

        Returns:
            Notifications ordered by appointment time, latest first
        """
        config = reminder_config or ReminderConfig()
        notifications: List[DerivedNotification] = []
        seen: set = set()

        for record in appointments:
            apt = self._coerce(record)
            if apt is None:
                continue

            notification = self._derive_one(apt, config, now)
            if notification is None or notification.key in seen:
                continue

            seen.add(notification.key)
            notification.read = notification.key in read_keys
            notifications.append(notification)

        notifications.sort(key=lambda n: n.starts_at, reverse=True)
        return notifications

    def _coerce(self, record: Any) -> Optional[Appointment]:
        if isinstance(record, Appointment):
            apt = record
        else:
            try:
                apt = Appointment.model_validate(record)
            except ValidationError as e:
                record_id = record.get("id") if isinstance(record, dict) else None
                logger.warning(f"Skipping malformed appointment {record_id}: {e.error_count()} errors")
                return None

        if not apt.id:
            logger.warning("Skipping appointment without id")
            return None
        return apt

    def _derive_one(self, apt: Appointment, config: ReminderConfig, now: datetime) -> Optional[DerivedNotification]:
        hours_until = (apt.starts_at - now).total_seconds() / 3600
        client_name = apt.client_name or DEFAULT_CLIENT_NAME

        if hours_until > 0:
            if hours_until > self.upcoming_window_hours:
                return None

            lead = select_lead_time(hours_until, config.lead_hours)
            if lead is None:
                return None

            return DerivedNotification(
                key=UpcomingReminder(appointment_id=apt.id, lead_hours=lead),
                appointment_id=apt.id,
                title=UPCOMING_TITLE,
                message=f"{client_name} tem consulta em {round_half_up(hours_until)}h",
                appointment_date=apt.appointment_date,
                appointment_time=apt.appointment_time,
                client_name=client_name,
                hours_before=lead,
                created_at=now,
            )

        if -hours_until > self.concluded_window_hours:
            return None

        title, suffix = CONCLUDED_COPY.get(apt.status, CONCLUDED_COPY[AppointmentStatus.SCHEDULED.value])
        return DerivedNotification(
            key=ConcludedReminder(appointment_id=apt.id),
            appointment_id=apt.id,
            title=title,
            message=f"{client_name} - {suffix}",
            appointment_date=apt.appointment_date,
            appointment_time=apt.appointment_time,
            client_name=client_name,
            hours_before=0,
            created_at=now,
            appointment_status=apt.status,
        )


def active_keys(notifications: Iterable[DerivedNotification]) -> set:
    """Keys of a derived feed, for garbage-collecting the read-state."""
    return {n.key for n in notifications}
