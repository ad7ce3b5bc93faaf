"""Reminder notification models."""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .appointment import AppointmentStatus

CONCLUDED_SUFFIX = "past"


class UpcomingReminder(BaseModel):
    """Key of a reminder for an appointment that has not started yet."""
    kind: Literal["upcoming"] = "upcoming"
    appointment_id: str
    lead_hours: int

    model_config = ConfigDict(frozen=True)

    @property
    def identity(self) -> str:
        return f"{self.appointment_id}-{self.lead_hours}"


class ConcludedReminder(BaseModel):
    """Key of the notice shown after an appointment's start time."""
    kind: Literal["concluded"] = "concluded"
    appointment_id: str

    model_config = ConfigDict(frozen=True)

    @property
    def identity(self) -> str:
        return f"{self.appointment_id}-{CONCLUDED_SUFFIX}"


NotificationKey = Annotated[
    Union[UpcomingReminder, ConcludedReminder],
    Field(discriminator="kind"),
]


def parse_notification_key(identity: str) -> Union[UpcomingReminder, ConcludedReminder]:
    """
    Rebuild a key from its identity string.

    Appointment ids are UUIDs and contain dashes, so the bucket is
    whatever follows the last dash.

    Raises:
        ValueError: If the identity has no recognizable bucket
    """
    appointment_id, sep, bucket = identity.rpartition("-")
    if not sep or not appointment_id:
        raise ValueError(f"Invalid notification id: {identity!r}")

    if bucket == CONCLUDED_SUFFIX:
        return ConcludedReminder(appointment_id=appointment_id)
    if bucket.isdigit() and int(bucket) > 0:
        return UpcomingReminder(appointment_id=appointment_id, lead_hours=int(bucket))
    raise ValueError(f"Invalid notification id: {identity!r}")


class DerivedNotification(BaseModel):
    """A notification computed from an appointment. Never persisted."""
    key: NotificationKey
    type: Literal["appointment_reminder"] = "appointment_reminder"
    appointment_id: str
    title: str
    message: str
    appointment_date: str
    appointment_time: str
    client_name: str
    hours_before: int = Field(..., description="Matched lead-time tier, 0 once concluded")
    read: bool = False
    created_at: datetime
    appointment_status: Optional[AppointmentStatus] = None

    model_config = ConfigDict(use_enum_values=True)

    @computed_field
    @property
    def id(self) -> str:
        return self.key.identity

    @property
    def starts_at(self) -> datetime:
        return datetime.fromisoformat(f"{self.appointment_date}T{self.appointment_time}")
