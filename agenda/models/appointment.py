"""Appointment data models."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.helpers import combine, normalize_time, parse_date


class AppointmentStatus(str, Enum):
    """Possible appointment statuses."""
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class PaymentStatus(str, Enum):
    """Possible payment statuses."""
    PENDING = "pending"
    PAID = "paid"
    PARTIAL = "partial"


class SlotReason(str, Enum):
    """Why a slot is not bookable."""
    BOOKED = "booked"
    PAST = "past"
    TOO_CLOSE = "too-close"


class TimeSlot(BaseModel):
    """A candidate time of day on a given date."""
    time: str = Field(..., description="Time in HH:MM format (24-hour)")
    available: bool = Field(default=True, description="Whether slot can be booked")
    reason: Optional[SlotReason] = Field(default=None, description="Set when not available")

    model_config = ConfigDict(use_enum_values=True, validate_default=True)


def _validate_iso_date(value: Any) -> str:
    return parse_date(value).isoformat()


class Appointment(BaseModel):
    """An appointment row from the ``appointments`` table."""
    id: Optional[str] = Field(default=None, description="Unique appointment ID")
    profile_id: str = Field(..., description="Professional who owns the agenda")
    client_id: Optional[str] = Field(default=None)
    client_name: Optional[str] = Field(default=None, description="Joined from clients.name")
    procedure_id: Optional[str] = Field(default=None)
    appointment_date: str = Field(..., description="Appointment date (YYYY-MM-DD)")
    appointment_time: str = Field(..., description="Appointment time (HH:MM)")
    price: Decimal = Field(default=Decimal("0"))
    status: AppointmentStatus = Field(default=AppointmentStatus.SCHEDULED)
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING)
    notes: Optional[str] = Field(default=None, description="Free-text notes")
    created_at: Optional[datetime] = Field(default=None)
    updated_at: Optional[datetime] = Field(default=None)

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    @model_validator(mode="before")
    @classmethod
    def _flatten_client(cls, data: Any) -> Any:
        # Rows selected with ``clients (id, name)`` carry the client nested
        if isinstance(data, dict) and not data.get("client_name"):
            client = data.get("clients")
            if isinstance(client, dict) and client.get("name"):
                data = {**data, "client_name": client["name"]}
        return data

    @field_validator("appointment_date", mode="before")
    @classmethod
    def _check_date(cls, value: Any) -> str:
        return _validate_iso_date(value)

    @field_validator("appointment_time", mode="before")
    @classmethod
    def _check_time(cls, value: Any) -> str:
        return normalize_time(value)

    @property
    def starts_at(self) -> datetime:
        """Naive local datetime of the appointment."""
        return combine(self.appointment_date, self.appointment_time)

    @property
    def is_active(self) -> bool:
        """Whether the appointment occupies its slot."""
        return self.status != AppointmentStatus.CANCELLED.value

    def occupies(self, on_date: date, slot_time: str) -> bool:
        """Whether this appointment blocks ``slot_time`` on ``on_date``."""
        return (
            self.is_active
            and self.appointment_date == on_date.isoformat()
            and self.appointment_time == normalize_time(slot_time)
        )


class BookingRequest(BaseModel):
    """A proposed appointment submitted through the booking flow."""
    professional_id: str = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1)
    procedure_id: Optional[str] = Field(default=None)
    appointment_date: str = Field(..., description="Requested date (YYYY-MM-DD)")
    appointment_time: str = Field(..., description="Requested time (HH:MM)")
    price: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = Field(default=None)

    @field_validator("appointment_date", mode="before")
    @classmethod
    def _check_date(cls, value: Any) -> str:
        return _validate_iso_date(value)

    @field_validator("appointment_time", mode="before")
    @classmethod
    def _check_time(cls, value: Any) -> str:
        return normalize_time(value)

    @property
    def requested_date(self) -> date:
        return parse_date(self.appointment_date)

    def to_appointment(self) -> Appointment:
        """The appointment persisted once the request is approved."""
        return Appointment(
            profile_id=self.professional_id,
            client_id=self.client_id,
            procedure_id=self.procedure_id,
            appointment_date=self.appointment_date,
            appointment_time=self.appointment_time,
            price=self.price,
            notes=self.notes,
            status=AppointmentStatus.SCHEDULED,
            payment_status=PaymentStatus.PENDING,
        )


class AppointmentUpdate(BaseModel):
    """Fields a professional may change on an existing appointment."""
    status: Optional[AppointmentStatus] = None
    payment_status: Optional[PaymentStatus] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None
    procedure_id: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True, extra="forbid")

    def to_updates(self) -> dict:
        """Only the fields that were explicitly provided, JSON-ready."""
        return self.model_dump(mode="json", exclude_unset=True)
