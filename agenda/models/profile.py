"""Professional profile configuration models."""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ..utils.helpers import normalize_time

DEFAULT_REMINDER_HOURS = [24]


class WorkingHoursConfig(BaseModel):
    """
    Working hours of a professional, as set in the profile settings.

    ``working_days`` uses Sunday as 0 and Saturday as 6.
    Values are kept as stored; the slot generator decides how to degrade
    when they are unusable (e.g. a zero duration).
    """
    working_hours_start: str = Field(..., description="First slot (HH:MM)")
    working_hours_end: str = Field(..., description="Last possible slot (HH:MM)")
    appointment_duration: int = Field(default=30, description="Slot duration in minutes")
    working_days: frozenset[int] = Field(default_factory=frozenset)
    min_advance_hours: Optional[int] = Field(default=None, description="Minimum notice for a booking")
    max_advance_days: Optional[int] = Field(default=None, description="Furthest bookable day from today")

    @field_validator("working_hours_start", "working_hours_end", mode="before")
    @classmethod
    def _check_time(cls, value: Any) -> str:
        return normalize_time(value)

    @field_validator("working_days", mode="before")
    @classmethod
    def _check_days(cls, value: Any) -> frozenset[int]:
        days = frozenset(int(d) for d in (value or ()))
        invalid = [d for d in days if not 0 <= d <= 6]
        if invalid:
            raise ValueError(f"Invalid working days: {sorted(invalid)}")
        return days


class BookingSettings(BaseModel):
    """
    Online booking rules from ``profiles.booking_settings``.

    Zero or negative values mean the rule is not set.
    """
    min_advance_hours: Optional[int] = None
    max_advance_days: Optional[int] = None
    slot_duration_minutes: Optional[int] = None

    @field_validator("min_advance_hours", "max_advance_days", "slot_duration_minutes", mode="before")
    @classmethod
    def _unset_non_positive(cls, value: Any) -> Optional[int]:
        if value is None or int(value) <= 0:
            return None
        return int(value)


class ReminderConfig(BaseModel):
    """Reminder lead-times in hours, largest first."""
    lead_hours: list[int] = Field(default_factory=lambda: list(DEFAULT_REMINDER_HOURS))

    @field_validator("lead_hours", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> list[int]:
        hours = sorted({int(h) for h in (value or ()) if int(h) > 0}, reverse=True)
        return hours or list(DEFAULT_REMINDER_HOURS)


class ProfessionalProfile(BaseModel):
    """The scheduling-relevant columns of a ``profiles`` row."""
    id: str
    full_name: Optional[str] = None
    working_hours_start: Optional[str] = None
    working_hours_end: Optional[str] = None
    appointment_duration: Optional[int] = None
    working_days: Optional[list[int]] = None
    reminder_hours_before: Optional[list[int]] = None
    notifications_enabled: bool = True
    booking_settings: Optional[BookingSettings] = None

    def working_hours(self) -> Optional[WorkingHoursConfig]:
        """
        Working hours, or None when the profile has not configured them.

        A profile without ``working_days`` is treated as open every day,
        matching the agenda calendar of the front-end. The booking slot
        duration, when set, takes precedence over ``appointment_duration``.
        """
        if not self.working_hours_start or not self.working_hours_end:
            return None

        days = self.working_days
        if days is None:
            days = list(range(7))

        rules = self.booking_rules()
        duration = rules.slot_duration_minutes
        if duration is None:
            duration = self.appointment_duration if self.appointment_duration is not None else 30

        return WorkingHoursConfig(
            working_hours_start=self.working_hours_start,
            working_hours_end=self.working_hours_end,
            appointment_duration=duration,
            working_days=days,
            min_advance_hours=rules.min_advance_hours,
            max_advance_days=rules.max_advance_days,
        )

    def booking_rules(self) -> BookingSettings:
        return self.booking_settings or BookingSettings()

    def reminder_config(self) -> ReminderConfig:
        """Configured reminder tiers, defaulting to 24h."""
        return ReminderConfig(lead_hours=self.reminder_hours_before or [])
