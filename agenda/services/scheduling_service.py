"""Availability queries and booking submission for a professional."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from pydantic import ValidationError

from ..models import (
    Appointment,
    AppointmentUpdate,
    BookingRequest,
    BookingSettings,
    TimeSlot,
    WorkingHoursConfig,
)
from ..utils.helpers import local_now
from .availability import AvailabilityResolver
from .booking_validator import BookingValidator
from .calendar_policy import check_date
from .exceptions import EmptyWorkingDaysError
from .holidays import Holiday, is_holiday
from .slot_generator import SlotGenerator
from .supabase_service import SupabaseService

logger = logging.getLogger(__name__)

ALL_DAYS = frozenset(range(7))


@dataclass
class DayAvailability:
    """Slots of one date, with its holiday marker."""
    date: date
    bookable: bool
    slots: List[TimeSlot]
    holiday: Optional[Holiday] = None

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "bookable": self.bookable,
            "holiday": self.holiday.model_dump() if self.holiday else None,
            "slots": [slot.model_dump() for slot in self.slots],
        }


class SchedulingService:
    """
    Runs the scheduling engine over fresh data from the store.

    Every operation captures ``now`` once and reads a new snapshot of
    appointments; nothing computed for an earlier render is trusted.
    """

    def __init__(
        self,
        supabase_service: SupabaseService,
        slot_generator: SlotGenerator,
        timezone: str = "UTC",
        booking_horizon_days: int = 30,
        resolver: Optional[AvailabilityResolver] = None,
        validator: Optional[BookingValidator] = None,
    ):
        """
        Initialize the service.

        Args:
            supabase_service: Appointment and profile store
            slot_generator: Slot generation
            timezone: Clinic timezone used to read the clock
            booking_horizon_days: How far ahead first-available looks
        """
        self.db = supabase_service
        self.slots = slot_generator
        self.timezone = timezone
        self.booking_horizon_days = booking_horizon_days
        self.resolver = resolver or AvailabilityResolver()
        self.validator = validator or BookingValidator()

    def now(self) -> datetime:
        return local_now(self.timezone)

    async def load_config(self, professional_id: str) -> Tuple[Optional[WorkingHoursConfig], WorkingHoursConfig]:
        """
        Configured working hours of a professional and the config to run with.

        The first item is None when the fallback hours apply. The second
        always carries the working days and booking limits to enforce.

        Raises:
            EmptyWorkingDaysError: If the professional works on no day
        """
        profile = await self.db.get_profile(professional_id)
        if profile is None:
            logger.warning(f"No profile for {professional_id}, using fallback hours")
            return None, self._fallback_config(BookingSettings())

        # An explicit empty list is a decision, unlike a missing one
        if profile.working_days == []:
            raise EmptyWorkingDaysError(professional_id)

        rules = profile.booking_rules()
        try:
            fallback = self._fallback_config(rules, profile.working_days)
        except ValidationError:
            logger.warning(f"Invalid working days {profile.working_days} for {professional_id}, using every day")
            fallback = self._fallback_config(rules)

        try:
            config = profile.working_hours()
        except ValidationError as e:
            logger.warning(f"Invalid working hours for {professional_id}, using fallback hours: {e}")
            return None, fallback

        if config is None:
            logger.warning(f"No working hours for {professional_id}, using fallback hours")
            return None, fallback
        return config, config

    def _fallback_config(self, rules: BookingSettings, working_days: Optional[List[int]] = None) -> WorkingHoursConfig:
        return WorkingHoursConfig(
            working_hours_start=self.slots.fallback_start,
            working_hours_end=self.slots.fallback_end,
            appointment_duration=self.slots.fallback_duration,
            working_days=ALL_DAYS if working_days is None else working_days,
            min_advance_hours=rules.min_advance_hours,
            max_advance_days=rules.max_advance_days,
        )

    async def day_availability(
        self,
        professional_id: str,
        on_date: date,
        now: Optional[datetime] = None,
    ) -> DayAvailability:
        """Slots of a professional on a date, each marked free or blocked with the reason."""
        now = now or self.now()
        config, effective = await self.load_config(professional_id)
        holiday = is_holiday(on_date)

        if check_date(on_date, effective.working_days, now.date(), effective.max_advance_days) is not None:
            return DayAvailability(date=on_date, bookable=False, slots=[], holiday=holiday)

        rows = await self.db.get_appointments(professional_id, on_date=on_date)
        appointments = _parse_rows(rows)
        slots = self.resolver.resolve(
            on_date,
            self.slots.generate_slots(config),
            appointments,
            now,
            min_advance_hours=effective.min_advance_hours,
        )
        return DayAvailability(date=on_date, bookable=True, slots=slots, holiday=holiday)

    async def first_available_date(
        self,
        professional_id: str,
        now: Optional[datetime] = None,
    ) -> Optional[date]:
        """First date with a free slot within the booking horizon."""
        now = now or self.now()
        config, effective = await self.load_config(professional_id)

        today = now.date()
        rows = await self.db.get_appointments(
            professional_id,
            start_date=today,
            end_date=today + timedelta(days=self.booking_horizon_days),
            include_cancelled=False,
        )
        return self.resolver.first_bookable_date(
            effective,
            self.slots.generate_slots(config),
            _parse_rows(rows),
            now,
            horizon_days=self.booking_horizon_days,
        )

    async def book(self, request: BookingRequest, now: Optional[datetime] = None) -> Appointment:
        """
        Validate a booking against current data and persist it.

        Raises:
            ValidationRejected: If a check fails
            RaceLost: If the store rejects the slot at commit
            EmptyWorkingDaysError: If the professional works on no day
        """
        now = now or self.now()
        config, effective = await self.load_config(request.professional_id)

        rows = await self.db.get_appointments(request.professional_id, on_date=request.requested_date)
        decision = self.validator.validate(
            request,
            _parse_rows(rows),
            effective,
            now,
            slots=self.slots.generate_slots(config),
        )
        decision.raise_for_rejection()

        return await self.db.create_appointment(request.to_appointment())

    async def update_appointment(self, appointment_id: str, update: AppointmentUpdate) -> Appointment:
        """Apply a professional's edit to an appointment."""
        changes = update.to_updates()
        if not changes:
            raise ValueError("No fields to update")
        return await self.db.update_appointment(appointment_id, changes)


def _parse_rows(rows: List[dict]) -> List[Appointment]:
    appointments = []
    for row in rows:
        try:
            appointments.append(Appointment.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Ignoring malformed appointment {row.get('id')}: {e.error_count()} errors")
    return appointments
