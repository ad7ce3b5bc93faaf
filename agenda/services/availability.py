"""Availability resolution for a professional's agenda."""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from ..models import Appointment, SlotReason, TimeSlot, WorkingHoursConfig
from ..utils.helpers import combine, minutes_of_day
from .calendar_policy import is_bookable_date

logger = logging.getLogger(__name__)


def occupied_times(appointments: Iterable[Appointment], on_date: date) -> set[str]:
    """
    Times taken on ``on_date`` by appointments that are not cancelled.

    Cancelling an appointment frees its slot immediately. Several
    appointments on the same time collapse into one occupied entry.
    """
    target = on_date.isoformat()
    return {
        apt.appointment_time
        for apt in appointments
        if apt.appointment_date == target and apt.is_active
    }


class AvailabilityResolver:
    """Marks generated slots as available or blocked, with the reason."""

    def resolve(
        self,
        on_date: date,
        slots: Sequence[str],
        appointments: Iterable[Appointment],
        now: datetime,
        min_advance_hours: Optional[int] = None,
    ) -> List[TimeSlot]:
        """
        Resolve availability of each slot on a date.

        A booked slot is reported as booked even when it is also past.
        On the current day, slots at or before the current minute are past.
        With a minimum notice, later slots starting before ``now`` plus the
        notice are too close to book.

        Args:
            on_date: Day being displayed
            slots: Slot times from the slot generator
            appointments: Snapshot of the professional's appointments
            now: Naive local time captured once for this operation
            min_advance_hours: Minimum notice in hours, if the professional sets one

        Returns:
            One TimeSlot per input slot, in the same order
        """
        occupied = occupied_times(appointments, on_date)
        is_today = on_date == now.date()
        now_minutes = now.hour * 60 + now.minute
        cutoff = now + timedelta(hours=min_advance_hours) if min_advance_hours else None

        resolved = []
        for slot in slots:
            if slot in occupied:
                resolved.append(TimeSlot(time=slot, available=False, reason=SlotReason.BOOKED))
            elif is_today and minutes_of_day(slot) <= now_minutes:
                resolved.append(TimeSlot(time=slot, available=False, reason=SlotReason.PAST))
            elif cutoff is not None and combine(on_date, slot) < cutoff:
                resolved.append(TimeSlot(time=slot, available=False, reason=SlotReason.TOO_CLOSE))
            else:
                resolved.append(TimeSlot(time=slot, available=True))

        return resolved

    def first_bookable_date(
        self,
        config: WorkingHoursConfig,
        slots: Sequence[str],
        appointments: Iterable[Appointment],
        now: datetime,
        horizon_days: int = 30,
    ) -> Optional[date]:
        """
        First date from today on with at least one available slot.

        Args:
            config: Professional's working hours and booking limits
            slots: Slot times from the slot generator
            appointments: Appointments covering today through the horizon
            now: Naive local time captured once for this operation
            horizon_days: How many days ahead to look

        Returns:
            The date, or None if nothing is free within the horizon
        """
        by_date: dict[str, list[Appointment]] = defaultdict(list)
        for apt in appointments:
            by_date[apt.appointment_date].append(apt)

        today = now.date()
        for offset in range(horizon_days + 1):
            candidate = today + timedelta(days=offset)
            if not is_bookable_date(candidate, config.working_days, today, config.max_advance_days):
                continue

            resolved = self.resolve(
                candidate,
                slots,
                by_date.get(candidate.isoformat(), []),
                now,
                min_advance_hours=config.min_advance_hours,
            )
            if any(slot.available for slot in resolved):
                return candidate

        logger.info(f"No bookable date within {horizon_days} days")
        return None
