"""Slot generator for bookable appointment times."""

import logging
from typing import List, Optional

from ..models import WorkingHoursConfig
from ..utils.helpers import format_minutes, minutes_of_day

logger = logging.getLogger(__name__)


class SlotGenerator:
    """Generates the candidate times of day for a professional."""

    def __init__(
        self,
        fallback_start: str = "08:00",
        fallback_end: str = "18:00",
        fallback_duration: int = 30,
        max_slots: int = 200,
    ):
        """
        Initialize slot generator.

        Args:
            fallback_start: First slot when no working hours are configured
            fallback_end: End (exclusive) when no working hours are configured
            fallback_duration: Slot duration used by the fallback and when
                a configured duration is not positive
            max_slots: Hard cap on generated entries
        """
        if fallback_duration <= 0:
            raise ValueError("fallback_duration must be positive")

        self.fallback_start = fallback_start
        self.fallback_end = fallback_end
        self.fallback_duration = fallback_duration
        self.max_slots = max_slots

    def generate_slots(self, config: Optional[WorkingHoursConfig] = None) -> List[str]:
        """
        Generate the ordered slot times for a working day.

        Starts at ``working_hours_start`` and steps by
        ``appointment_duration`` minutes. The end time is included when it
        falls exactly on a step.

        Without configuration, or with unusable bounds, slots run from
        the fallback start up to (not including) the fallback end.

        Args:
            config: Professional's working hours, if any

        Returns:
            List of "HH:MM" strings
        """
        if config is None:
            return self._fallback_slots()

        try:
            start = minutes_of_day(config.working_hours_start)
            end = minutes_of_day(config.working_hours_end)
        except ValueError as e:
            logger.warning(f"Unparseable working hours ({e}), using fallback hours")
            return self._fallback_slots()

        if start > end:
            logger.warning(
                f"Working hours start {config.working_hours_start} is after end "
                f"{config.working_hours_end}, using fallback hours"
            )
            return self._fallback_slots()

        duration = config.appointment_duration
        if duration <= 0:
            logger.warning(
                f"Invalid appointment duration {duration}, using {self.fallback_duration} minutes"
            )
            duration = self.fallback_duration

        return self._step(start, end, duration, inclusive_end=True)

    def _fallback_slots(self) -> List[str]:
        start = minutes_of_day(self.fallback_start)
        end = minutes_of_day(self.fallback_end)
        return self._step(start, end, self.fallback_duration, inclusive_end=False)

    def _step(self, start: int, end: int, duration: int, inclusive_end: bool) -> List[str]:
        slots = []
        current = start
        while current < end or (inclusive_end and current == end):
            if len(slots) >= self.max_slots:
                logger.warning(f"Slot generation capped at {self.max_slots} entries")
                break
            slots.append(format_minutes(current))
            current += duration

        return slots
