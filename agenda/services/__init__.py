"""Services package: scheduling engine and store integrations."""

from .availability import AvailabilityResolver
from .booking_validator import BookingDecision, BookingValidator
from .calendar_policy import check_date, is_bookable_date
from .exceptions import (
    AppointmentNotFound,
    ConfigError,
    EmptyWorkingDaysError,
    RaceLost,
    RejectionReason,
    SchedulingError,
    ValidationRejected,
)
from .notification_service import NotificationService
from .read_state import FileBackend, MemoryBackend, ReadStateStore
from .reminder_poller import ReminderPoller
from .reminders import ReminderEngine
from .scheduling_service import SchedulingService
from .slot_generator import SlotGenerator
from .supabase_service import SupabaseService

__all__ = [
    "AvailabilityResolver",
    "BookingDecision",
    "BookingValidator",
    "check_date",
    "is_bookable_date",
    "AppointmentNotFound",
    "ConfigError",
    "EmptyWorkingDaysError",
    "RaceLost",
    "RejectionReason",
    "SchedulingError",
    "ValidationRejected",
    "NotificationService",
    "FileBackend",
    "MemoryBackend",
    "ReadStateStore",
    "ReminderPoller",
    "ReminderEngine",
    "SchedulingService",
    "SlotGenerator",
    "SupabaseService",
]
