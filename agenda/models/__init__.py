"""Data models package."""

from .appointment import (
    Appointment,
    AppointmentStatus,
    AppointmentUpdate,
    BookingRequest,
    PaymentStatus,
    SlotReason,
    TimeSlot,
)
from .notification import (
    ConcludedReminder,
    DerivedNotification,
    NotificationKey,
    UpcomingReminder,
    parse_notification_key,
)
from .profile import BookingSettings, ProfessionalProfile, ReminderConfig, WorkingHoursConfig

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "AppointmentUpdate",
    "BookingRequest",
    "PaymentStatus",
    "SlotReason",
    "TimeSlot",
    "ConcludedReminder",
    "DerivedNotification",
    "NotificationKey",
    "UpcomingReminder",
    "parse_notification_key",
    "BookingSettings",
    "ProfessionalProfile",
    "ReminderConfig",
    "WorkingHoursConfig",
]
