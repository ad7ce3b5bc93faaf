"""Notification feed of a professional."""

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from ..models import DerivedNotification, ReminderConfig, parse_notification_key
from ..utils.helpers import local_now
from .read_state import KeyValueBackend, ReadStateStore
from .reminder_poller import DeliverFn, ReminderPoller
from .reminders import ReminderEngine, active_keys
from .supabase_service import SupabaseService

logger = logging.getLogger(__name__)


class NotificationService:
    """Builds the reminder feed and records acknowledgements."""

    def __init__(
        self,
        supabase_service: SupabaseService,
        read_state_backend: KeyValueBackend,
        engine: Optional[ReminderEngine] = None,
        timezone: str = "UTC",
        default_reminder_hours: Optional[List[int]] = None,
        poll_interval_seconds: float = 60.0,
    ):
        self.db = supabase_service
        self.backend = read_state_backend
        self.engine = engine or ReminderEngine()
        self.timezone = timezone
        self.default_reminder_hours = default_reminder_hours or [24]
        self.poll_interval_seconds = poll_interval_seconds

    def read_state(self, professional_id: str) -> ReadStateStore:
        return ReadStateStore(self.backend, professional_id)

    async def get_feed(self, professional_id: str, now: Optional[datetime] = None) -> List[DerivedNotification]:
        """
        Current notifications of a professional, latest appointment first.

        Read-state entries for notifications that left the feed are
        garbage-collected on every read.
        """
        now = now or local_now(self.timezone)

        profile = await self.db.get_profile(professional_id)
        if profile is None or not profile.notifications_enabled:
            return []

        reminder_config = (
            profile.reminder_config()
            if profile.reminder_hours_before
            else ReminderConfig(lead_hours=self.default_reminder_hours)
        )

        # Concluded notices reach back one day, reminders a month ahead
        window_start = (now - timedelta(hours=self.engine.concluded_window_hours)).date()
        window_end = (now + timedelta(hours=self.engine.upcoming_window_hours)).date()
        rows = await self.db.get_appointments(professional_id, start_date=window_start, end_date=window_end)

        store = self.read_state(professional_id)
        notifications = self.engine.derive_notifications(rows, reminder_config, now, store.read_keys())
        store.gc(active_keys(notifications))

        logger.debug(f"Derived {len(notifications)} notifications for {professional_id}")
        return notifications

    def mark_read(self, professional_id: str, identities: Iterable[str]) -> bool:
        """
        Acknowledge notifications by identity string.

        Raises:
            ValueError: If an identity is not a notification id
        """
        keys = [parse_notification_key(identity) for identity in identities]
        return self.read_state(professional_id).mark_many_read(keys)

    def clear_read(self, professional_id: str) -> None:
        self.read_state(professional_id).clear()

    def poller(
        self,
        professional_id: str,
        deliver: DeliverFn,
        is_visible: Callable[[], bool] = lambda: True,
    ) -> ReminderPoller:
        """Poller surfacing each new notification of a professional once per session."""
        return ReminderPoller(
            check=lambda: self.get_feed(professional_id),
            deliver=deliver,
            interval_seconds=self.poll_interval_seconds,
            is_visible=is_visible,
        )
