"""Periodic reminder checks for a foreground session."""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, List

from ..models import DerivedNotification

logger = logging.getLogger(__name__)

CheckFn = Callable[[], Awaitable[List[DerivedNotification]]]
DeliverFn = Callable[[DerivedNotification], Any]


class ReminderPoller:
    """
    Polls the notification feed and delivers each unread notification once.

    The loop is owned by the caller: it runs on a fixed interval while
    ``is_visible()`` is true and idles otherwise. The feed itself is
    recomputed by ``check`` on every tick.

    Checks can overlap (a tick and a manual refresh). Each check takes a
    sequence number when it starts; its result is applied only if no
    newer check has been applied already, so a slow stale check can never
    overwrite a fresher feed.
    """

    def __init__(
        self,
        check: CheckFn,
        deliver: DeliverFn,
        interval_seconds: float = 60.0,
        is_visible: Callable[[], bool] = lambda: True,
    ):
        """
        Initialize the poller.

        Args:
            check: Coroutine function returning the current feed
            deliver: Called with each newly surfaced notification; may be async
            interval_seconds: Time between ticks
            is_visible: Whether the view is in the foreground
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._check = check
        self._deliver = deliver
        self.interval_seconds = interval_seconds
        self.is_visible = is_visible

        self.delivered_ids: set[str] = set()
        self.latest: List[DerivedNotification] = []
        self._started = 0
        self._applied = 0
        self._stop = asyncio.Event()

    async def check_now(self) -> bool:
        """
        Run one check and apply its result.

        Returns:
            True if the result was applied, False if it was superseded
        """
        self._started += 1
        sequence = self._started

        notifications = await self._check()

        if sequence < self._applied:
            logger.debug(f"Discarding reminder check #{sequence}, #{self._applied} already applied")
            return False

        self._applied = sequence
        self.latest = notifications
        # Ids that left the feed cannot come back, so only the current feed is remembered
        self.delivered_ids.intersection_update(n.id for n in notifications)
        await self._deliver_new(notifications)
        return True

    async def _deliver_new(self, notifications: List[DerivedNotification]) -> None:
        for notification in notifications:
            if notification.read or notification.id in self.delivered_ids:
                continue

            self.delivered_ids.add(notification.id)
            try:
                result = self._deliver(notification)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                # Undelivered, so the next check retries it
                self.delivered_ids.discard(notification.id)
                raise

    async def run(self) -> None:
        """Poll until stop() is called."""
        self._stop.clear()
        logger.info(f"Reminder polling started every {self.interval_seconds}s")

        while not self._stop.is_set():
            if self.is_visible():
                try:
                    await self.check_now()
                except Exception as e:
                    # A failed tick must not end the session
                    logger.error(f"Reminder check failed: {e}", exc_info=True)

            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

        logger.info("Reminder polling stopped")

    def stop(self) -> None:
        """Ask the loop to exit after the current tick."""
        self._stop.set()

    def reset(self) -> None:
        """Start a new session: forget what was delivered."""
        self.delivered_ids.clear()
        self.latest = []
