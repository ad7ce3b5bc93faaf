"""
Main entry point for the clinic agenda engine.
Starts the HTTP API server.
"""

import logging

from aiohttp import web
from dotenv import load_dotenv

from config.settings import get_settings
from agenda.api.routes import create_app
from agenda.services.notification_service import NotificationService
from agenda.services.read_state import FileBackend
from agenda.services.reminders import ReminderEngine
from agenda.services.scheduling_service import SchedulingService
from agenda.services.slot_generator import SlotGenerator
from agenda.services.supabase_service import SupabaseService

logger = logging.getLogger(__name__)


def build_app(settings=None) -> web.Application:
    """Wire services from settings into the HTTP application."""
    settings = settings or get_settings()

    supabase = SupabaseService(
        url=settings.supabase_url,
        key=settings.supabase_service_role_key,
    )

    slot_generator = SlotGenerator(
        fallback_start=settings.default_hours_start,
        fallback_end=settings.default_hours_end,
        fallback_duration=settings.default_slot_duration_minutes,
        max_slots=settings.max_slots,
    )

    scheduling = SchedulingService(
        supabase_service=supabase,
        slot_generator=slot_generator,
        timezone=settings.timezone,
        booking_horizon_days=settings.booking_horizon_days,
    )

    notifications = NotificationService(
        supabase_service=supabase,
        read_state_backend=FileBackend(settings.read_state_dir),
        engine=ReminderEngine(
            upcoming_window_days=settings.upcoming_window_days,
            concluded_window_hours=settings.concluded_window_hours,
        ),
        timezone=settings.timezone,
        default_reminder_hours=settings.default_reminder_hours,
        poll_interval_seconds=settings.reminder_poll_interval_seconds,
    )

    logger.info("Agenda services initialized")
    return create_app(scheduling, notifications)


def main():
    """Main entry point."""
    # Load environment variables (override=True ensures .env values take precedence)
    load_dotenv(override=True)
    settings = get_settings()

    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info(f"Starting API server ({settings.environment})")
    web.run_app(build_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
