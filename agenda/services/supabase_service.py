"""Supabase service for database operations."""

import logging
from datetime import date, datetime
from typing import List, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client

from ..models import Appointment, ProfessionalProfile
from .exceptions import AppointmentNotFound, RaceLost

logger = logging.getLogger(__name__)

# Postgres unique_violation, raised by the active-slot partial unique index
UNIQUE_VIOLATION = "23505"

APPOINTMENT_COLUMNS = "*, clients (id, name)"
PROFILE_COLUMNS = (
    "id, full_name, working_hours_start, working_hours_end, appointment_duration, "
    "working_days, reminder_hours_before, notifications_enabled, booking_settings"
)


class SupabaseService:
    """Service for all Supabase database operations."""

    def __init__(self, url: str, key: str, client: Optional[Client] = None):
        """Initialize Supabase client."""
        self.client: Client = client or create_client(url, key)
        logger.info("Supabase client initialized")

    # ==================== Profile Operations ====================

    async def get_profile(self, professional_id: str) -> Optional[ProfessionalProfile]:
        """Get the scheduling configuration of a professional."""
        try:
            response = (
                self.client.table("profiles")
                .select(PROFILE_COLUMNS)
                .eq("id", professional_id)
                .maybe_single()
                .execute()
            )
        except APIError as e:
            logger.error(f"Error fetching profile {professional_id}: {e}")
            raise

        if response is None or not response.data:
            return None
        return ProfessionalProfile(**response.data)

    # ==================== Appointment Operations ====================

    async def get_appointments(
        self,
        professional_id: str,
        on_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        include_cancelled: bool = True,
    ) -> List[dict]:
        """
        Get appointment rows of a professional.

        Rows are returned raw so that one malformed record does not fail
        the whole read; callers validate them.

        Args:
            professional_id: Owner of the agenda
            on_date: Only this date
            start_date: Range start (inclusive)
            end_date: Range end (inclusive)
            include_cancelled: Whether to return cancelled appointments
        """
        try:
            query = (
                self.client.table("appointments")
                .select(APPOINTMENT_COLUMNS)
                .eq("profile_id", professional_id)
            )

            if on_date:
                query = query.eq("appointment_date", on_date.isoformat())
            if start_date:
                query = query.gte("appointment_date", start_date.isoformat())
            if end_date:
                query = query.lte("appointment_date", end_date.isoformat())
            if not include_cancelled:
                query = query.neq("status", "cancelled")

            response = (
                query.order("appointment_date", desc=False)
                .order("appointment_time", desc=False)
                .execute()
            )
            return response.data or []
        except APIError as e:
            logger.error(f"Error fetching appointments for {professional_id}: {e}")
            raise

    async def create_appointment(self, appointment: Appointment) -> Appointment:
        """
        Insert a new appointment.

        Raises:
            RaceLost: If another active appointment took the slot first
        """
        now = datetime.utcnow().isoformat()
        apt_data = appointment.model_dump(
            mode="json",
            exclude={"id", "client_name", "created_at", "updated_at"},
        )
        apt_data["created_at"] = now
        apt_data["updated_at"] = now

        try:
            response = self.client.table("appointments").insert(apt_data).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.warning(
                    f"Slot {appointment.appointment_date} {appointment.appointment_time} "
                    f"taken concurrently for {appointment.profile_id}"
                )
                raise RaceLost(
                    f"Slot {appointment.appointment_date} at {appointment.appointment_time} "
                    "was taken by a concurrent booking",
                    cause=e,
                ) from e
            logger.error(f"Error creating appointment: {e}")
            raise

        created = Appointment(**response.data[0])
        logger.info(f"Created appointment {created.id} for {appointment.profile_id}")
        return created

    async def update_appointment(self, appointment_id: str, updates: dict) -> Appointment:
        """
        Update fields of an appointment.

        Raises:
            AppointmentNotFound: If no row matched
            RaceLost: If the change reactivates a slot taken meanwhile
        """
        updates = {**updates, "updated_at": datetime.utcnow().isoformat()}
        try:
            response = (
                self.client.table("appointments")
                .update(updates)
                .eq("id", appointment_id)
                .execute()
            )
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise RaceLost(cause=e) from e
            logger.error(f"Error updating appointment {appointment_id}: {e}")
            raise

        if not response.data:
            raise AppointmentNotFound(appointment_id)
        return Appointment(**response.data[0])
