"""
Test configuration and fixtures.

Shared builders for appointments, profiles and a stubbed store.
"""

from unittest.mock import AsyncMock

import pytest

from agenda.models import Appointment, ProfessionalProfile, WorkingHoursConfig
from agenda.services.supabase_service import SupabaseService

PROFESSIONAL_ID = "7f9c2b1e-5d3a-4c8e-9b61-0a2f4e6d8c10"
OTHER_PROFESSIONAL_ID = "b3e1d7a9-2c4f-4e6b-8a0d-1f3c5e7a9b20"

WEEKDAYS = frozenset({1, 2, 3, 4, 5})


@pytest.fixture
def professional_id() -> str:
    return PROFESSIONAL_ID


@pytest.fixture
def weekday_config() -> WorkingHoursConfig:
    return WorkingHoursConfig(
        working_hours_start="08:00",
        working_hours_end="12:00",
        appointment_duration=60,
        working_days=WEEKDAYS,
    )


@pytest.fixture
def make_row():
    """Build a raw ``appointments`` row as returned by the store."""
    counter = {"n": 0}

    def _make_row(
        appointment_date: str = "2024-06-10",
        appointment_time: str = "09:00:00",
        status: str = "scheduled",
        client_name: str = "Ana Souza",
        profile_id: str = PROFESSIONAL_ID,
        **overrides,
    ) -> dict:
        counter["n"] += 1
        row = {
            "id": f"a0000000-0000-4000-8000-{counter['n']:012d}",
            "profile_id": profile_id,
            "client_id": f"c-{counter['n']}",
            "procedure_id": None,
            "appointment_date": appointment_date,
            "appointment_time": appointment_time,
            "price": 150.0,
            "status": status,
            "payment_status": "pending",
            "notes": None,
            "clients": {"id": f"c-{counter['n']}", "name": client_name} if client_name else None,
        }
        row.update(overrides)
        return row

    return _make_row


@pytest.fixture
def make_appointment(make_row):
    def _make_appointment(**kwargs) -> Appointment:
        return Appointment.model_validate(make_row(**kwargs))

    return _make_appointment


@pytest.fixture
def profile() -> ProfessionalProfile:
    return ProfessionalProfile(
        id=PROFESSIONAL_ID,
        full_name="Dra. Carla Mendes",
        working_hours_start="08:00:00",
        working_hours_end="12:00:00",
        appointment_duration=60,
        working_days=[1, 2, 3, 4, 5],
        reminder_hours_before=[24, 12, 2],
        notifications_enabled=True,
    )


@pytest.fixture
def db(profile) -> AsyncMock:
    """Store stub returning ``profile`` and no appointments."""
    store = AsyncMock(spec=SupabaseService)
    store.get_profile.return_value = profile
    store.get_appointments.return_value = []
    return store
