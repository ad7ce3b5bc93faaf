import asyncio
from datetime import date
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

from agenda.models import Appointment
from agenda.services.exceptions import AppointmentNotFound, RaceLost
from agenda.services.supabase_service import SupabaseService

from conftest import PROFESSIONAL_ID


class FakeQuery:
    """Records chained query-builder calls and returns canned data."""

    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error
        self.calls = []

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args))
            return self

        return method

    def execute(self):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=self.data)


def _service(query: FakeQuery) -> SupabaseService:
    tables = []
    client = SimpleNamespace(table=lambda name: tables.append(name) or query)
    service = SupabaseService(url="http://localhost", key="test", client=client)
    service.tables = tables
    return service


def _unique_violation() -> APIError:
    return APIError({
        "code": "23505",
        "message": 'duplicate key value violates unique constraint "appointments_unique_active_slot"',
        "details": None,
        "hint": None,
    })


def _appointment() -> Appointment:
    return Appointment(
        profile_id=PROFESSIONAL_ID,
        client_id="c-1",
        appointment_date="2024-06-11",
        appointment_time="09:00",
        price=150,
    )


def test_get_appointments_filters_by_date_and_status(make_row) -> None:
    row = make_row()
    query = FakeQuery(data=[row])
    service = _service(query)

    rows = asyncio.run(service.get_appointments(PROFESSIONAL_ID, on_date=date(2024, 6, 11), include_cancelled=False))

    assert rows == [row]
    assert service.tables == ["appointments"]
    assert ("eq", ("profile_id", PROFESSIONAL_ID)) in query.calls
    assert ("eq", ("appointment_date", "2024-06-11")) in query.calls
    assert ("neq", ("status", "cancelled")) in query.calls


def test_get_appointments_range() -> None:
    query = FakeQuery(data=None)

    rows = asyncio.run(
        _service(query).get_appointments(PROFESSIONAL_ID, start_date=date(2024, 6, 9), end_date=date(2024, 7, 10))
    )

    assert rows == []
    assert ("gte", ("appointment_date", "2024-06-09")) in query.calls
    assert ("lte", ("appointment_date", "2024-07-10")) in query.calls
    assert not any(name == "neq" for name, _ in query.calls)


def test_get_profile(profile) -> None:
    query = FakeQuery(data=profile.model_dump())

    result = asyncio.run(_service(query).get_profile(PROFESSIONAL_ID))

    assert result == profile


def test_missing_profile_is_none() -> None:
    assert asyncio.run(_service(FakeQuery(data=None)).get_profile(PROFESSIONAL_ID)) is None


def test_create_appointment_returns_stored_row(make_row) -> None:
    stored = make_row(appointment_date="2024-06-11", appointment_time="09:00:00")
    query = FakeQuery(data=[stored])

    created = asyncio.run(_service(query).create_appointment(_appointment()))

    assert created.id == stored["id"]
    assert created.appointment_time == "09:00"
    [(_, (payload,))] = [call for call in query.calls if call[0] == "insert"]
    assert payload["status"] == "scheduled"
    assert payload["payment_status"] == "pending"
    assert "id" not in payload
    assert "client_name" not in payload


def test_unique_violation_on_insert_is_race_lost() -> None:
    query = FakeQuery(error=_unique_violation())

    with pytest.raises(RaceLost) as exc_info:
        asyncio.run(_service(query).create_appointment(_appointment()))

    assert isinstance(exc_info.value.cause, APIError)


def test_other_store_errors_propagate() -> None:
    query = FakeQuery(error=APIError({"code": "42501", "message": "permission denied"}))

    with pytest.raises(APIError):
        asyncio.run(_service(query).create_appointment(_appointment()))


def test_update_of_missing_appointment_raises_not_found() -> None:
    with pytest.raises(AppointmentNotFound):
        asyncio.run(_service(FakeQuery(data=[])).update_appointment("missing", {"status": "completed"}))


def test_unique_violation_on_update_is_race_lost() -> None:
    query = FakeQuery(error=_unique_violation())

    with pytest.raises(RaceLost):
        asyncio.run(_service(query).update_appointment("a-1", {"status": "scheduled"}))
