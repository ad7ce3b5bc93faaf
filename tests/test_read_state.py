import json

import pytest

from agenda.models import ConcludedReminder, UpcomingReminder
from agenda.services.read_state import FileBackend, MemoryBackend, ReadStateStore

from conftest import OTHER_PROFESSIONAL_ID, PROFESSIONAL_ID

APPOINTMENT_ID = "0b7e4c2a-91d3-4f5e-8a6b-3c2d1e0f9a87"
REMINDER = UpcomingReminder(appointment_id=APPOINTMENT_ID, lead_hours=24)
CONCLUDED = ConcludedReminder(appointment_id=APPOINTMENT_ID)


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend) -> ReadStateStore:
    return ReadStateStore(backend, PROFESSIONAL_ID)


def test_mark_read_is_idempotent(store) -> None:
    changes = []
    store.on_change(lambda: changes.append(True))

    assert store.mark_read(REMINDER) is True
    assert store.mark_read(REMINDER) is False

    assert store.is_read(REMINDER)
    assert len(changes) == 1


def test_mark_many_read_only_notifies_on_change(store) -> None:
    changes = []
    store.on_change(lambda: changes.append(True))

    assert store.mark_many_read([REMINDER, CONCLUDED]) is True
    assert store.mark_many_read([CONCLUDED]) is False
    assert store.mark_many_read([]) is False

    assert store.read_keys() == {REMINDER, CONCLUDED}
    assert len(changes) == 1


def test_stored_format_is_a_json_list_of_ids(store, backend) -> None:
    store.mark_many_read([REMINDER, CONCLUDED])

    stored = json.loads(backend.get(f"read_notifications_{PROFESSIONAL_ID}"))

    assert sorted(stored) == [f"{APPOINTMENT_ID}-24", f"{APPOINTMENT_ID}-past"]


def test_different_tiers_are_different_keys(store) -> None:
    store.mark_read(REMINDER)

    assert not store.is_read(UpcomingReminder(appointment_id=APPOINTMENT_ID, lead_hours=2))
    assert not store.is_read(CONCLUDED)


def test_state_is_scoped_per_professional(store, backend) -> None:
    store.mark_read(REMINDER)

    assert ReadStateStore(backend, OTHER_PROFESSIONAL_ID).read_keys() == set()


def test_clear_forgets_everything(store) -> None:
    changes = []
    store.mark_read(REMINDER)
    store.on_change(lambda: changes.append(True))

    store.clear()

    assert store.read_keys() == set()
    assert changes == [True]


def test_gc_keeps_only_active_keys(store) -> None:
    stale = ConcludedReminder(appointment_id="e2a1b3c4-0000-4000-8000-000000000001")
    store.mark_many_read([REMINDER, stale])

    assert store.gc({REMINDER, CONCLUDED}) == 1
    assert store.read_keys() == {REMINDER}


def test_gc_without_stale_keys_does_not_write(store) -> None:
    store.mark_read(REMINDER)
    changes = []
    store.on_change(lambda: changes.append(True))

    assert store.gc({REMINDER}) == 0
    assert changes == []


@pytest.mark.parametrize("raw", ["{not json", '{"a": 1}', '"text"'])
def test_corrupt_state_reads_as_empty(backend, raw: str) -> None:
    store = ReadStateStore(backend, PROFESSIONAL_ID)
    backend.set(store.storage_key, raw)

    assert store.read_keys() == set()
    assert store.mark_read(REMINDER) is True
    assert store.read_keys() == {REMINDER}


def test_unknown_ids_are_dropped(backend) -> None:
    store = ReadStateStore(backend, PROFESSIONAL_ID)
    backend.set(store.storage_key, json.dumps([f"{APPOINTMENT_ID}-24", "garbage", f"{APPOINTMENT_ID}-0"]))

    assert store.read_keys() == {REMINDER}


def test_file_backend_persists_across_instances(tmp_path) -> None:
    directory = tmp_path / "read_state"

    ReadStateStore(FileBackend(str(directory)), PROFESSIONAL_ID).mark_read(CONCLUDED)
    reopened = ReadStateStore(FileBackend(str(directory)), PROFESSIONAL_ID)

    assert reopened.read_keys() == {CONCLUDED}
    assert [p.name for p in directory.iterdir()] == [f"read_notifications_{PROFESSIONAL_ID}.json"]


def test_file_backend_delete_is_idempotent(tmp_path) -> None:
    backend = FileBackend(str(tmp_path))

    backend.delete("missing")
    backend.set("key", "value")
    backend.delete("key")

    assert backend.get("key") is None
