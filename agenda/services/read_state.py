"""
Read-state of derived notifications.

Which notifications a professional has acknowledged is kept apart from the
appointment data, in a small local key-value store. Each professional has
one entry holding a JSON list of notification identities.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Protocol

from ..models import parse_notification_key
from ..models.notification import NotificationKey

logger = logging.getLogger(__name__)

STORAGE_KEY_PREFIX = "read_notifications_"


class KeyValueBackend(Protocol):
    """Synchronous local key-value storage."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryBackend:
    """Process-local backend, used in tests and for ephemeral sessions."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileBackend:
    """Durable backend storing one JSON file per key in a directory."""

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        # Write then rename so readers never see a partial file
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, self._path(key))
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class ReadStateStore:
    """Acknowledged notification keys of one professional."""

    def __init__(self, backend: KeyValueBackend, professional_id: str):
        """
        Initialize the store.

        Args:
            backend: Key-value storage
            professional_id: Owner of the read-state
        """
        self.backend = backend
        self.professional_id = professional_id
        self._listeners: List[Callable[[], None]] = []

    @property
    def storage_key(self) -> str:
        return f"{STORAGE_KEY_PREFIX}{self.professional_id}"

    def on_change(self, listener: Callable[[], None]) -> None:
        """Register a callback fired after the stored state changes."""
        self._listeners.append(listener)

    def read_keys(self) -> set:
        """All acknowledged keys."""
        raw = self.backend.get(self.storage_key)
        if not raw:
            return set()

        try:
            identities = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt read-state for {self.professional_id}, ignoring it: {e}")
            return set()

        if not isinstance(identities, list):
            logger.error(f"Unexpected read-state for {self.professional_id}, ignoring it")
            return set()

        keys = set()
        for identity in identities:
            try:
                keys.add(parse_notification_key(str(identity)))
            except ValueError:
                logger.warning(f"Dropping unknown notification id {identity!r}")
        return keys

    def is_read(self, key: NotificationKey) -> bool:
        return key in self.read_keys()

    def mark_read(self, key: NotificationKey) -> bool:
        """
        Acknowledge one notification.

        Returns:
            True if the state changed, False if it was already read
        """
        return self.mark_many_read([key])

    def mark_many_read(self, keys: Iterable[NotificationKey]) -> bool:
        """
        Acknowledge several notifications at once.

        Nothing is written and no listener fires when all were read.

        Returns:
            True if the state changed
        """
        current = self.read_keys()
        updated = current | set(keys)
        if updated == current:
            return False

        self._save(updated)
        return True

    def clear(self) -> None:
        """Forget every acknowledgement."""
        self.backend.delete(self.storage_key)
        self._notify()

    def gc(self, active_keys: Iterable[NotificationKey]) -> int:
        """
        Drop acknowledgements for notifications no longer derived.

        Concluded notices leave the feed a day after the appointment, so
        without this the stored set would only grow.

        Args:
            active_keys: Keys of the current feed

        Returns:
            Number of keys removed
        """
        current = self.read_keys()
        kept = current & set(active_keys)
        removed = len(current) - len(kept)
        if removed:
            self._save(kept)
            logger.debug(f"Removed {removed} stale read-state entries for {self.professional_id}")
        return removed

    def _save(self, keys: set) -> None:
        identities = sorted(key.identity for key in keys)
        self.backend.set(self.storage_key, json.dumps(identities))
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()
