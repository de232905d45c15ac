"""
In-Memory Storage

Keeps the serialized document in a dict rather than on disk. The snapshot
still goes through the same JSON encoding as the file backend, so a
session backed by this storage exercises the real document format.

Used by tests and by sessions that should not touch the disk.
"""

from typing import Optional

from pydantic import ValidationError

from budgetbuddy.models.audit import AuditEvent
from budgetbuddy.models.budget import UserData
from budgetbuddy.services.storage.interface import (
    AuditStorageInterface,
    SerializationError,
    StorageWriteError,
    UserDataStorageInterface,
)


class InMemoryStorage(UserDataStorageInterface):
    """
    Dict-backed storage slot.

    Set `fail_writes` to make every save raise StorageWriteError, which
    is how tests simulate a full or read-only disk.
    """

    def __init__(self, storage_key: str = "budgetTrackerData"):
        self.storage_key = storage_key
        self.documents: dict[str, str] = {}
        self.fail_writes = False
        self.save_count = 0

    def save(self, user_data: UserData) -> None:
        if self.fail_writes:
            raise StorageWriteError("Simulated write failure")
        self.documents[self.storage_key] = user_data.to_document()
        self.save_count += 1

    def load(self) -> Optional[UserData]:
        document = self.documents.get(self.storage_key)
        if document is None:
            return None
        try:
            return UserData.from_document(document)
        except ValidationError as e:
            raise SerializationError(f"Stored document is invalid: {e}") from e

    def clear(self) -> None:
        self.documents.pop(self.storage_key, None)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit trail held in a list."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
