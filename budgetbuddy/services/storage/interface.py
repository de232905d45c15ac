"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the local JSON file for another backend later
2. Use in-memory storage for testing
3. Keep the budget store decoupled from persistence mechanics

The whole UserData aggregate is one document under one fixed key, so the
interface is just save / load / clear.
"""

from abc import ABC, abstractmethod
from typing import Optional

from budgetbuddy.models.budget import UserData
from budgetbuddy.models.audit import AuditEvent


class UserDataStorageInterface(ABC):
    """
    Abstract interface for the persisted user data slot.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def save(self, user_data: UserData) -> None:
        """
        Replace the persisted document with this snapshot.

        Args:
            user_data: The snapshot to persist

        Raises:
            SerializationError: If the snapshot cannot be serialized
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    def load(self) -> Optional[UserData]:
        """
        Read the persisted snapshot.

        Returns:
            The snapshot, or None if nothing has been saved

        Raises:
            SerializationError: If the stored document is corrupt
            StorageReadError: If the slot cannot be read
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """
        Remove the persisted document. Clearing an empty slot is a no-op.

        Raises:
            StorageWriteError: If the document cannot be removed
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SerializationError(StorageError):
    """A snapshot could not be serialized, or a stored document could not be parsed."""
    pass


class StorageWriteError(StorageError):
    """The storage slot could not be written."""
    pass


class StorageReadError(StorageError):
    """The storage slot could not be read."""
    pass
