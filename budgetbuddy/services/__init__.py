"""Services package."""

from budgetbuddy.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryStorage,
    JsonFileStorage,
    SerializationError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    UserDataStorageInterface,
)
from budgetbuddy.services.suggestions import (
    DEMO_EXPENSES,
    StaticSuggestionProvider,
    SuggestionProvider,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    "SerializationError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "UserDataStorageInterface",
    # Suggestion services
    "DEMO_EXPENSES",
    "StaticSuggestionProvider",
    "SuggestionProvider",
]
