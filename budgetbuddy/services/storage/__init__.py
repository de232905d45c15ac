"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a local JSON file as the backend, but designed to be swappable.
"""

from budgetbuddy.services.storage.interface import (
    AuditStorageInterface,
    SerializationError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    UserDataStorageInterface,
)
from budgetbuddy.services.storage.json_file import JsonFileStorage
from budgetbuddy.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "UserDataStorageInterface",
    # Exceptions
    "SerializationError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "JsonFileStorage",
]
