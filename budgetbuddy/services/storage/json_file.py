"""
Local JSON File Storage

DESIGN DECISION: The user's whole budget lives in a single JSON document
on the local disk, under a fixed key. This is the same shape the
original app kept in browser storage, so an exported blob loads as-is.

Writes are write-through and synchronous. With atomic writes enabled the
document is written to a temp file next to the target, fsynced and then
renamed over the previous snapshot, so a crash mid-write leaves the prior
snapshot intact.

TRADEOFFS:
- One document means every save rewrites everything (fine for one user)
- No history; the audit log covers that
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from budgetbuddy.config import StorageSettings, get_settings
from budgetbuddy.models.budget import UserData
from budgetbuddy.services.storage.interface import (
    SerializationError,
    StorageReadError,
    StorageWriteError,
    UserDataStorageInterface,
)


logger = structlog.get_logger(__name__)


class JsonFileStorage(UserDataStorageInterface):
    """
    Persists UserData as `{data_dir}/{storage_key}.json`.

    Failed writes are retried with exponential backoff before being
    reported as StorageWriteError.
    """

    def __init__(self, settings: Optional[StorageSettings] = None):
        self._settings = settings or get_settings().storage

    @property
    def path(self) -> Path:
        """Location of the persisted document."""
        return Path(self._settings.data_dir) / f"{self._settings.storage_key}.json"

    def save(self, user_data: UserData) -> None:
        try:
            document = user_data.to_document()
        except (PydanticSerializationError, ValueError, TypeError) as e:
            raise SerializationError(f"Could not serialize user data: {e}") from e

        retrying = Retrying(
            stop=stop_after_attempt(self._settings.write_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            retrying(self._write, document)
        except OSError as e:
            logger.error("storage_write_failed", path=str(self.path), error=str(e))
            raise StorageWriteError(f"Could not write {self.path}: {e}") from e

        logger.debug("storage_saved", path=str(self.path), size=len(document))

    def load(self) -> Optional[UserData]:
        path = self.path
        if not path.exists():
            return None

        try:
            document = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageReadError(f"Could not read {path}: {e}") from e

        try:
            return UserData.from_document(document)
        except ValidationError as e:
            raise SerializationError(f"Stored document at {path} is invalid: {e}") from e

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Could not remove {self.path}: {e}") from e

    def _write(self, document: str) -> None:
        """Write the document, atomically if configured."""
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)

        if not self._settings.atomic_writes:
            path.write_text(document, encoding="utf-8")
            return

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}.",
            suffix=".tmp",
            dir=path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(document)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except OSError:
            # Leave the previous snapshot alone and drop the partial file
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "storage_write_retry",
            path=str(self.path),
            attempt=retry_state.attempt_number,
            error=str(error),
        )
