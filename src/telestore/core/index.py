"""In-memory file index with JSON persistence."""

import logging
from collections.abc import Callable
from threading import Lock

from pydantic import ValidationError

from telestore.core.errors import IndexFormatError
from telestore.core.types import IndexDocument, IndexRecord

logger = logging.getLogger(__name__)


class IndexStore:
    """Maps virtual paths to the remote location of their content.

    All access to the mapping goes through one lock. The lock is never held
    across a remote call, so it is safe to use from threads and tasks alike.
    """

    def __init__(self, files: dict[str, IndexRecord] | None = None):
        self._files: dict[str, IndexRecord] = dict(files or {})
        self._lock = Lock()

    def get(self, key: str) -> IndexRecord | None:
        """Return the record for key, or None if it is not indexed."""
        with self._lock:
            return self._files.get(key)

    def update(self, key: str, record: IndexRecord) -> None:
        """Insert or overwrite the record for key."""
        with self._lock:
            self._files[key] = record

    def modify(
        self, key: str, change: Callable[[IndexRecord], IndexRecord]
    ) -> IndexRecord | None:
        """
        Replace the record for key with change(record), atomically.

        Returns:
            The new record, or None (and nothing changed) if key is absent.
        """
        with self._lock:
            record = self._files.get(key)
            if record is None:
                return None
            updated = change(record)
            self._files[key] = updated
            return updated

    def remove(self, key: str) -> IndexRecord | None:
        """Drop key if present; returns the removed record."""
        with self._lock:
            return self._files.pop(key, None)

    def snapshot(self) -> dict[str, IndexRecord]:
        """Copy of the current mapping."""
        with self._lock:
            return dict(self._files)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._files)

    def __len__(self) -> int:
        with self._lock:
            return len(self._files)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._files

    def serialize(self) -> bytes:
        """Encode the mapping as the persisted index document."""
        document = IndexDocument(files=self.snapshot())
        return document.model_dump_json().encode("utf-8")

    @classmethod
    def deserialize(cls, data: bytes) -> "IndexStore":
        """
        Decode an index document.

        Raises:
            IndexFormatError: If data is not a valid index document.
        """
        try:
            document = IndexDocument.model_validate_json(data)
        except ValidationError as exc:
            raise IndexFormatError(f"Invalid index document: {exc}") from exc

        logger.debug("Decoded index with %d entries", len(document.files))
        return cls(document.files)

    def __repr__(self) -> str:
        return f"IndexStore({len(self)} entries)"
