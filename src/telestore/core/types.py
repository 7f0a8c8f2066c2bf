"""Shared types and data structures for telestore."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


def to_unix(moment: datetime) -> int:
    """Convert a datetime to whole unix seconds (naive values are taken as UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp())


def from_unix(seconds: int) -> datetime:
    """Convert unix seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=UTC)


class IndexRecord(BaseModel):
    """Remote location and metadata of one stored file."""

    model_config = ConfigDict(frozen=True)

    file_id: str
    message_id: int
    size: int = Field(ge=0)
    mod_time: int

    @property
    def modified_at(self) -> datetime:
        return from_unix(self.mod_time)

    def with_size(self, size: int, file_id: str | None = None) -> IndexRecord:
        """Copy with a new size and, when given, a refreshed file handle."""
        update: dict[str, object] = {"size": size}
        if file_id is not None:
            update["file_id"] = file_id
        return self.model_copy(update=update)

    def with_mod_time(self, moment: datetime) -> IndexRecord:
        """Copy with a new modification time, truncated to seconds."""
        return self.model_copy(update={"mod_time": to_unix(moment)})


class IndexDocument(BaseModel):
    """Persisted shape of the index: ``{"files": {path: record}}``."""

    files: dict[str, IndexRecord] = Field(default_factory=dict)


@dataclass(frozen=True)
class RemoteObject:
    """A channel message and the attachment it carries."""

    message_id: int
    file_id: str


@dataclass(frozen=True)
class FileObject:
    """Ephemeral view of one file, rebuilt from the index on every call."""

    remote: str
    key: str
    size: int
    mod_time: datetime

    @property
    def name(self) -> str:
        return self.remote.rsplit("/", 1)[-1]

    def to_dict(self) -> dict[str, str | int]:
        """Convert to dictionary for serialization."""
        return {
            "kind": "file",
            "path": self.remote,
            "size": self.size,
            "mod_time": to_unix(self.mod_time),
        }


@dataclass(frozen=True)
class Directory:
    """Inferred directory; has no stored modification time."""

    remote: str
    mod_time: datetime

    @property
    def name(self) -> str:
        return self.remote.rsplit("/", 1)[-1]

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert to dictionary for serialization."""
        return {
            "kind": "dir",
            "path": self.remote,
            "size": None,
            "mod_time": to_unix(self.mod_time),
        }


DirEntry = FileObject | Directory

__all__ = [
    "DirEntry",
    "Directory",
    "FileObject",
    "IndexDocument",
    "IndexRecord",
    "RemoteObject",
    "from_unix",
    "to_unix",
]
