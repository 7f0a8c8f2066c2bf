"""telestore core library - index, channel adapter and filesystem."""

from typing import TYPE_CHECKING

from telestore.core.errors import (
    IndexFormatError,
    IndexPersistError,
    InitializationError,
    InvalidPathError,
    ObjectNotFoundError,
    RemoteTransferError,
    StoreError,
)
from telestore.core.types import (
    Directory,
    FileObject,
    IndexDocument,
    IndexRecord,
    RemoteObject,
)

if TYPE_CHECKING:
    from telestore.core.channel import Channel, TelegramChannel
    from telestore.core.fs import ChannelFS
    from telestore.core.index import IndexStore

__all__ = [
    # Core classes
    "Channel",
    "ChannelFS",
    "IndexStore",
    "TelegramChannel",
    # Types
    "Directory",
    "FileObject",
    "IndexDocument",
    "IndexRecord",
    "RemoteObject",
    # Errors
    "IndexFormatError",
    "IndexPersistError",
    "InitializationError",
    "InvalidPathError",
    "ObjectNotFoundError",
    "RemoteTransferError",
    "StoreError",
]


def __getattr__(name: str):
    if name == "ChannelFS":
        from telestore.core.fs import ChannelFS

        return ChannelFS
    if name == "IndexStore":
        from telestore.core.index import IndexStore

        return IndexStore
    if name in ("Channel", "TelegramChannel"):
        from telestore.core import channel

        return getattr(channel, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
