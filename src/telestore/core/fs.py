"""Hierarchical file store on top of a flat Telegram channel.

The index (path -> remote location) is the only source of truth. It lives in
memory for the session and is flushed in full to the pinned message after
every mutation. There is no rollback: if content was changed remotely but the
flush failed, the in-memory index stays authoritative and the next
successful flush reconciles the channel.
"""

from __future__ import annotations

import asyncio
import logging
import posixpath
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import BinaryIO

import httpx

from telestore.core.channel import Channel, TelegramChannel
from telestore.core.config import (
    DOWNLOAD_CHUNK_SIZE,
    INDEX_FILENAME,
    TELESTORE_BOT_TOKEN,
    TELESTORE_CHANNEL_ID,
    TELESTORE_DOWNLOAD_TIMEOUT,
    TELESTORE_NAME,
    TELESTORE_ROOT,
    validate_environment,
)
from telestore.core.errors import (
    IndexPersistError,
    InitializationError,
    InvalidPathError,
    ObjectNotFoundError,
    RemoteTransferError,
    StoreError,
)
from telestore.core.index import IndexStore
from telestore.core.paths import (
    ROOT,
    clean_path,
    files_in_directory,
    is_within,
    join_path,
    relative_to,
)
from telestore.core.types import (
    DirEntry,
    Directory,
    FileObject,
    IndexRecord,
    to_unix,
)

logger = logging.getLogger(__name__)

Content = bytes | bytearray | BinaryIO


def _read_content(content: Content) -> bytes:
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)
    return content.read()


def _declared_size(size: int | None, data: bytes) -> int:
    # Unknown sizes are reported as None or a negative number
    if size is None or size < 0:
        return len(data)
    return size


def _object_name(key: str) -> str:
    return posixpath.basename(key) + ".file"


def _new_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(TELESTORE_DOWNLOAD_TIMEOUT), follow_redirects=True
    )


async def _download(http: httpx.AsyncClient, url: str) -> bytes:
    try:
        response = await http.get(url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        # The URL embeds the bot token, keep it out of messages
        raise RemoteTransferError(f"Download failed: {type(exc).__name__}") from exc
    return response.content


class ChannelFS:
    """File store whose files are messages in one channel.

    Paths given to every method are relative to ``root``; the index keys are
    the full paths. Directories are never stored, they are inferred from the
    keys when listing.

    Example:
        async with TelegramChannel.from_token(token, channel_id) as channel:
            fs = await ChannelFS.connect(channel)
            await fs.put("docs/readme.txt", b"hello")
            entries = await fs.list("docs")
    """

    precision = timedelta(seconds=1)
    hashes: frozenset[str] = frozenset()

    def __init__(
        self,
        channel: Channel,
        index: IndexStore,
        index_message_id: int,
        root: str = ROOT,
        name: str = TELESTORE_NAME,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the filesystem over an already loaded index.

        Prefer ``ChannelFS.connect``, which finds or creates the index.

        Args:
            channel: Remote channel adapter
            index: Loaded index
            index_message_id: Message carrying the index document
            root: Path inside the index that this filesystem exposes
            name: Name of this filesystem
            http_client: Client used for downloads (created if omitted)
        """
        self.channel = channel
        self.index = index
        self.index_message_id = index_message_id
        self.root = clean_path(root)
        self.name = name
        self._owns_http = http_client is None
        self._http = http_client or _new_http_client()
        self._flush_lock = asyncio.Lock()

    @classmethod
    async def connect(
        cls,
        channel: Channel,
        root: str = ROOT,
        name: str = TELESTORE_NAME,
        http_client: httpx.AsyncClient | None = None,
    ) -> ChannelFS:
        """
        Load the channel's index, creating and pinning an empty one if the
        channel has never been used.

        Raises:
            InitializationError: If the channel can't be reached or the index
                can't be read or decoded.
        """
        owns_http = http_client is None
        http = http_client or _new_http_client()
        try:
            pinned = await channel.fetch_pinned()
            if pinned is None:
                logger.info("No pinned index in %s, creating one", channel)
                index = IndexStore()
                pinned = await channel.upload_new_object(
                    INDEX_FILENAME, index.serialize()
                )
                await channel.pin_object(pinned.message_id)
            else:
                url = await channel.resolve_download_url(pinned.file_id)
                index = IndexStore.deserialize(await _download(http, url))
        except InitializationError:
            if owns_http:
                await http.aclose()
            raise
        except StoreError as exc:
            if owns_http:
                await http.aclose()
            raise InitializationError(f"Failed to load index: {exc}") from exc

        logger.info(
            "Loaded index from message %d with %d entries",
            pinned.message_id,
            len(index),
        )
        fs = cls(channel, index, pinned.message_id, root=root, name=name, http_client=http)
        fs._owns_http = owns_http
        return fs

    async def close(self) -> None:
        """Release the download client and the channel."""
        if self._owns_http:
            await self._http.aclose()
        await self.channel.close()

    async def __aenter__(self) -> ChannelFS:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _key(self, path: str) -> str:
        key = join_path(self.root, path)
        if not is_within(self.root, key):
            raise InvalidPathError(path)
        return key

    def _file_key(self, path: str) -> str:
        key = self._key(path)
        if key == self.root:
            raise InvalidPathError(path, "names the filesystem root")
        return key

    def _require(self, key: str) -> IndexRecord:
        record = self.index.get(key)
        if record is None:
            raise ObjectNotFoundError(relative_to(self.root, key))
        return record

    def _object(self, key: str, record: IndexRecord) -> FileObject:
        return FileObject(
            remote=relative_to(self.root, key),
            key=key,
            size=record.size,
            mod_time=record.modified_at,
        )

    async def flush(self) -> None:
        """
        Replace the pinned index document with the current index.

        Flushes run one at a time and each serializes the index when it
        starts, so the last flush always carries the newest state.

        Raises:
            IndexPersistError: If the index could not be written.
        """
        async with self._flush_lock:
            data = self.index.serialize()
            try:
                await self.channel.replace_object_in_place(
                    self.index_message_id, INDEX_FILENAME, data
                )
            except RemoteTransferError as exc:
                logger.error("Index flush failed: %s", exc)
                raise IndexPersistError(f"Failed to persist index: {exc}") from exc
        logger.debug("Flushed index (%d bytes)", len(data))

    async def list(self, dir: str = "") -> list[DirEntry]:
        """
        List the files and inferred subdirectories of a directory.

        A directory with no entries and a directory that doesn't exist both
        return an empty list.
        """
        query = self._key(dir)
        snapshot = self.index.snapshot()
        files, directories = files_in_directory(snapshot, query)

        now = datetime.now(UTC)
        entries: list[DirEntry] = []
        for directory in sorted(directories):
            key = directory if query == ROOT else f"{query}/{directory}"
            entries.append(Directory(remote=relative_to(self.root, key), mod_time=now))
        for key in sorted(files):
            entries.append(self._object(key, snapshot[key]))
        return entries

    async def stat(self, path: str) -> FileObject:
        """Return the file at path, raising ObjectNotFoundError if absent."""
        key = self._file_key(path)
        return self._object(key, self._require(key))

    async def put(
        self,
        path: str,
        content: Content,
        size: int | None = None,
        mod_time: datetime | None = None,
    ) -> FileObject:
        """
        Upload content as a new object at path.

        Args:
            path: Destination path
            content: Bytes or a binary file object
            size: Declared size (defaults to the content length)
            mod_time: Modification time to record (defaults to now)

        Returns:
            The stored file.

        Raises:
            InvalidPathError: If path is the root or leaves it.
            RemoteTransferError: If the upload failed; nothing is recorded.
            IndexPersistError: If the upload succeeded but the index flush
                failed; the file is recorded in memory only.
        """
        key = self._file_key(path)
        data = _read_content(content)
        previous = self.index.get(key)

        remote = await self.channel.upload_new_object(_object_name(key), data)
        record = IndexRecord(
            file_id=remote.file_id,
            message_id=remote.message_id,
            size=_declared_size(size, data),
            mod_time=to_unix(mod_time or datetime.now(UTC)),
        )
        self.index.update(key, record)
        await self.flush()

        if previous is not None and previous.message_id != record.message_id:
            await self._discard_message(previous.message_id)

        logger.info("Stored %s (%d bytes) in message %d", key, record.size, remote.message_id)
        return self._object(key, record)

    async def _discard_message(self, message_id: int) -> None:
        try:
            await self.channel.delete_message(message_id)
        except RemoteTransferError as exc:
            logger.warning("Failed to delete superseded message %d: %s", message_id, exc)

    async def update(
        self, path: str, content: Content, size: int | None = None
    ) -> FileObject:
        """
        Replace the content of an existing file in place.

        The message keeps its ID; size and file ID are refreshed, the
        modification time is left alone. The record is re-read after the
        edit, so changes made to it meanwhile are kept. If a concurrent put
        moved the file to another message, that put wins.

        Raises:
            ObjectNotFoundError: If path has no record (no remote call made),
                or it was removed while the edit was in flight.
        """
        key = self._file_key(path)
        message_id = self._require(key).message_id
        data = _read_content(content)
        size = _declared_size(size, data)

        remote = await self.channel.replace_object_in_place(
            message_id, _object_name(key), data
        )

        def _refresh(current: IndexRecord) -> IndexRecord:
            if current.message_id != message_id:
                logger.warning(
                    "%s moved to message %d during update, keeping it",
                    key,
                    current.message_id,
                )
                return current
            return current.with_size(size, file_id=remote.file_id)

        record = self.index.modify(key, _refresh)
        if record is None:
            raise ObjectNotFoundError(relative_to(self.root, key))
        await self.flush()
        return self._object(key, record)

    async def set_mod_time(self, path: str, mod_time: datetime) -> FileObject:
        """Change the recorded modification time of a file."""
        key = self._file_key(path)
        record = self.index.modify(key, lambda current: current.with_mod_time(mod_time))
        if record is None:
            raise ObjectNotFoundError(relative_to(self.root, key))
        await self.flush()
        return self._object(key, record)

    @asynccontextmanager
    async def open(
        self, path: str, chunk_size: int = DOWNLOAD_CHUNK_SIZE
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """
        Stream the content of a file.

        Example:
            async with fs.open("docs/readme.txt") as chunks:
                async for chunk in chunks:
                    ...
        """
        key = self._file_key(path)
        record = self._require(key)
        url = await self.channel.resolve_download_url(record.file_id)

        try:
            async with self._http.stream("GET", url) as response:
                response.raise_for_status()
                yield response.aiter_bytes(chunk_size)
        except httpx.HTTPError as exc:
            raise RemoteTransferError(
                f"Download of {path} failed: {type(exc).__name__}"
            ) from exc

    async def read(self, path: str) -> bytes:
        """Read the whole content of a file."""
        async with self.open(path) as chunks:
            return b"".join([chunk async for chunk in chunks])

    async def remove(self, path: str) -> None:
        """
        Delete a file.

        The remote message is deleted first; the index only forgets the file
        once that succeeded.
        """
        key = self._file_key(path)
        record = self._require(key)

        await self.channel.delete_message(record.message_id)
        self.index.remove(key)
        await self.flush()
        logger.info("Removed %s", key)

    async def mkdir(self, dir: str) -> None:
        """Directories are inferred from file paths; nothing to create."""

    async def rmdir(self, dir: str) -> None:
        """Directories are inferred from file paths; nothing to remove."""

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ChannelFS({self.name!r}, root={self.root!r})"


# Default instance
_filesystem: ChannelFS | None = None
_filesystem_lock = asyncio.Lock()


async def open_filesystem() -> ChannelFS:
    """Get the default filesystem, connecting from configuration if needed."""
    global _filesystem
    async with _filesystem_lock:
        if _filesystem is not None:
            return _filesystem

        is_valid, message = validate_environment()
        if not is_valid or not TELESTORE_BOT_TOKEN:
            raise InitializationError(message or "Missing TELESTORE_BOT_TOKEN")

        channel = TelegramChannel.from_token(TELESTORE_BOT_TOKEN, TELESTORE_CHANNEL_ID)
        await channel.connect()
        try:
            _filesystem = await ChannelFS.connect(
                channel, root=TELESTORE_ROOT, name=TELESTORE_NAME
            )
        except StoreError:
            await channel.close()
            raise
        return _filesystem


def get_filesystem() -> ChannelFS:
    """Get the default filesystem instance (must be opened first)."""
    if _filesystem is None:
        raise InitializationError("Filesystem not initialized")
    return _filesystem


def set_filesystem(fs: ChannelFS | None) -> None:
    """Set the default filesystem instance (for testing)."""
    global _filesystem
    _filesystem = fs


async def close_filesystem() -> None:
    """Close and forget the default filesystem."""
    global _filesystem
    if _filesystem is not None:
        fs, _filesystem = _filesystem, None
        await fs.close()
