"""Shared test fixtures and configuration."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from telestore.core.errors import RemoteTransferError
from telestore.core.fs import ChannelFS
from telestore.core.types import RemoteObject

DOWNLOAD_BASE_URL = "https://files.test/file/"


class FakeChannel:
    """In-memory channel: messages carry one attachment each."""

    def __init__(self):
        self.messages: dict[int, tuple[str, str]] = {}  # message_id -> (name, file_id)
        self.files: dict[str, bytes] = {}  # file_id -> content
        self.pinned: int | None = None
        self.calls: list[str] = []
        self.fail_on: set[str] = set()
        self.closed = False
        self.edit_delays: dict[int, list[float]] = {}  # message_id -> per-edit delays
        self._next_message_id = 1
        self._edits = 0

    def _call(self, op: str, *aliases: str) -> None:
        self.calls.append(op)
        for name in (op, *aliases):
            if name in self.fail_on:
                raise RemoteTransferError(f"{name} failed")

    async def upload_new_object(self, name: str, data: bytes) -> RemoteObject:
        self._call("upload")
        message_id = self._next_message_id
        self._next_message_id += 1
        file_id = f"file-{message_id}-0"
        self.messages[message_id] = (name, file_id)
        self.files[file_id] = data
        return RemoteObject(message_id=message_id, file_id=file_id)

    async def pin_object(self, message_id: int) -> None:
        self._call("pin")
        self.pinned = message_id

    async def fetch_pinned(self) -> RemoteObject | None:
        self._call("fetch_pinned")
        if self.pinned is None:
            return None
        _, file_id = self.messages[self.pinned]
        return RemoteObject(message_id=self.pinned, file_id=file_id)

    async def resolve_download_url(self, file_id: str) -> str:
        self._call("resolve")
        return DOWNLOAD_BASE_URL + file_id

    async def replace_object_in_place(
        self, message_id: int, name: str, data: bytes
    ) -> RemoteObject:
        self._call("replace", f"replace:{message_id}")
        delays = self.edit_delays.get(message_id)
        if delays:
            await asyncio.sleep(delays.pop(0))
        if message_id not in self.messages:
            raise RemoteTransferError(f"No message {message_id}")
        self._edits += 1
        file_id = f"file-{message_id}-{self._edits}"
        self.messages[message_id] = (name, file_id)
        self.files[file_id] = data
        return RemoteObject(message_id=message_id, file_id=file_id)

    async def delete_message(self, message_id: int) -> None:
        self._call("delete")
        if self.messages.pop(message_id, None) is None:
            raise RemoteTransferError(f"No message {message_id}")

    async def close(self) -> None:
        self.closed = True

    # Test helpers

    def content_of(self, message_id: int) -> bytes:
        _, file_id = self.messages[message_id]
        return self.files[file_id]

    def pinned_index(self) -> dict:
        """Decode the index document currently attached to the pinned message."""
        assert self.pinned is not None
        return json.loads(self.content_of(self.pinned))

    def seed_index(self, document: dict) -> int:
        """Store and pin an index document, as a previous session would have."""
        message_id = self._next_message_id
        self._next_message_id += 1
        file_id = f"file-{message_id}-0"
        self.messages[message_id] = ("index.json", file_id)
        self.files[file_id] = json.dumps(document).encode()
        self.pinned = message_id
        return message_id


@pytest.fixture
def channel():
    """Provide an empty in-memory channel."""
    return FakeChannel()


@pytest.fixture
def http_client(channel):
    """HTTP client that serves attachments straight from the fake channel."""

    def _handler(request: httpx.Request) -> httpx.Response:
        file_id = request.url.path.rsplit("/", 1)[-1]
        data = channel.files.get(file_id)
        if data is None:
            return httpx.Response(404)
        return httpx.Response(200, content=data)

    return httpx.AsyncClient(transport=httpx.MockTransport(_handler))


@pytest.fixture
def make_fs(channel, http_client):
    """Factory connecting a ChannelFS to the fake channel."""

    async def _make_fs(root: str = ".") -> ChannelFS:
        return await ChannelFS.connect(channel, root=root, http_client=http_client)

    return _make_fs
