"""Telegram channel used as a flat object store.

Every stored object is one channel message carrying a single document.
Content updates edit the message's document in place, so the message ID
stays stable while the file ID may change. The pinned message carries the
index.
"""

import logging
from typing import Protocol

from telegram import Bot, InputMediaDocument, Message
from telegram.error import TelegramError

from telestore.core.errors import InitializationError, RemoteTransferError
from telestore.core.types import RemoteObject

logger = logging.getLogger(__name__)


class Channel(Protocol):
    """Operations the filesystem needs from the remote channel."""

    async def upload_new_object(self, name: str, data: bytes) -> RemoteObject: ...

    async def pin_object(self, message_id: int) -> None: ...

    async def fetch_pinned(self) -> RemoteObject | None: ...

    async def resolve_download_url(self, file_id: str) -> str: ...

    async def replace_object_in_place(
        self, message_id: int, name: str, data: bytes
    ) -> RemoteObject: ...

    async def delete_message(self, message_id: int) -> None: ...

    async def close(self) -> None: ...


def _remote_object(message: Message) -> RemoteObject:
    document = message.document
    if document is None:
        raise RemoteTransferError(
            f"Message {message.message_id} does not carry a document"
        )
    return RemoteObject(message_id=message.message_id, file_id=document.file_id)


class TelegramChannel:
    """Channel implementation backed by a python-telegram-bot ``Bot``."""

    def __init__(self, bot: Bot, channel_id: int):
        """
        Initialize channel adapter.

        Args:
            bot: Bot that is an admin of the channel
            channel_id: Chat ID of the channel
        """
        self.bot = bot
        self.channel_id = channel_id

    @classmethod
    def from_token(cls, token: str, channel_id: int) -> "TelegramChannel":
        """Build a channel adapter with a fresh Bot."""
        return cls(Bot(token), channel_id)

    async def connect(self) -> None:
        """Initialize the bot (validates the token with getMe)."""
        try:
            await self.bot.initialize()
        except TelegramError as exc:
            raise InitializationError(f"Failed to connect bot: {exc}") from exc

    async def close(self) -> None:
        await self.bot.shutdown()

    async def __aenter__(self) -> "TelegramChannel":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def upload_new_object(self, name: str, data: bytes) -> RemoteObject:
        """Send a new message carrying data as a document."""
        logger.debug("Uploading %s (%d bytes)", name, len(data))
        try:
            message = await self.bot.send_document(
                chat_id=self.channel_id,
                document=data,
                filename=name,
                disable_notification=True,
            )
        except TelegramError as exc:
            raise RemoteTransferError(f"Upload of {name} failed: {exc}") from exc
        return _remote_object(message)

    async def pin_object(self, message_id: int) -> None:
        """Pin a message as the channel's index anchor."""
        logger.debug("Pinning message %d", message_id)
        try:
            await self.bot.pin_chat_message(
                chat_id=self.channel_id,
                message_id=message_id,
                disable_notification=True,
            )
        except TelegramError as exc:
            raise RemoteTransferError(
                f"Pinning message {message_id} failed: {exc}"
            ) from exc

    async def fetch_pinned(self) -> RemoteObject | None:
        """
        Return the channel's pinned message.

        Returns:
            The pinned message, or None if the channel has none.

        Raises:
            InitializationError: If the channel can't be read or the pinned
                message carries no document.
        """
        try:
            chat = await self.bot.get_chat(chat_id=self.channel_id)
        except TelegramError as exc:
            raise InitializationError(
                f"Failed to read channel {self.channel_id}: {exc}"
            ) from exc

        pinned = chat.pinned_message
        if pinned is None:
            return None
        if pinned.document is None:
            raise InitializationError(
                f"Pinned message {pinned.message_id} in channel "
                f"{self.channel_id} is not an index document"
            )
        return _remote_object(pinned)

    async def resolve_download_url(self, file_id: str) -> str:
        """Get a direct download URL for an attachment."""
        try:
            file = await self.bot.get_file(file_id)
        except TelegramError as exc:
            raise RemoteTransferError(
                f"Resolving download URL failed: {exc}"
            ) from exc
        if not file.file_path:
            raise RemoteTransferError(f"No download path for file {file_id}")
        return file.file_path

    async def replace_object_in_place(
        self, message_id: int, name: str, data: bytes
    ) -> RemoteObject:
        """Replace the document of an existing message, keeping its ID."""
        logger.debug("Replacing message %d with %s (%d bytes)", message_id, name, len(data))
        try:
            result = await self.bot.edit_message_media(
                media=InputMediaDocument(media=data, filename=name),
                chat_id=self.channel_id,
                message_id=message_id,
            )
        except TelegramError as exc:
            raise RemoteTransferError(
                f"Replacing message {message_id} failed: {exc}"
            ) from exc

        if isinstance(result, Message):
            return _remote_object(result)
        # Inline edits only report success; the file ID is unknown
        raise RemoteTransferError(f"Edit of message {message_id} returned no message")

    async def delete_message(self, message_id: int) -> None:
        """Delete a message and its attachment."""
        logger.debug("Deleting message %d", message_id)
        try:
            await self.bot.delete_message(
                chat_id=self.channel_id, message_id=message_id
            )
        except TelegramError as exc:
            raise RemoteTransferError(
                f"Deleting message {message_id} failed: {exc}"
            ) from exc

    def __repr__(self) -> str:
        return f"TelegramChannel({self.channel_id})"
