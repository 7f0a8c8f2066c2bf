"""FastAPI dependencies for the telestore API."""

from typing import Annotated

from fastapi import Depends

from telestore.core.fs import ChannelFS, get_filesystem


async def get_fs_instance() -> ChannelFS:
    """
    Get the filesystem for request processing.

    Raises:
        InitializationError: If the filesystem has not been opened.
    """
    return get_filesystem()


# Type alias for dependency injection
FSDep = Annotated[ChannelFS, Depends(get_fs_instance)]
