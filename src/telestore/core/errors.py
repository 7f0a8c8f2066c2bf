"""Error taxonomy for telestore."""


class StoreError(RuntimeError):
    """Base error for filesystem failures."""


class InitializationError(StoreError):
    """Raised when the channel cannot be reached or its index cannot be loaded."""


class ObjectNotFoundError(StoreError):
    """Raised when a path has no record in the index."""

    def __init__(self, path: str):
        super().__init__(f"Object not found: {path}")
        self.path = path


class InvalidPathError(StoreError):
    """Raised when a path names the root itself or leaves the filesystem root."""

    def __init__(self, path: str, reason: str = "outside the filesystem root"):
        super().__init__(f"Invalid path {path!r}: {reason}")
        self.path = path


class RemoteTransferError(StoreError):
    """Raised when an upload, download, edit, pin or delete call fails."""


class IndexPersistError(StoreError):
    """Raised when flushing the index fails after an in-memory mutation."""


class IndexFormatError(StoreError):
    """Raised when an index document cannot be decoded."""
