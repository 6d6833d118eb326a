class FileStoreError(Exception):
    """Base exception for all file store errors."""


class StoredFileNotFoundError(FileStoreError):
    """Raised when a project file does not exist in the store."""


class FileStoreUnavailableError(FileStoreError):
    """Raised when the store cannot serve a project at all."""


class OutputWriteError(FileStoreError):
    """Raised when a generated output cannot be written."""
