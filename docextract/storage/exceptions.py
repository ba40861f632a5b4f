class StorageError(Exception):
    """Base exception for object storage access."""


class StorageDownloadError(StorageError):
    """Raised when the storage API cannot return an object."""


class FileRetrievalError(StorageError):
    """Raised when neither storage nor a direct fetch could produce the file."""
