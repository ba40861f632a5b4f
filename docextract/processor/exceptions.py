class ProcessorError(Exception):
    """Base exception for all processor-related errors.

    ``status_code`` is the HTTP status the API layer answers with.
    """

    status_code: int = 500


class InvalidInputError(ProcessorError):
    """Raised when request input fails format validation."""

    status_code = 400


class UnsupportedFileTypeError(InvalidInputError):
    """Raised when a document's type or size cannot be processed."""


class InvalidSourceIdError(InvalidInputError):
    """Raised when an external database ID has an invalid format."""


class UnauthorizedError(ProcessorError):
    """Raised when the caller is not allowed to act on a document."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", *, reason: str = "") -> None:
        super().__init__(message)
        self.reason = reason


class DocumentNotFoundError(ProcessorError):
    """Raised when a document cannot be found in the database."""


class ConfigurationError(ProcessorError):
    """Raised when a required secret or setting is missing."""


class ProcessingFailedError(ProcessorError):
    """Wraps any unexpected exception raised while processing a document."""
