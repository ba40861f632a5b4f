class CompletionError(Exception):
    """Raised when the AI provider call fails or returns an unusable payload.

    ``status_code`` carries the provider's HTTP status when one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CompletionNetworkError(CompletionError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""
