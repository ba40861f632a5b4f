from abc import ABC, abstractmethod


class BaseTextExtractor(ABC):
    """Contract for all local text-layer extraction adapters."""

    @abstractmethod
    def extract(self, data: bytes) -> str:
        """Extract plain text from a document's bytes.

        Args:
            data: Raw file content.

        Returns:
            Extracted text as a single stripped string (may be empty).

        Raises:
            TextExtractionError: if extraction fails for any reason.
        """
