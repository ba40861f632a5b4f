from abc import ABC, abstractmethod

from docextract.ai.models import Attachment


class BaseCompletionClient(ABC):
    """Contract for provider-specific generative AI completion clients."""

    @abstractmethod
    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        attachment: Attachment,
    ) -> str:
        """Return the model's answer as plain text.

        Raises:
            CompletionError: on a non-success response or a malformed payload.
            CompletionNetworkError: when the provider cannot be reached.
        """
