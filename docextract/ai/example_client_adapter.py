"""Offline completion client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseCompletionClient and register the provider in CompletionClientFactory.
"""

from docextract.ai.client_base import BaseCompletionClient
from docextract.ai.models import Attachment


class ExampleClientAdapter(BaseCompletionClient):
    """Example adapter that returns a fixed three-block answer.

    No network calls. Useful for local development and tests.
    """

    DEFAULT_RESPONSE = (
        "```json\n"
        '{"title": "Example document", "summary": "Offline example extraction"}\n'
        "```\n\n"
        "```markdown\n"
        "# Example document\n\n"
        "Offline example extraction\n"
        "```\n\n"
        "```csv\n"
        "title,summary\n"
        "Example document,Offline example extraction\n"
        "```"
    )

    def __init__(self, response: str | None = None) -> None:
        self._response = response if response is not None else self.DEFAULT_RESPONSE

    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        attachment: Attachment,
    ) -> str:
        _ = (model, temperature, system_prompt, user_prompt, attachment)
        return self._response
