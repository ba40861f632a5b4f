from typing import Any

import httpx
import openai

from docextract.ai.client_base import BaseCompletionClient
from docextract.ai.exceptions import CompletionError, CompletionNetworkError
from docextract.ai.models import Attachment, BinaryAttachment, TextAttachment


class OpenAIClientAdapter(BaseCompletionClient):
    """Completion client built on the OpenAI-compatible chat completions API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        attachment: Attachment,
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": self._user_content(user_prompt, attachment)},
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise CompletionNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIStatusError as exc:
            raise CompletionError(
                f"AI processing failed ({exc.status_code}): {exc.message}",
                status_code=exc.status_code,
            ) from exc
        except openai.APIError as exc:
            raise CompletionError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise CompletionError("AI response contained no choices")
        content = response.choices[0].message.content
        if not content:
            raise CompletionError("AI returned empty response")
        return content

    @staticmethod
    def _user_content(user_prompt: str, attachment: Attachment) -> list[dict[str, Any]]:
        parts: list[dict[str, Any]] = [{"type": "text", "text": user_prompt}]
        if isinstance(attachment, TextAttachment):
            parts.append({"type": "text", "text": f"Document content:\n\n{attachment.text}"})
        elif isinstance(attachment, BinaryAttachment):
            parts.append({"type": "image_url", "image_url": {"url": attachment.to_data_url()}})
        return parts
