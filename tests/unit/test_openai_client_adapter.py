from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from docextract.ai.exceptions import CompletionError, CompletionNetworkError
from docextract.ai.models import BinaryAttachment, TextAttachment
from docextract.ai.openai_client_adapter import OpenAIClientAdapter


def _make_mock_response(content: str | None) -> MagicMock:
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    return response


def _make_adapter(mock_client: MagicMock) -> OpenAIClientAdapter:
    with patch(
        "docextract.ai.openai_client_adapter.openai.OpenAI",
        return_value=mock_client,
    ):
        return OpenAIClientAdapter(api_key="k", timeout_seconds=30, base_url=None)


def _complete(adapter: OpenAIClientAdapter, attachment=None) -> str:  # type: ignore[no-untyped-def]
    return adapter.create_completion(
        model="google/gemini-2.5-flash",
        temperature=0.0,
        system_prompt="system",
        user_prompt="user",
        attachment=attachment or TextAttachment("hello"),
    )


class TestOpenAIClientAdapter:
    def test_returns_content(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response("```json\n{}\n```")

        assert _complete(_make_adapter(mock_client)) == "```json\n{}\n```"

    def test_sends_extracted_text_as_second_text_part(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response("ok")

        _complete(_make_adapter(mock_client), TextAttachment("Invoice 42"))

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "google/gemini-2.5-flash"
        assert kwargs["messages"][0] == {"role": "system", "content": "system"}
        assert kwargs["messages"][1]["content"] == [
            {"type": "text", "text": "user"},
            {"type": "text", "text": "Document content:\n\nInvoice 42"},
        ]

    def test_sends_binary_as_base64_data_url(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response("ok")

        _complete(_make_adapter(mock_client), BinaryAttachment(b"\x89PNG", "image/png"))

        parts = mock_client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        assert parts[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBORw=="}}

    def test_raises_error_for_empty_content(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response(None)

        with pytest.raises(CompletionError, match="empty response"):
            _complete(_make_adapter(mock_client))

    def test_raises_error_when_no_choices(self) -> None:
        mock_client = MagicMock()
        response = MagicMock()
        response.choices = []
        mock_client.chat.completions.create.return_value = response

        with pytest.raises(CompletionError, match="no choices"):
            _complete(_make_adapter(mock_client))

    def test_raises_network_error_on_connection_failure(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=MagicMock()
        )

        with pytest.raises(CompletionNetworkError, match="network error"):
            _complete(_make_adapter(mock_client))

    def test_raises_network_error_on_timeout(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = httpx.ReadTimeout("slow")

        with pytest.raises(CompletionNetworkError):
            _complete(_make_adapter(mock_client))

    def test_status_error_keeps_status_code(self) -> None:
        request = httpx.Request("POST", "https://ai.gateway.test/v1/chat/completions")
        response = httpx.Response(402, request=request, json={"error": "Payment required"})
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIStatusError(
            "Payment required",
            response=response,
            body=None,
        )

        with pytest.raises(CompletionError, match=r"AI processing failed \(402\)") as exc_info:
            _complete(_make_adapter(mock_client))

        assert exc_info.value.status_code == 402
