"""AI-powered document extraction: prompt -> completion -> parsed blocks."""

from collections.abc import Sequence

from docextract.ai.client_base import BaseCompletionClient
from docextract.ai.models import Attachment
from docextract.ai.prompt_builder import PromptBuilder
from docextract.logging.logger import Log
from docextract.parsing.response_parser import ParsedResponse, parse_ai_response


class DocumentAnalyzer:
    """Sends one document to the completion client and parses its answer."""

    def __init__(
        self,
        *,
        client: BaseCompletionClient,
        model: str,
        temperature: float = 0.0,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(1.0, temperature))
        self._prompt_builder = prompt_builder or PromptBuilder()

    def analyze(
        self,
        attachment: Attachment,
        *,
        headers: Sequence[str] | None = None,
        source_id: str | None = None,
    ) -> ParsedResponse:
        prompt = self._prompt_builder.build(headers=headers, source_id=source_id)
        Log.debug(f"Extraction prompt:\n{prompt.user}")

        raw_response = self._client.create_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=prompt.system,
            user_prompt=prompt.user,
            attachment=attachment,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        parsed = parse_ai_response(raw_response)
        Log.info(
            "AI extraction complete: "
            f"json={'yes' if parsed.json_data is not None else 'no'}, "
            f"markdown={'yes' if parsed.markdown is not None else 'no'}, "
            f"csv={'yes' if parsed.csv is not None else 'no'}"
        )
        return parsed
