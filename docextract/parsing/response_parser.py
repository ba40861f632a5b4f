"""Splits the model's single text answer into JSON, Markdown and CSV parts."""

import json
import re
from dataclasses import dataclass
from typing import Any

from docextract.logging.logger import Log

_FENCE_TEMPLATE = r"```{tag}[ \t]*\r?\n(.*?)\r?\n[ \t]*```"
_JSON_BLOCK = re.compile(_FENCE_TEMPLATE.format(tag="json"), re.DOTALL | re.IGNORECASE)
_MARKDOWN_BLOCK = re.compile(_FENCE_TEMPLATE.format(tag="(?:markdown|md)"), re.DOTALL | re.IGNORECASE)
_CSV_BLOCK = re.compile(_FENCE_TEMPLATE.format(tag="csv"), re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class ParsedResponse:
    """The raw model text plus whichever fenced blocks were found.

    ``json_data`` is the decoded JSON block (any JSON value) or None.
    """

    raw_text: str
    json_data: Any = None
    markdown: str | None = None
    csv: str | None = None

    def structured_content(self) -> Any:
        return {} if self.json_data is None else self.json_data

    def markdown_or_raw(self) -> str:
        return self.markdown if self.markdown is not None else self.raw_text

    def csv_or_fallback(self) -> str:
        return self.csv if self.csv is not None else text_to_csv(self.raw_text)


def text_to_csv(text: str) -> str:
    """Build a one-column CSV with a ``Content`` header, one quoted row per non-blank line."""
    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        return ""
    quoted = ['"' + line.replace('"', '""') + '"' for line in lines]
    return "Content\n" + "\n".join(quoted)


def _first_block(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1) if match else None


def parse_ai_response(raw_text: str) -> ParsedResponse:
    """Extract the first ``json``, ``markdown`` and ``csv`` fenced blocks independently.

    A JSON block that fails to decode discards every block: the result then carries
    ``{"content": raw_text}`` as structured content and raw-text fallbacks elsewhere.
    """
    json_block = _first_block(_JSON_BLOCK, raw_text)
    try:
        json_data = json.loads(json_block) if json_block is not None else None
    except json.JSONDecodeError as exc:
        Log.warning(f"AI response JSON block could not be parsed, using raw text: {exc}")
        return ParsedResponse(raw_text=raw_text, json_data={"content": raw_text})

    return ParsedResponse(
        raw_text=raw_text,
        json_data=json_data,
        markdown=_first_block(_MARKDOWN_BLOCK, raw_text),
        csv=_first_block(_CSV_BLOCK, raw_text),
    )


def tag_with_source(content: Any, source_id: str | None) -> dict[str, Any]:
    """Wrap structured content so it always records the database ID it was shaped for."""
    if isinstance(content, dict):
        return {**content, "source_id": source_id}
    return {"source_id": source_id, "content": content}
