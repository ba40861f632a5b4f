"""Forces a CSV to use an externally supplied header row.

If the model's CSV header already matches (ignoring case, whitespace, underscores
and hyphens) it is kept as-is; otherwise the CSV is rebuilt from the structured
JSON content, matching each expected header to a JSON key.
"""

import csv
import json
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

_KEY_NOISE = re.compile(r"[\s_\-]+")


@dataclass(frozen=True)
class ReconciledCsv:
    csv: str
    rebuilt: bool
    column_count: int


def normalize_key(value: str) -> str:
    return _KEY_NOISE.sub("", value).lower()


def escape_csv_value(value: str) -> str:
    """Quote per RFC 4180 when the value contains a comma, quote, or line break."""
    if any(ch in value for ch in (",", '"', "\n", "\r")):
        return '"' + value.replace('"', '""') + '"'
    return value


def read_header(csv_text: str) -> list[str]:
    """Return the fields of the first line, honouring quoted fields.

    An unparseable first line yields no header, so it never matches.
    """
    lines = csv_text.lstrip("\ufeff").splitlines()
    if not lines or not lines[0].strip():
        return []
    try:
        row = next(csv.reader([lines[0]]), [])
    except csv.Error:
        return []
    return [cell.strip() for cell in row]


def headers_match(csv_text: str, expected_headers: Sequence[str]) -> bool:
    actual = read_header(csv_text)
    if len(actual) != len(expected_headers):
        return False
    return all(
        normalize_key(got) == normalize_key(want)
        for got, want in zip(actual, expected_headers)
    )


def rows_from_json(content: Any) -> list[dict[str, Any]]:
    """Treat JSON content as a single row, a list of rows, or an ``items`` list of rows."""
    if isinstance(content, dict):
        items = content.get("items")
        if isinstance(items, list):
            return [item for item in items if isinstance(item, dict)]
        return [content]
    if isinstance(content, list):
        return [item for item in content if isinstance(item, dict)]
    return []


def _find_value(row: dict[str, Any], header: str) -> Any:
    if header in row:
        return row[header]
    wanted = normalize_key(header)
    for key, value in row.items():
        if normalize_key(str(key)) == wanted:
            return value
    return None


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def build_csv_from_json(content: Any, headers: Sequence[str]) -> str:
    lines = [",".join(escape_csv_value(header) for header in headers)]
    for row in rows_from_json(content):
        lines.append(
            ",".join(escape_csv_value(_cell_text(_find_value(row, header))) for header in headers)
        )
    return "\n".join(lines)


def reconcile_csv(csv_text: str, content: Any, expected_headers: Sequence[str]) -> ReconciledCsv:
    if headers_match(csv_text, expected_headers):
        return ReconciledCsv(csv=csv_text, rebuilt=False, column_count=len(expected_headers))
    return ReconciledCsv(
        csv=build_csv_from_json(content, expected_headers),
        rebuilt=True,
        column_count=len(expected_headers),
    )
