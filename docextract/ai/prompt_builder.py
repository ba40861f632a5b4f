from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from docextract.ai.prompt_loader import load_prompt


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str


class PromptBuilder:
    """Builds the system and user instructions for one extraction request.

    The CSV instruction depends on what is known about the target database:
    exact headers when its schema was fetched, invented headers when only its ID
    is known, and a generic CSV request otherwise.
    """

    def __init__(self, prompt_dir: Path | None = None) -> None:
        self._system = load_prompt("system_prompt.txt", prompt_dir)
        self._user = load_prompt("user_prompt.txt", prompt_dir)
        self._exact_headers = load_prompt("csv_exact_headers.txt", prompt_dir)
        self._invent_headers = load_prompt("csv_invent_headers.txt", prompt_dir)
        self._generic = load_prompt("csv_generic.txt", prompt_dir)

    def build(self, *, headers: Sequence[str] | None, source_id: str | None) -> Prompt:
        return Prompt(
            system=self._system,
            user=self._user.format(csv_instructions=self.csv_instructions(headers, source_id)),
        )

    def csv_instructions(self, headers: Sequence[str] | None, source_id: str | None) -> str:
        if headers:
            header_line = ", ".join(f'"{header}"' for header in headers)
            return self._exact_headers.format(headers=header_line)
        if source_id:
            return self._invent_headers
        return self._generic
