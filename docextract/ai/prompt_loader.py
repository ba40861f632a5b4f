from pathlib import Path

from docextract.ai.exceptions import CompletionError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt(name: str, prompt_dir: Path | None = None) -> str:
    """Load a bundled prompt template by file name.

    Args:
        name: File name inside the prompt directory, e.g. ``system_prompt.txt``.
        prompt_dir: Directory to read from. Defaults to the bundled prompts.

    Returns:
        The raw template string with placeholders.

    Raises:
        CompletionError: if the file cannot be read.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / name
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise CompletionError(f"Failed to load prompt template {name}: {exc}") from exc
