"""Pure input validators. No I/O; every check returns a ValidationResult."""

import re
from dataclasses import dataclass

DEFAULT_ALLOWED_FILE_TYPES: tuple[str, ...] = (
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/heic",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
)

NOTION_KEY_PREFIXES: tuple[str, ...] = ("secret_", "ntn_")
NOTION_KEY_MIN_LENGTH = 40
NOTION_KEY_MAX_LENGTH = 200
FILENAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 254
TEXT_MAX_LENGTH = 10_000

_HEX_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{12}$"
)
_NOTION_KEY_PATTERN = re.compile(r"^(secret_|ntn_)[a-zA-Z0-9_-]+$")
_EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
_FILENAME_UNSAFE_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    sanitized: str = ""
    error: str | None = None


def validate_uuid(value: str | None) -> ValidationResult:
    """Check a UUID-like identifier: 32 hex characters, hyphens optional."""
    if not value or not isinstance(value, str):
        return ValidationResult(False, "", "UUID is required")
    trimmed = value.strip().lower()
    if not _HEX_ID_PATTERN.match(trimmed):
        return ValidationResult(False, trimmed, "Invalid UUID format")
    return ValidationResult(True, trimmed)


def validate_source_id(value: str | None) -> ValidationResult:
    """Check an external database ID; the sanitized form has hyphens removed."""
    if not value or not isinstance(value, str):
        return ValidationResult(False, "", "Source ID is required")
    trimmed = value.strip().lower()
    if not _HEX_ID_PATTERN.match(trimmed):
        return ValidationResult(False, trimmed, "Invalid source ID format")
    return ValidationResult(True, trimmed.replace("-", ""))


def validate_file_size(size_in_bytes: int, max_size_mb: int = 20) -> ValidationResult:
    if not isinstance(size_in_bytes, int) or isinstance(size_in_bytes, bool) or size_in_bytes < 0:
        return ValidationResult(False, error="Invalid file size")
    if size_in_bytes > max_size_mb * 1024 * 1024:
        return ValidationResult(False, str(size_in_bytes), f"File size exceeds {max_size_mb}MB limit")
    if size_in_bytes == 0:
        return ValidationResult(False, "0", "File is empty")
    return ValidationResult(True, str(size_in_bytes))


def validate_file_type(
    mime_type: str | None,
    allowed_types: tuple[str, ...] = DEFAULT_ALLOWED_FILE_TYPES,
) -> ValidationResult:
    if not mime_type or not isinstance(mime_type, str):
        return ValidationResult(False, error="File type is required")
    normalized = mime_type.strip().lower()
    if normalized not in allowed_types:
        return ValidationResult(False, normalized, f"File type {mime_type} not allowed")
    return ValidationResult(True, normalized)


def validate_notion_api_key(api_key: str | None) -> ValidationResult:
    """Check the shape of a Notion integration token (``secret_`` or ``ntn_`` prefix)."""
    if not api_key or not isinstance(api_key, str):
        return ValidationResult(False, error="API key is required")
    trimmed = api_key.strip()
    if not trimmed.startswith(NOTION_KEY_PREFIXES):
        return ValidationResult(
            False,
            error='Invalid Notion API key format. Must start with "secret_" or "ntn_"',
        )
    if len(trimmed) < NOTION_KEY_MIN_LENGTH:
        return ValidationResult(False, error="API key too short")
    if len(trimmed) > NOTION_KEY_MAX_LENGTH:
        return ValidationResult(False, error="API key too long")
    if not _NOTION_KEY_PATTERN.match(trimmed):
        return ValidationResult(False, error="API key contains invalid characters")
    return ValidationResult(True, trimmed)


def validate_filename(filename: str | None) -> ValidationResult:
    """Reject empty, overlong, or path-traversing names; replace unsafe characters."""
    if not filename or not isinstance(filename, str):
        return ValidationResult(False, error="Filename is required")
    trimmed = filename.strip()
    if not trimmed:
        return ValidationResult(False, error="Filename cannot be empty")
    if len(trimmed) > FILENAME_MAX_LENGTH:
        return ValidationResult(
            False, trimmed, f"Filename too long (max {FILENAME_MAX_LENGTH} characters)"
        )
    if ".." in trimmed:
        return ValidationResult(False, trimmed, "Filename contains path traversal")
    return ValidationResult(True, _FILENAME_UNSAFE_CHARS.sub("_", trimmed))


def validate_email(email: str | None) -> ValidationResult:
    if not email or not isinstance(email, str):
        return ValidationResult(False, error="Email is required")
    trimmed = email.strip().lower()
    if len(trimmed) > EMAIL_MAX_LENGTH:
        return ValidationResult(False, trimmed, "Email too long")
    if not _EMAIL_PATTERN.match(trimmed):
        return ValidationResult(False, trimmed, "Invalid email format")
    return ValidationResult(True, trimmed)


def sanitize_text(text: str | None) -> str:
    """Strip control characters and cap free text at TEXT_MAX_LENGTH."""
    if not text or not isinstance(text, str):
        return ""
    sanitized = _CONTROL_CHARS.sub("", text)
    return sanitized[:TEXT_MAX_LENGTH].strip()
