from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class UserSettingsRecord:
    """Represents a row from the user_settings table.

    ``notion_api_key`` holds either ciphertext or a legacy plaintext key.
    """

    user_id: str
    notion_api_key: str | None = None
    default_source_id: str | None = None
    updated_at: datetime | None = None


@dataclass
class AuditLogRecord:
    """Column values for one audit_logs insert."""

    event_type: str
    severity: str
    action: str
    status: str
    user_id: str | None = None
    user_email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    resource: str | None = None
    resource_id: str | None = None
    error_message: str | None = None
    metadata: dict[str, Any] | None = None
