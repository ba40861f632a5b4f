from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class AuditEventType(str, Enum):
    DOCUMENT_PROCESS = "document.process"
    DOCUMENT_PROCESSED = "document.processed"

    SETTINGS_UPDATE = "settings.update"
    API_KEY_ADDED = "api_key.added"
    API_KEY_REMOVED = "api_key.removed"
    API_KEY_USAGE = "api_key.usage"

    ENCRYPTION_FAILURE = "encryption.failure"
    CONFIGURATION_ERROR = "system.configuration_error"

    RATE_LIMIT_EXCEEDED = "security.rate_limit_exceeded"
    INVALID_INPUT = "security.invalid_input"
    UNAUTHORIZED_ACCESS = "security.unauthorized_access"


class AuditSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class AuditEvent:
    """One append-only audit record."""

    event_type: AuditEventType
    severity: AuditSeverity
    action: str
    status: AuditStatus
    user_id: str | None = None
    user_email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    resource: str | None = None
    resource_id: str | None = None
    error_message: str | None = None
    metadata: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
