import json
import logging
from collections.abc import Mapping
from dataclasses import asdict
from typing import Any

from docextract.audit.models import AuditEvent, AuditSeverity
from docextract.database.models import AuditLogRecord
from docextract.database.repositories.audit_log_repository import AuditLogRepository
from docextract.logging.logger import Log

SENSITIVE_METADATA_KEYS = (
    "password",
    "token",
    "api_key",
    "secret",
    "authorization",
    "cookie",
    "session",
)

_SEVERITY_LOG_LEVELS = {
    AuditSeverity.INFO: logging.INFO,
    AuditSeverity.WARNING: logging.WARNING,
    AuditSeverity.ERROR: logging.ERROR,
    AuditSeverity.CRITICAL: logging.ERROR,
}


def sanitize_metadata(metadata: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``metadata`` with sensitive-looking keys redacted."""
    sanitized = dict(metadata)
    for key in sanitized:
        lowered = key.lower()
        if any(sensitive in lowered for sensitive in SENSITIVE_METADATA_KEYS):
            sanitized[key] = "[REDACTED]"
    return sanitized


def extract_ip_address(headers: Mapping[str, str], fallback: str | None = None) -> str:
    """Best-effort client IP from proxy headers, then the socket peer."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return (
        headers.get("x-real-ip")
        or headers.get("cf-connecting-ip")
        or fallback
        or "unknown"
    )


def extract_user_agent(headers: Mapping[str, str]) -> str:
    return headers.get("user-agent") or "unknown"


class AuditLogger:
    """Writes audit events to the log and the audit_logs table.

    A failed write is logged and swallowed; it never affects the caller.
    """

    def __init__(self, repository: AuditLogRepository) -> None:
        self._repository = repository

    def log_event(self, event: AuditEvent) -> None:
        metadata = sanitize_metadata(event.metadata) if event.metadata else None
        self._echo(event, metadata)
        record = AuditLogRecord(
            event_type=event.event_type.value,
            severity=event.severity.value,
            action=event.action,
            status=event.status.value,
            user_id=event.user_id,
            user_email=event.user_email,
            ip_address=event.ip_address,
            user_agent=event.user_agent,
            resource=event.resource,
            resource_id=event.resource_id,
            error_message=event.error_message,
            metadata=metadata,
        )
        try:
            self._repository.insert(record)
        except Exception as exc:
            Log.error(f"[AUDIT] Failed to store audit log: {exc}")

    @staticmethod
    def _echo(event: AuditEvent, metadata: dict[str, Any] | None) -> None:
        entry = asdict(event)
        entry["timestamp"] = event.timestamp.isoformat()
        entry["event_type"] = event.event_type.value
        entry["severity"] = event.severity.value
        entry["status"] = event.status.value
        entry["metadata"] = metadata
        level = _SEVERITY_LOG_LEVELS.get(event.severity, logging.INFO)
        Log.log(level, f"[AUDIT] {json.dumps(entry, default=str)}")
