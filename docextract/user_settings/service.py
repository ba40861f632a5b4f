from dataclasses import dataclass
from typing import Any

from docextract.audit.audit_logger import AuditLogger
from docextract.audit.models import AuditEvent, AuditEventType, AuditSeverity, AuditStatus
from docextract.database.repositories.user_settings_repository import UserSettingsRepository
from docextract.logging.logger import Log
from docextract.processor.exceptions import (
    ConfigurationError,
    InvalidInputError,
    InvalidSourceIdError,
    ProcessingFailedError,
)
from docextract.processor.models import Caller
from docextract.security.credentials import PlaintextKey, classify_stored_key, reveal_key
from docextract.security.encryption import EncryptionError, encrypt
from docextract.validation.validators import (
    sanitize_text,
    validate_notion_api_key,
    validate_source_id,
)


@dataclass(frozen=True)
class UserSettingsView:
    """Settings as shown back to their owner; empty strings mean "not set"."""

    notion_api_key: str = ""
    default_source_id: str = ""


class UserSettingsService:
    """Reads and saves a user's Notion key and default database ID.

    The key is encrypted before it is stored. Legacy plaintext keys are still
    returned on read and get encrypted on the next save.
    """

    def __init__(
        self,
        repository: UserSettingsRepository,
        audit_logger: AuditLogger,
        *,
        encryption_secret: str,
    ) -> None:
        self._repository = repository
        self._audit_logger = audit_logger
        self._encryption_secret = encryption_secret

    def get(self, caller: Caller) -> UserSettingsView:
        """Return the caller's settings with the API key revealed.

        An undecryptable key is reported as empty so the user can re-enter it.

        Raises:
            ConfigurationError: if the key is encrypted and no secret is configured.
        """
        record = self._repository.find_by_user_id(caller.user_id)
        if record is None:
            return UserSettingsView()

        api_key = ""
        stored = classify_stored_key(record.notion_api_key)
        if stored is not None:
            if isinstance(stored, PlaintextKey):
                Log.info(
                    f"User {caller.user_id} has a legacy plaintext key; "
                    "it will be encrypted on next save"
                )
            try:
                api_key = reveal_key(stored, self._encryption_secret)
            except EncryptionError as exc:
                Log.error(f"Failed to decrypt API key for user {caller.user_id}: {exc}")

        return UserSettingsView(
            notion_api_key=api_key,
            default_source_id=record.default_source_id or "",
        )

    def save(
        self,
        caller: Caller,
        notion_api_key: str | None,
        default_source_id: str | None,
    ) -> None:
        """Validate, encrypt and upsert the caller's settings.

        Raises:
            InvalidInputError: if the key format is invalid.
            InvalidSourceIdError: if the default database ID format is invalid.
            ConfigurationError: if a key is given but no encryption secret is configured.
            ProcessingFailedError: if encryption or the database write fails.
        """
        api_key = sanitize_text(notion_api_key)
        source_id = sanitize_text(default_source_id)

        if api_key:
            result = validate_notion_api_key(api_key)
            if not result.valid:
                self._audit_failure(
                    caller,
                    AuditEventType.INVALID_INPUT,
                    AuditSeverity.WARNING,
                    "validate_notion_api_key",
                    result.error,
                )
                raise InvalidInputError(result.error or "Invalid Notion API key format")
            api_key = result.sanitized

        if source_id:
            result = validate_source_id(source_id)
            if not result.valid:
                self._audit_failure(
                    caller,
                    AuditEventType.INVALID_INPUT,
                    AuditSeverity.WARNING,
                    "validate_source_id",
                    result.error,
                )
                raise InvalidSourceIdError(result.error or "Invalid source_id format")
            source_id = result.sanitized

        encrypted_key = self._encrypt(caller, api_key) if api_key else None
        previous = self._repository.find_by_user_id(caller.user_id)

        try:
            self._repository.upsert(caller.user_id, encrypted_key, source_id or None)
        except Exception as exc:
            Log.error(f"Failed to save settings for user {caller.user_id}: {exc}")
            self._audit_failure(
                caller,
                AuditEventType.SETTINGS_UPDATE,
                AuditSeverity.ERROR,
                "save_user_settings",
                str(exc),
            )
            raise ProcessingFailedError("Failed to save settings") from exc

        self._audit_success(
            caller,
            AuditEventType.SETTINGS_UPDATE,
            "save_user_settings",
            {"has_notion_key": bool(api_key), "has_default_source_id": bool(source_id)},
        )
        had_key = previous is not None and bool(previous.notion_api_key)
        if api_key:
            self._audit_success(caller, AuditEventType.API_KEY_ADDED, "store_api_key")
        elif had_key:
            self._audit_success(caller, AuditEventType.API_KEY_REMOVED, "remove_api_key")

    def _encrypt(self, caller: Caller, api_key: str) -> str:
        if not self._encryption_secret:
            Log.error("ENCRYPTION_SECRET is not configured")
            self._audit_failure(
                caller,
                AuditEventType.ENCRYPTION_FAILURE,
                AuditSeverity.CRITICAL,
                "encrypt_api_key",
                "ENCRYPTION_SECRET not configured",
            )
            raise ConfigurationError("Server configuration error: ENCRYPTION_SECRET is not configured")
        try:
            return encrypt(api_key, self._encryption_secret)
        except EncryptionError as exc:
            self._audit_failure(
                caller,
                AuditEventType.ENCRYPTION_FAILURE,
                AuditSeverity.CRITICAL,
                "encrypt_api_key",
                str(exc),
            )
            raise ProcessingFailedError("Failed to encrypt API key") from exc

    def _audit_success(
        self,
        caller: Caller,
        event_type: AuditEventType,
        action: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self._audit_logger.log_event(
            AuditEvent(
                event_type=event_type,
                severity=AuditSeverity.INFO,
                action=action,
                status=AuditStatus.SUCCESS,
                user_id=caller.user_id,
                user_email=caller.email,
                ip_address=caller.ip_address,
                user_agent=caller.user_agent,
                resource="user_settings",
                metadata=metadata,
            )
        )

    def _audit_failure(
        self,
        caller: Caller,
        event_type: AuditEventType,
        severity: AuditSeverity,
        action: str,
        error_message: str | None,
    ) -> None:
        self._audit_logger.log_event(
            AuditEvent(
                event_type=event_type,
                severity=severity,
                action=action,
                status=AuditStatus.FAILURE,
                user_id=caller.user_id,
                user_email=caller.email,
                ip_address=caller.ip_address,
                user_agent=caller.user_agent,
                resource="user_settings",
                error_message=error_message,
            )
        )
