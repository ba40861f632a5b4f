"""Resolution of the Notion API credential used for schema enrichment.

A stored personal key is classified once, at read time, as either a legacy
plaintext token or an encrypted blob.
"""

from dataclasses import dataclass
from enum import Enum

from docextract.audit.audit_logger import AuditLogger
from docextract.audit.models import AuditEvent, AuditEventType, AuditSeverity, AuditStatus
from docextract.logging.logger import Log
from docextract.processor.exceptions import ConfigurationError
from docextract.processor.models import Caller
from docextract.security.encryption import EncryptionError, decrypt
from docextract.validation.validators import NOTION_KEY_PREFIXES


@dataclass(frozen=True)
class PlaintextKey:
    value: str


@dataclass(frozen=True)
class EncryptedBlob:
    value: str


StoredApiKey = PlaintextKey | EncryptedBlob


def classify_stored_key(raw: str | None) -> StoredApiKey | None:
    if not raw or not raw.strip():
        return None
    value = raw.strip()
    if value.startswith(NOTION_KEY_PREFIXES):
        return PlaintextKey(value)
    return EncryptedBlob(value)


class CredentialSource(str, Enum):
    PERSONAL = "personal"
    SYSTEM = "system"


@dataclass(frozen=True)
class ResolvedCredential:
    token: str
    source: CredentialSource


def reveal_key(stored: StoredApiKey, encryption_secret: str) -> str:
    """Return the usable token for a stored key.

    Raises:
        ConfigurationError: if the key is encrypted and no secret is configured.
        EncryptionError: if decryption fails.
    """
    if isinstance(stored, PlaintextKey):
        return stored.value
    if not encryption_secret:
        raise ConfigurationError(
            "ENCRYPTION_SECRET is not configured; cannot decrypt stored API key"
        )
    return decrypt(stored.value, encryption_secret)


class CredentialResolver:
    """Picks the caller's personal key first, then the system-wide fallback."""

    def __init__(
        self,
        *,
        encryption_secret: str,
        fallback_api_key: str,
        audit_logger: AuditLogger,
    ) -> None:
        self._encryption_secret = encryption_secret
        self._fallback_api_key = fallback_api_key
        self._audit_logger = audit_logger

    def resolve(self, stored: StoredApiKey | None, caller: Caller) -> ResolvedCredential | None:
        """Return a credential, or None when neither a personal nor a system key exists.

        Raises:
            ConfigurationError: if an encrypted personal key exists but no secret is configured.
        """
        if stored is not None:
            personal = self._reveal_personal(stored, caller)
            if personal:
                Log.info(f"Using personal Notion API key for user {caller.user_id}")
                return ResolvedCredential(personal, CredentialSource.PERSONAL)

        if self._fallback_api_key:
            Log.info("Using system-wide Notion API key")
            return ResolvedCredential(self._fallback_api_key, CredentialSource.SYSTEM)

        Log.warning("No Notion API key available; continuing without schema enrichment")
        return None

    def _reveal_personal(self, stored: StoredApiKey, caller: Caller) -> str | None:
        try:
            return reveal_key(stored, self._encryption_secret)
        except EncryptionError as exc:
            Log.error(f"Failed to decrypt personal API key for user {caller.user_id}: {exc}")
            self._audit_logger.log_event(
                AuditEvent(
                    event_type=AuditEventType.ENCRYPTION_FAILURE,
                    severity=AuditSeverity.CRITICAL,
                    action="decrypt_api_key",
                    status=AuditStatus.FAILURE,
                    user_id=caller.user_id,
                    user_email=caller.email,
                    ip_address=caller.ip_address,
                    user_agent=caller.user_agent,
                    error_message=str(exc),
                )
            )
            return None
