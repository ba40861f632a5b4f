from dataclasses import dataclass

from docextract.audit.audit_logger import AuditLogger
from docextract.config.settings import Settings
from docextract.database.repositories.audit_log_repository import AuditLogRepository
from docextract.database.repositories.user_settings_repository import UserSettingsRepository
from docextract.processor.processor import Processor, ProcessorResources, build_processor
from docextract.security.auth import TokenVerifier
from docextract.user_settings.service import UserSettingsService
from docextract.validation.rate_limiter import RateLimiter


@dataclass
class Services:
    """Everything the HTTP layer needs, built once per application."""

    settings: Settings
    audit_logger: AuditLogger
    token_verifier: TokenVerifier
    rate_limiter: RateLimiter
    processor: Processor
    user_settings: UserSettingsService
    resources: ProcessorResources | None = None

    def close(self) -> None:
        if self.resources is not None:
            self.resources.close()


def build_services(settings: Settings) -> Services:
    """Build dependencies: audit logger -> processor -> settings service -> auth and rate limiting."""
    audit_logger = AuditLogger(AuditLogRepository())
    processor, resources = build_processor(settings, audit_logger)
    return Services(
        settings=settings,
        audit_logger=audit_logger,
        token_verifier=TokenVerifier(
            secret=settings.supabase_jwt_secret,
            audience=settings.jwt_audience,
        ),
        rate_limiter=RateLimiter(
            max_requests=settings.rate_limit_max_requests,
            window_ms=settings.rate_limit_window_ms,
        ),
        processor=processor,
        user_settings=UserSettingsService(
            UserSettingsRepository(),
            audit_logger,
            encryption_secret=settings.encryption_secret,
        ),
        resources=resources,
    )
