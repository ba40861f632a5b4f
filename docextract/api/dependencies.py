from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from docextract.audit.audit_logger import extract_ip_address, extract_user_agent
from docextract.audit.models import AuditEvent, AuditEventType, AuditSeverity, AuditStatus
from docextract.container import Services
from docextract.logging.logger import Log
from docextract.processor.models import Caller
from docextract.validation.rate_limiter import RateLimitExceededError

bearer_scheme = HTTPBearer(auto_error=False)


def get_services(request: Request) -> Services:
    return request.app.state.services


def client_ip(request: Request) -> str:
    peer = request.client.host if request.client else None
    return extract_ip_address(request.headers, fallback=peer)


def enforce_rate_limit(request: Request, services: Services = Depends(get_services)) -> None:
    """Count the request against the caller IP's window; reject before any other work."""
    ip_address = client_ip(request)
    limiter = services.rate_limiter
    result = limiter.check(ip_address)
    request.state.rate_limit = result
    if result.allowed:
        return

    Log.warning(f"Rate limit exceeded for {ip_address}")
    services.audit_logger.log_event(
        AuditEvent(
            event_type=AuditEventType.RATE_LIMIT_EXCEEDED,
            severity=AuditSeverity.WARNING,
            action=f"{request.method} {request.url.path}",
            status=AuditStatus.FAILURE,
            ip_address=ip_address,
            user_agent=extract_user_agent(request.headers),
            metadata={"limit": result.limit, "reset_time": result.reset_time_ms},
        )
    )
    raise RateLimitExceededError(result, result.retry_after_seconds(limiter.now_ms()))


def get_caller(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    services: Services = Depends(get_services),
) -> Caller:
    """Verify the bearer token and describe the caller.

    Raises:
        AuthenticationError: if the token is missing or invalid.
    """
    token = credentials.credentials if credentials else ""
    user = services.token_verifier.verify(token)
    return Caller(
        user_id=user.id,
        email=user.email,
        ip_address=client_ip(request),
        user_agent=extract_user_agent(request.headers),
    )
