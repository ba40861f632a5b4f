from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from docextract.audit.audit_logger import extract_ip_address, extract_user_agent
from docextract.audit.models import AuditEvent, AuditEventType, AuditSeverity, AuditStatus
from docextract.logging.logger import Log
from docextract.processor.exceptions import ProcessorError
from docextract.security.auth import AuthenticationError
from docextract.validation.rate_limiter import RateLimitExceededError


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def handle_processor_error(_: Request, exc: ProcessorError) -> JSONResponse:
    return _error(exc.status_code, str(exc) or "Internal server error")


async def handle_authentication_error(request: Request, exc: AuthenticationError) -> JSONResponse:
    Log.warning(f"Authentication failed for {request.url.path}: {exc}")
    services = getattr(request.app.state, "services", None)
    if services is not None:
        peer = request.client.host if request.client else None
        services.audit_logger.log_event(
            AuditEvent(
                event_type=AuditEventType.UNAUTHORIZED_ACCESS,
                severity=AuditSeverity.WARNING,
                action=f"{request.method} {request.url.path}",
                status=AuditStatus.FAILURE,
                ip_address=extract_ip_address(request.headers, fallback=peer),
                user_agent=extract_user_agent(request.headers),
                error_message=str(exc),
            )
        )
    return _error(status.HTTP_401_UNAUTHORIZED, "Unauthorized", {"WWW-Authenticate": "Bearer"})


async def handle_rate_limit_exceeded(_: Request, exc: RateLimitExceededError) -> JSONResponse:
    result = exc.result
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": str(exc), "resetTime": result.reset_time_ms},
        headers={
            "Retry-After": str(exc.retry_after_seconds),
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": str(result.reset_time_ms),
        },
    )


async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return _error(status.HTTP_400_BAD_REQUEST, f"Invalid request body: {message}")


async def handle_unexpected_error(_: Request, exc: Exception) -> JSONResponse:
    Log.error(f"Unhandled error: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProcessorError, handle_processor_error)
    app.add_exception_handler(AuthenticationError, handle_authentication_error)
    app.add_exception_handler(RateLimitExceededError, handle_rate_limit_exceeded)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
