import time
from collections.abc import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from docextract.audit.audit_logger import AuditLogger
from docextract.audit.models import AuditEventType, AuditSeverity
from docextract.config.settings import Settings
from docextract.container import Services
from docextract.main import create_app
from docextract.processor.exceptions import (
    ConfigurationError,
    DocumentNotFoundError,
    InvalidInputError,
    ProcessingFailedError,
    UnauthorizedError,
    UnsupportedFileTypeError,
)
from docextract.processor.models import ProcessingOutcome
from docextract.processor.processor import Processor
from docextract.security.auth import TokenVerifier
from docextract.user_settings.service import UserSettingsService, UserSettingsView
from docextract.validation.rate_limiter import RateLimiter

JWT_SECRET = "api-test-secret"
USER_ID = "11111111-1111-1111-1111-111111111111"
DOCUMENT_ID = "550e8400-e29b-41d4-a716-446655440000"


def _auth_header(sub: str = USER_ID) -> dict[str, str]:
    token = jwt.encode(
        {"sub": sub, "email": "u@example.com", "aud": "authenticated", "exp": int(time.time()) + 600},
        JWT_SECRET,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


def _make_services(max_requests: int = 50) -> Services:
    processor = MagicMock(spec=Processor)
    processor.process.return_value = ProcessingOutcome(
        document_id=DOCUMENT_ID,
        extracted_data_id="extracted-1",
        source_id=None,
        schema_applied=False,
        csv_rebuilt=False,
        column_count=3,
    )
    return Services(
        settings=Settings(),
        audit_logger=MagicMock(spec=AuditLogger),
        token_verifier=TokenVerifier(secret=JWT_SECRET, audience="authenticated"),
        rate_limiter=RateLimiter(max_requests=max_requests, window_ms=60_000),
        processor=processor,
        user_settings=MagicMock(spec=UserSettingsService),
    )


@pytest.fixture()
def services() -> Services:
    return _make_services()


@pytest.fixture()
def client(services: Services) -> Generator[TestClient, None, None]:
    with TestClient(create_app(services=services)) as test_client:
        yield test_client


class TestHealth:
    def test_reports_service_and_version(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "docextract"


class TestCors:
    def test_preflight_is_allowed(self, client: TestClient) -> None:
        response = client.options(
            "/process-document",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_plain_options_gets_empty_ok(self, client: TestClient) -> None:
        response = client.options("/process-document")

        assert response.status_code == 200
        assert response.content == b""


class TestProcessDocument:
    def test_success_returns_summary(self, client: TestClient, services: Services) -> None:
        response = client.post(
            "/process-document",
            json={"documentId": DOCUMENT_ID, "sourceId": "abc"},
            headers={**_auth_header(), "x-forwarded-for": "203.0.113.9", "user-agent": "pytest"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["extracted_data_id"] == "extracted-1"
        assert body["column_count"] == 3
        request = services.processor.process.call_args.args[0]
        assert request.document_id == DOCUMENT_ID
        assert request.source_id_override == "abc"
        assert request.caller.user_id == USER_ID
        assert request.caller.email == "u@example.com"
        assert request.caller.ip_address == "203.0.113.9"
        assert request.caller.user_agent == "pytest"

    def test_missing_token_is_unauthorized_and_audited(
        self, client: TestClient, services: Services
    ) -> None:
        response = client.post("/process-document", json={"documentId": DOCUMENT_ID})

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        services.processor.process.assert_not_called()
        event = services.audit_logger.log_event.call_args.args[0]
        assert event.event_type is AuditEventType.UNAUTHORIZED_ACCESS
        assert event.severity is AuditSeverity.WARNING

    def test_invalid_token_is_unauthorized(self, client: TestClient) -> None:
        response = client.post(
            "/process-document",
            json={"documentId": DOCUMENT_ID},
            headers={"Authorization": "Bearer not.a.jwt"},
        )

        assert response.status_code == 401

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (InvalidInputError("Invalid UUID format"), 400),
            (UnsupportedFileTypeError("Unsupported file type for extraction: application/msword"), 400),
            (UnauthorizedError(reason="ownership mismatch"), 401),
            (DocumentNotFoundError(f"Document {DOCUMENT_ID} not found"), 500),
            (ConfigurationError("AI_API_KEY is not configured"), 500),
            (ProcessingFailedError("AI processing failed (429): slow down"), 500),
        ],
    )
    def test_processor_errors_map_to_status_and_error_body(
        self,
        client: TestClient,
        services: Services,
        error: Exception,
        status_code: int,
    ) -> None:
        services.processor.process.side_effect = error

        response = client.post(
            "/process-document", json={"documentId": DOCUMENT_ID}, headers=_auth_header()
        )

        assert response.status_code == status_code
        assert response.json() == {"error": str(error)}

    def test_malformed_body_is_bad_request(self, client: TestClient) -> None:
        response = client.post(
            "/process-document",
            content=b"{not json",
            headers={**_auth_header(), "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "error" in response.json()


class TestRateLimit:
    def test_rejects_before_authentication_with_headers(self) -> None:
        services = _make_services(max_requests=2)
        with TestClient(create_app(services=services)) as client:
            for _ in range(2):
                assert client.post(
                    "/process-document", json={"documentId": DOCUMENT_ID}, headers=_auth_header()
                ).status_code == 200

            response = client.post("/process-document", json={"documentId": DOCUMENT_ID})

        assert response.status_code == 429
        body = response.json()
        assert body["error"] == "Too many requests. Please try again later."
        assert isinstance(body["resetTime"], int)
        assert int(response.headers["Retry-After"]) >= 1
        assert response.headers["X-RateLimit-Limit"] == "2"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Reset"] == str(body["resetTime"])
        assert services.processor.process.call_count == 2
        event_types = [c.args[0].event_type for c in services.audit_logger.log_event.call_args_list]
        assert event_types == [AuditEventType.RATE_LIMIT_EXCEEDED]


class TestUserSettingsRoutes:
    def test_get_returns_settings(self, client: TestClient, services: Services) -> None:
        services.user_settings.get.return_value = UserSettingsView("secret_x", "abc")

        response = client.get("/user-settings", headers=_auth_header())

        assert response.status_code == 200
        assert response.json() == {"notion_api_key": "secret_x", "default_source_id": "abc"}

    def test_post_saves_settings(self, client: TestClient, services: Services) -> None:
        response = client.post(
            "/user-settings",
            json={"notion_api_key": "secret_x", "default_source_id": None},
            headers=_auth_header(),
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        caller, api_key, source_id = services.user_settings.save.call_args.args
        assert caller.user_id == USER_ID
        assert (api_key, source_id) == ("secret_x", None)

    def test_post_validation_error_is_bad_request(
        self, client: TestClient, services: Services
    ) -> None:
        services.user_settings.save.side_effect = InvalidInputError("API key too short")

        response = client.post(
            "/user-settings", json={"notion_api_key": "secret_x"}, headers=_auth_header()
        )

        assert response.status_code == 400
        assert response.json() == {"error": "API key too short"}

    def test_requires_authentication(self, client: TestClient) -> None:
        assert client.get("/user-settings").status_code == 401
