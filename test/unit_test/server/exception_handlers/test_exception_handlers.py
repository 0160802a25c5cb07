"""
Unit tests for server exception handlers.

Tests cover rendering of domain errors, the catch-all handler for unexpected
failures and registration of both on a FastAPI application.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from emotions_app.core.exceptions import (
    ConflictError,
    DomainValidationError,
    EmotionsAppError,
    ExternalServiceError,
    InvalidStateTransitionError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
)
from emotions_app.server.exception_handlers import setup_exception_handlers
from emotions_app.server.exception_handlers.domain_handler import domain_exception_handler
from emotions_app.server.exception_handlers.global_handler import global_exception_handler


@pytest.fixture
def mock_request():
    request = Mock(spec=Request)
    request.method = "POST"
    request.url.path = "/api/v1/appointments"
    request.query_params = {}
    request.client = Mock()
    request.client.host = "127.0.0.1"
    return request


def _body(response) -> dict:
    return json.loads(response.body.decode())


class TestDomainExceptionHandler:
    """Test suite for the domain error handler."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc,status_code,error_type",
        [
            (NotFoundError.for_entity("Appointment", "a1"), 404, "not_found"),
            (PermissionDeniedError("Not yours"), 403, "permission_denied"),
            (ConflictError("Already a member"), 409, "conflict"),
            (InvalidStateTransitionError("appointment", "cancelled", "scheduled"), 409, "invalid_state_transition"),
            (DomainValidationError("Rating must be between 1 and 5"), 422, "validation_error"),
            (ExternalServiceError("Daily.co unreachable"), 502, "external_service_error"),
        ],
    )
    async def test_status_and_error_type(self, mock_request, exc, status_code, error_type):
        response = await domain_exception_handler(mock_request, exc)

        assert response.status_code == status_code
        body = _body(response)
        assert body["error_type"] == error_type
        assert body["detail"] == exc.detail
        assert "retry-after" not in response.headers

    @pytest.mark.asyncio
    async def test_rate_limit_sets_retry_after(self, mock_request):
        exc = RateLimitExceededError("Too many signup attempts", retry_after_seconds=1800)

        response = await domain_exception_handler(mock_request, exc)

        assert response.status_code == 429
        assert response.headers["retry-after"] == "1800"

    @pytest.mark.asyncio
    async def test_domain_errors_are_logged_at_info(self, mock_request):
        with patch("emotions_app.server.exception_handlers.domain_handler.logger") as mock_logger:
            await domain_exception_handler(mock_request, ConflictError("Already reviewed"))

            mock_logger.info.assert_called_once()
            extra = mock_logger.info.call_args[1]["extra"]
            assert extra["status_code"] == 409
            assert extra["path"] == "/api/v1/appointments"


class TestGlobalExceptionHandler:
    """Test suite for the catch-all handler."""

    @pytest.mark.asyncio
    async def test_returns_generic_500(self, mock_request):
        exc = RuntimeError("database exploded")

        with patch("emotions_app.server.exception_handlers.global_handler.logger"), patch(
            "emotions_app.server.exception_handlers.global_handler.log_error"
        ):
            response = await global_exception_handler(mock_request, exc)

        assert response.status_code == 500
        body = _body(response)
        assert body["detail"] == "Internal server error"
        assert body["error_type"] == "RuntimeError"
        assert body["error_id"] == id(exc)

    @pytest.mark.asyncio
    async def test_logs_request_context(self, mock_request):
        exc = ValueError("bad value")

        with patch("emotions_app.server.exception_handlers.global_handler.logger") as mock_logger, patch(
            "emotions_app.server.exception_handlers.global_handler.log_error"
        ) as mock_log_error:
            await global_exception_handler(mock_request, exc)

        mock_logger.error.assert_called_once()
        extra = mock_logger.error.call_args[1]["extra"]
        assert extra["method"] == "POST"
        assert extra["client"] == "127.0.0.1"
        assert extra["error_type"] == "ValueError"
        mock_log_error.assert_called_once()
        assert mock_log_error.call_args[0][:2] == ("ValueError", "bad value")

    @pytest.mark.asyncio
    async def test_request_without_client(self, mock_request):
        mock_request.client = None

        with patch("emotions_app.server.exception_handlers.global_handler.logger") as mock_logger, patch(
            "emotions_app.server.exception_handlers.global_handler.log_error"
        ):
            await global_exception_handler(mock_request, RuntimeError("boom"))

        assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"


class TestSetupExceptionHandlers:
    """Test suite for handler registration."""

    def test_registers_both_handlers(self):
        app = FastAPI()
        setup_exception_handlers(app)

        assert app.exception_handlers[EmotionsAppError] is domain_exception_handler
        assert app.exception_handlers[Exception] is global_exception_handler

    def test_handlers_are_used_by_routes(self):
        app = FastAPI()
        setup_exception_handlers(app)

        @app.get("/missing")
        async def missing():
            raise NotFoundError("Nothing here")

        @app.get("/broken")
        async def broken():
            raise RuntimeError("boom")

        with patch("emotions_app.server.exception_handlers.global_handler.log_error"):
            client = TestClient(app, base_url="http://localhost", raise_server_exceptions=False)
            missing_response = client.get("/missing")
            broken_response = client.get("/broken")

        assert missing_response.status_code == 404
        assert missing_response.json() == {"detail": "Nothing here", "error_type": "not_found"}
        assert broken_response.status_code == 500
        assert broken_response.json()["detail"] == "Internal server error"
