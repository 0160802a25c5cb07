"""
Unit tests for Logfire middleware.

This test suite covers:
- Request metrics reported through log_api_request
- The X-Process-Time response header
- Slow request warnings
- Failure logging with the calling user
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI, Request
from starlette.responses import Response
from starlette.testclient import TestClient

from emotions_app.server.core.constant import USER_ID_HEADER
from emotions_app.server.middleware.logfire_middleware import SLOW_REQUEST_MS, LogfireMiddleware


def _mock_request(method: str = "GET", path: str = "/api/v1/appointments", headers=None):
    request = AsyncMock(spec=Request)
    request.method = method
    request.url.path = path
    request.headers = headers or {}
    request.state = MagicMock()
    return request


class TestLogfireMiddlewareDispatch:
    """Test LogfireMiddleware.dispatch method."""

    @pytest.mark.asyncio
    async def test_reports_successful_request(self):
        async def call_next(request):
            return Response(content="ok", status_code=201)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch("emotions_app.server.middleware.logfire_middleware.log_api_request") as mock_log:
            response = await middleware.dispatch(_mock_request("POST"), call_next)

        assert response.status_code == 201
        mock_log.assert_called_once()
        kwargs = mock_log.call_args[1]
        assert kwargs["method"] == "POST"
        assert kwargs["path"] == "/api/v1/appointments"
        assert kwargs["status_code"] == 201
        assert kwargs["duration_ms"] >= 0

    @pytest.mark.asyncio
    async def test_sets_process_time_header(self):
        async def call_next(request):
            return Response(content="ok")

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch("emotions_app.server.middleware.logfire_middleware.log_api_request"):
            response = await middleware.dispatch(_mock_request(), call_next)

        assert float(response.headers["X-Process-Time"]) >= 0

    @pytest.mark.asyncio
    async def test_warns_on_slow_request(self):
        async def call_next(request):
            return Response(content="ok")

        middleware = LogfireMiddleware(app=AsyncMock())
        # First call is the start time, second the end time
        clock = iter([100.0, 100.0 + (SLOW_REQUEST_MS + 500) / 1000])

        with patch("emotions_app.server.middleware.logfire_middleware.log_api_request"), patch(
            "emotions_app.server.middleware.logfire_middleware.time.time", side_effect=lambda: next(clock)
        ), patch("emotions_app.server.middleware.logfire_middleware.logger") as mock_logger:
            request = _mock_request(headers={USER_ID_HEADER: "mentor_1"})
            await middleware.dispatch(request, call_next)

        mock_logger.warning.assert_called_once()
        extra = mock_logger.warning.call_args[1]["extra"]
        assert extra["user_id"] == "mentor_1"
        assert extra["duration_ms"] == pytest.approx(SLOW_REQUEST_MS + 500)

    @pytest.mark.asyncio
    async def test_fast_request_does_not_warn(self):
        async def call_next(request):
            return Response(content="ok")

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch("emotions_app.server.middleware.logfire_middleware.log_api_request"), patch(
            "emotions_app.server.middleware.logfire_middleware.logger"
        ) as mock_logger:
            await middleware.dispatch(_mock_request(), call_next)

        mock_logger.warning.assert_not_called()

    @pytest.mark.asyncio
    async def test_logs_and_reraises_failures(self):
        async def call_next(request):
            raise RuntimeError("database unavailable")

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch("emotions_app.server.middleware.logfire_middleware.log_api_request") as mock_log, patch(
            "emotions_app.server.middleware.logfire_middleware.logger"
        ) as mock_logger:
            with pytest.raises(RuntimeError, match="database unavailable"):
                await middleware.dispatch(_mock_request(), call_next)

        assert mock_log.call_args[1]["status_code"] == 500
        extra = mock_logger.error.call_args[1]["extra"]
        assert extra["user_id"] == "anonymous"
        assert extra["error"] == "database unavailable"


class TestLogfireMiddlewareIntegration:
    """Test the middleware mounted on an application."""

    def test_header_added_to_real_responses(self):
        app = FastAPI()
        app.add_middleware(LogfireMiddleware)

        @app.get("/ping")
        async def ping():
            return {"pong": True}

        with patch("emotions_app.server.middleware.logfire_middleware.log_api_request") as mock_log:
            client = TestClient(app, base_url="http://localhost")
            response = client.get("/ping", headers={USER_ID_HEADER: "patient_1"})

        assert response.status_code == 200
        assert "X-Process-Time" in response.headers
        assert mock_log.call_args[1]["path"] == "/ping"
