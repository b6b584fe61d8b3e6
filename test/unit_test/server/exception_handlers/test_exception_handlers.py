"""
Unit tests for server exception handlers.

Tests cover the translation of domain errors, request validation failures,
integrity errors and unexpected exceptions into JSON responses.
"""

import json
from typing import Optional
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError

from diligence_labs.core.errors import AccountLockedError, NotFoundError, RateLimitError
from diligence_labs.server.exception_handlers import setup_exception_handlers
from diligence_labs.server.exception_handlers.global_handler import (
    domain_exception_handler,
    global_exception_handler,
)

MODULE = "diligence_labs.server.exception_handlers.global_handler"


@pytest.fixture
def mock_request():
    request = Mock(spec=Request)
    request.method = "GET"
    request.url.path = "/api/v1/test"
    request.query_params = {}
    request.client = Mock()
    request.client.host = "127.0.0.1"
    return request


@pytest.mark.asyncio
class TestDomainExceptionHandler:
    async def test_status_and_body(self, mock_request):
        response = await domain_exception_handler(mock_request, NotFoundError("Project"))

        assert response.status_code == 404
        assert json.loads(response.body) == {"detail": "Project not found", "code": "NOT_FOUND"}

    async def test_headers_are_passed_through(self, mock_request):
        exc = RateLimitError(details={"retryAfter": 12}, headers={"Retry-After": "12"})

        response = await domain_exception_handler(mock_request, exc)

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "12"
        assert json.loads(response.body)["retryAfter"] == 12

    async def test_client_errors_log_at_info(self, mock_request):
        with patch(f"{MODULE}.logger") as mock_logger:
            await domain_exception_handler(mock_request, AccountLockedError("Account locked"))

        mock_logger.info.assert_called_once()
        mock_logger.error.assert_not_called()


@pytest.mark.asyncio
class TestGlobalExceptionHandler:
    """Test suite for global exception handler."""

    async def test_returns_500_with_error_id(self, mock_request):
        exc = ValueError("Test error")

        with patch(f"{MODULE}.log_error") as mock_log_error:
            response = await global_exception_handler(mock_request, exc)

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body["detail"] == "Internal server error"
        assert body["error_id"] == id(exc)
        assert body["error_type"] == "ValueError"
        mock_log_error.assert_called_once()

    async def test_logs_request_context(self, mock_request):
        with patch(f"{MODULE}.logger") as mock_logger:
            await global_exception_handler(mock_request, KeyError("missing"))

        mock_logger.error.assert_called_once()
        extra = mock_logger.error.call_args.kwargs["extra"]
        assert extra["error_type"] == "KeyError"
        assert extra["path"] == "/api/v1/test"
        assert extra["client"] == "127.0.0.1"

    async def test_missing_client(self, mock_request):
        mock_request.client = None

        with patch(f"{MODULE}.logger") as mock_logger:
            response = await global_exception_handler(mock_request, RuntimeError("boom"))

        assert response.status_code == 500
        assert mock_logger.error.call_args.kwargs["extra"]["client"] == "unknown"


class Payload(BaseModel):
    title: str = Field(min_length=5)
    count: Optional[int] = None


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)

    @app.post("/payload")
    async def payload(body: Payload):
        return body

    @app.get("/conflict")
    async def conflict():
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    @app.get("/crash")
    async def crash():
        raise RuntimeError("unexpected")

    return app


@pytest.mark.asyncio
class TestRegisteredHandlers:
    async def test_validation_errors_are_400(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            response = await client.post("/payload", json={"title": "abc", "count": "many"})

        body = response.json()
        assert response.status_code == 400
        assert body["detail"] == "Invalid input"
        assert body["code"] == "VALIDATION_ERROR"
        assert {error["field"] for error in body["errors"]} == {"title", "count"}

    async def test_integrity_errors_are_409(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            response = await client.get("/conflict")

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    async def test_unexpected_errors_are_500(self, app):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://localhost") as client:
            response = await client.get("/crash")

        assert response.status_code == 500
        assert response.json()["error_type"] == "RuntimeError"
