"""Unit tests for the Problem Details exception handlers."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from analytics_service.app.exception_handlers import configure_exception_handlers
from analytics_service.app.middleware import RequestIDMiddleware
from analytics_service.core.exceptions import (
    GatewayTimeoutException,
    InvalidCursorException,
    ServiceUnavailableException,
)


@pytest.fixture
def handler_app() -> FastAPI:
    app = FastAPI()
    configure_exception_handlers(app)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/cursor")
    async def bad_cursor():
        raise InvalidCursorException(detail="invalid after cursor", extra={"field": "after"})

    @app.get("/unavailable")
    async def unavailable():
        raise ServiceUnavailableException(detail="Analytics store is temporarily unavailable")

    @app.get("/timeout")
    async def timeout():
        raise GatewayTimeoutException(detail="Analytics query exceeded its deadline")

    @app.get("/crash")
    async def crash():
        raise RuntimeError("secret internals")

    @app.get("/typed")
    async def typed(first: int):
        return {"first": first}

    return app


@pytest.fixture
async def handler_client(handler_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    # The catch-all handler responds, then Starlette re-raises to the server
    transport = ASGITransport(app=handler_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestAppExceptionHandler:
    """AppException -> Problem Details."""

    async def test_invalid_cursor(self, handler_client: AsyncClient):
        response = await handler_client.get("/cursor", headers={"X-Request-ID": "req-1"})

        assert response.status_code == 400
        assert response.headers["content-type"] == "application/json"
        body = response.json()
        assert body["type"] == "invalid-cursor"
        assert body["title"] == "Bad Request"
        assert body["status"] == 400
        assert body["detail"] == "invalid after cursor"
        assert body["field"] == "after"
        assert body["request_id"] == "req-1"
        assert body["instance"] == "http://test/cursor"

    async def test_unavailable_sets_retry_after(self, handler_client: AsyncClient):
        response = await handler_client.get("/unavailable")

        assert response.status_code == 503
        assert response.headers["retry-after"] == "1"
        assert response.json()["type"] == "service-unavailable"

    async def test_timeout(self, handler_client: AsyncClient):
        response = await handler_client.get("/timeout")

        assert response.status_code == 504
        assert response.json()["type"] == "deadline-exceeded"
        assert "retry-after" not in response.headers


class TestOtherHandlers:
    """Validation and catch-all handlers."""

    async def test_validation_error(self, handler_client: AsyncClient):
        response = await handler_client.get("/typed", params={"first": "ten"})

        assert response.status_code == 422
        body = response.json()
        assert body["type"] == "validation-error"
        assert body["errors"][0]["field"] == "query.first"
        assert body["errors"][0]["value"] == "ten"

    async def test_unexpected_error_hides_details(self, handler_client: AsyncClient):
        response = await handler_client.get("/crash")

        assert response.status_code == 500
        body = response.json()
        assert body["type"] == "internal-error"
        assert "secret" not in response.text
