"""Tests for the shared rate limiter."""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.rate_limit import DEFAULT_LIMIT, LLM_LIMIT, _get_real_client_ip, limiter


def _request(headers=None, client=("10.0.0.5", 4321)):
    request = MagicMock(spec=Request)
    request.headers = headers or {}
    request.client = MagicMock(host=client[0]) if client else None
    return request


class TestClientIp:
    def test_forwarded_for_leftmost(self):
        request = _request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
        assert _get_real_client_ip(request) == "203.0.113.7"

    def test_socket_peer(self):
        assert _get_real_client_ip(_request()) == "10.0.0.5"

    def test_no_client(self):
        assert _get_real_client_ip(_request(client=None)) == "127.0.0.1"


def test_limits():
    assert DEFAULT_LIMIT == "60/minute"
    assert LLM_LIMIT == "10/minute"


@pytest.mark.asyncio
async def test_decorated_route_returns_429(monkeypatch):
    monkeypatch.setattr(limiter, "enabled", True)
    app = FastAPI()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.get("/generate")
    @limiter.limit("2/minute")
    async def generate(request: Request):
        return {"ok": True}

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            codes = [(await client.get("/generate")).status_code for _ in range(3)]
    finally:
        limiter.reset()

    assert codes == [200, 200, 429]
