"""Security hardening: rate limits on every route, headers over HTTPS."""

from __future__ import annotations

import ast
import asyncio
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request

from folio.main import rate_limit_handler

ROUTERS_DIR = Path(__file__).resolve().parents[1] / "folio" / "routers"


# ── Rate limiting presence ──────────────────────────────────────


class TestRateLimitDecorators:
    """Every function decorated with @router.<method> also has @limiter.limit()."""

    @pytest.mark.parametrize("module_name", ["search.py", "posts.py"])
    def test_all_routes_have_rate_limit(self, module_name):
        module_path = ROUTERS_DIR / module_name
        tree = ast.parse(module_path.read_text(), filename=str(module_path))

        http_methods = {"get", "post", "put", "patch", "delete"}
        missing = []
        routes = 0

        for node in ast.walk(tree):
            if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                continue
            calls = [
                dec.func.attr
                for dec in node.decorator_list
                if isinstance(dec, ast.Call) and isinstance(dec.func, ast.Attribute)
            ]
            if http_methods & set(calls):
                routes += 1
                if "limit" not in calls:
                    missing.append(node.name)

        assert routes
        assert not missing, f"{module_name}: routes missing @limiter.limit(): {missing}"


class TestRateLimitResponse:
    def test_rate_limited_envelope(self):
        """A tripped limit renders the error envelope, not slowapi's text body."""
        request = Request({"type": "http", "method": "GET", "path": "/api/search", "headers": []})
        exc = RateLimitExceeded.__new__(RateLimitExceeded)

        response = asyncio.run(rate_limit_handler(request, exc))

        assert response.status_code == 429
        assert json.loads(response.body) == {
            "ok": False,
            "error": {
                "code": "RATE_LIMITED",
                "message": "Rate limit exceeded. Please retry shortly.",
            },
        }


# ── Transport headers ───────────────────────────────────────────


class TestHsts:
    def test_sent_behind_https_proxy(self, client: TestClient):
        response = client.get(
            "/healthz",
            headers={"X-Forwarded-Proto": "https", "Host": "blog.example.com"},
        )
        assert response.headers["Strict-Transport-Security"].startswith("max-age=")

    def test_not_sent_for_localhost(self, client: TestClient):
        response = client.get(
            "/healthz", headers={"X-Forwarded-Proto": "https", "Host": "localhost"}
        )
        assert "Strict-Transport-Security" not in response.headers
