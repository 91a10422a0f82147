"""Application-level tests: health, headers, metrics and error envelopes."""

from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import text

from folio.config import settings


def test_healthz(client: TestClient):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readyz(client: TestClient):
    assert client.get("/readyz").json() == {"status": "ready"}


def test_readyz_without_posts_table(client: TestClient, db_session):
    db_session.execute(text("DROP TABLE post_series_items"))
    db_session.execute(text("DROP TABLE posts"))
    db_session.commit()

    response = client.get("/readyz")

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "UNAVAILABLE"


def test_security_headers(client: TestClient):
    response = client.get("/healthz")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["Referrer-Policy"] == "no-referrer"
    assert "default-src 'none'" in response.headers["Content-Security-Policy"]
    # Plain HTTP on the test host
    assert "Strict-Transport-Security" not in response.headers


def test_request_id_generated(client: TestClient):
    response = client.get("/healthz")
    assert response.headers.get("X-Request-ID")


def test_unknown_route_uses_envelope(client: TestClient):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {
        "ok": False,
        "error": {"code": "NOT_FOUND", "message": "Not Found"},
    }


class TestMetrics:
    def test_open_without_password(self, client: TestClient):
        client.get("/healthz")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "folio_request_total" in response.text

    def test_requires_credentials_when_configured(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(settings, "metrics_password", "s3cret")

        assert client.get("/metrics").status_code == 401
        assert client.get("/metrics", auth=("prometheus", "wrong")).status_code == 401
        assert client.get("/metrics", auth=("prometheus", "s3cret")).status_code == 200

    def test_store_metrics_recorded(self, client: TestClient, make_post):
        make_post("Rust", tags=["rust"])
        client.get("/api/search", params={"q": "rust"})

        body = client.get("/metrics").text

        assert 'folio_store_query_duration_seconds_count{operation="count",table="posts"}' in body

    def test_api_errors_counted_by_code(self, client: TestClient):
        client.get("/api/search", params={"mode": "bogus"})

        body = client.get("/metrics").text

        assert 'folio_api_errors_total{code="BAD_MODE"}' in body

    def test_routes_labelled_by_template(self, client: TestClient):
        client.get("/api/posts/some-slug/series")

        body = client.get("/metrics").text

        assert 'route="/api/posts/{post_id}/series"' in body
        assert "some-slug" not in body
