"""Tests for request timeout middleware."""

import asyncio

from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.middleware.timeout import TimeoutMiddleware


def _app_with_timeout(timeout: float) -> FastAPI:
    """Minimal app mimicking a feedback route stuck on the database."""
    app = FastAPI()
    app.add_middleware(TimeoutMiddleware, timeout_seconds=timeout)

    @app.get("/api/userfeedback")
    async def list_feedback():
        return []

    @app.get("/api/records/{uuid}/userfeedbackrating")
    async def stuck_rating(uuid: str):
        await asyncio.sleep(10)
        return {"count": 0}

    @app.get("/health")
    async def health():
        await asyncio.sleep(0.2)
        return {"status": "healthy"}

    return app


class TestTimeoutMiddleware:
    def test_request_within_timeout(self):
        client = TestClient(_app_with_timeout(5.0))
        resp = client.get("/api/userfeedback")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_stuck_request_returns_504(self):
        client = TestClient(_app_with_timeout(0.1))
        resp = client.get("/api/records/md-001/userfeedbackrating")
        assert resp.status_code == 504
        data = resp.json()
        assert data["detail"] == "Request timed out"
        assert data["timeout_seconds"] == 0.1

    def test_health_not_subject_to_timeout(self):
        """/health sleeps past the limit and still answers."""
        client = TestClient(_app_with_timeout(0.05))
        resp = client.get("/health")
        assert resp.status_code == 200
