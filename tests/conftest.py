from __future__ import annotations

import json
import sys
from contextlib import AsyncExitStack
from pathlib import Path

import httpx
import pytest

# Ensure workspace root is importable so `dashboard` works without installing
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dashboard.client.http_client import ApiClient  # noqa: E402
from dashboard.core.session import SessionStore  # noqa: E402

BASE_URL = "http://detector.test"


@pytest.fixture
def problem():
    """Build an application/problem+json response."""

    def _problem(status: int, detail: str | None = None, **fields) -> httpx.Response:
        body = {"status": status, **fields}
        if detail is not None:
            body["detail"] = detail
        return httpx.Response(
            status,
            content=json.dumps(body).encode(),
            headers={"content-type": "application/problem+json"},
        )

    return _problem


@pytest.fixture
def session() -> SessionStore:
    return SessionStore()


@pytest.fixture
async def make_client(session):
    """Build ApiClients over a mock transport, closed when the test ends."""
    async with AsyncExitStack() as stack:

        def _make(handler, **kwargs) -> ApiClient:
            http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
            stack.push_async_callback(http.aclose)
            return ApiClient(http, session, BASE_URL, **kwargs)

        yield _make


ANALYSIS_TEXT = "Written by me. This sentence sounds generated."


class FakeDetector:
    """Minimal stand-in for the remote detector service."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.overrides: dict[tuple[str, str], httpx.Response] = {}
        self.valid_token = "token-123"

    def override(self, method: str, path: str, response: httpx.Response) -> None:
        self.overrides[(method, path)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key in self.overrides:
            return self.overrides[key]

        if key in {("POST", "/auth/login"), ("POST", "/auth/register")}:
            return httpx.Response(200, json={"access_token": self.valid_token, "token_type": "bearer"})
        if key == ("GET", "/health"):
            return httpx.Response(200, json={"status": "ok"})

        if request.headers.get("authorization") != f"Bearer {self.valid_token}":
            return httpx.Response(401)

        if key == ("GET", "/auth/me"):
            return httpx.Response(200, json={
                "id": 1, "email": "user@example.com", "created_at": "2026-01-02T03:04:05Z",
            })
        if key == ("GET", "/stats"):
            return httpx.Response(200, json={
                "total_count": 3, "ai_count": 2, "human_count": 1, "avg_prob_ai": 0.61,
            })
        if key == ("POST", "/analyze"):
            return httpx.Response(200, json={
                "label": 1,
                "prob_ai": 0.82,
                "threshold": 0.5,
                "segments": [
                    {"start": 15, "end": 30, "prob_ai": 0.7},
                    {"start": 25, "end": 999, "prob_ai": 0.9},
                ],
            })
        if key == ("GET", "/analyses"):
            limit = int(request.url.params.get("limit", "20"))
            items = [
                {
                    "id": i,
                    "created_at": "2026-01-02T03:04:05Z",
                    "label_pred": i % 2,
                    "prob_ai": 0.5,
                    "preview": f"preview {i}",
                }
                for i in range(1, 4)
            ]
            return httpx.Response(200, json=items[:limit])
        if key == ("GET", "/analyses/7"):
            return httpx.Response(200, json={
                "id": 7,
                "created_at": "2026-01-02T03:04:05Z",
                "label_pred": 1,
                "prob_ai": 0.82,
                "text": ANALYSIS_TEXT,
                "segments": [{"start": 15, "end": 46, "prob_ai": 0.9}],
            })
        if key == ("GET", "/export/csv"):
            return httpx.Response(200, content=b"id,label\n7,1\n", headers={
                "content-type": "text/csv",
                "content-disposition": 'attachment; filename="history.csv"',
            })
        if key == ("GET", "/export/pdf"):
            return httpx.Response(200, content=b"%PDF-1.4", headers={"content-type": "application/pdf"})

        return httpx.Response(404)


@pytest.fixture
def detector() -> FakeDetector:
    return FakeDetector()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
