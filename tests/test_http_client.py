"""Tests for the detector API request executor and download sub-protocol."""

import asyncio
import json

import httpx
import pytest

from dashboard.client.errors import ApiError, ErrorKind
from dashboard.client.http_client import ResponseType

pytestmark = pytest.mark.anyio


async def test_bearer_token_and_json_body(make_client, session):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["content_type"] = request.headers.get("content-type")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    session.set_token("tok-1")
    client = make_client(handler)
    result = await client.request("POST", "/analyze", body={"text": "hi"}, auth=True)

    assert result == {"ok": True}
    assert seen["url"] == "http://detector.test/analyze"
    assert seen["auth"] == "Bearer tok-1"
    assert seen["content_type"] == "application/json"
    assert seen["body"] == {"text": "hi"}


async def test_no_auth_header_without_auth_flag_or_token(make_client, session):
    headers = []

    def handler(request: httpx.Request) -> httpx.Response:
        headers.append(request.headers.get("authorization"))
        return httpx.Response(200, json={})

    client = make_client(handler)
    await client.request("GET", "/auth/me", auth=True)
    session.set_token("tok")
    await client.request("GET", "/health", auth=False)

    assert headers == [None, None]


async def test_explicit_content_type_is_kept(make_client):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["content_type"] = request.headers.get("content-type")
        seen["body"] = request.content
        return httpx.Response(204)

    client = make_client(handler)
    result = await client.request(
        "POST", "/upload", body="a,b\n1,2", headers={"Content-Type": "text/csv"}
    )

    assert result is None
    assert seen == {"content_type": "text/csv", "body": b"a,b\n1,2"}


async def test_get_without_body_has_no_content_type(make_client):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["content_type"] = request.headers.get("content-type")
        return httpx.Response(200, json=[1, 2])

    assert await make_client(handler).request("GET", "/analyses?limit=2") == [1, 2]
    assert seen["content_type"] is None


async def test_non_json_success_returns_none(make_client):
    client = make_client(lambda request: httpx.Response(200, text="pong"))
    assert await client.request("GET", "/health") is None


async def test_blob_response_returns_raw_bytes(make_client):
    client = make_client(lambda request: httpx.Response(
        200,
        content=b"\x00\x01binary",
        headers={"content-type": "application/json"},
    ))
    result = await client.request("GET", "/export/csv", response_type=ResponseType.BLOB)
    assert result == b"\x00\x01binary"


async def test_unauthorized_clears_session_and_signals_once(make_client, session):
    redirects = []
    session.set_token("expired")
    client = make_client(
        lambda request: httpx.Response(401, json={"detail": "ignored"}),
        login_url="/login?message=Session%20expired",
        on_session_expired=redirects.append,
    )

    with pytest.raises(ApiError) as exc_info:
        await client.request("GET", "/auth/me", auth=True)

    error = exc_info.value
    assert error.status == 401
    assert error.kind is ErrorKind.UNAUTHENTICATED
    assert error.message == "Unauthorized"
    assert error.redirect_to == "/login?message=Session%20expired"
    assert session.get_token() is None
    assert redirects == ["/login?message=Session%20expired"]


async def test_concurrent_unauthorized_requests_redirect_at_most_once(make_client, session):
    redirects = []
    session.set_token("expired")

    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0)
        return httpx.Response(401)

    client = make_client(handler, on_session_expired=redirects.append)

    results = await asyncio.gather(
        client.request("GET", "/auth/me", auth=True),
        client.request("GET", "/stats", auth=True),
        return_exceptions=True,
    )

    assert all(isinstance(r, ApiError) and r.status == 401 for r in results)
    assert len(redirects) == 1
    assert sum(1 for r in results if r.redirect_to) == 1


async def test_problem_detail_becomes_error_message(make_client, problem):
    client = make_client(lambda request: problem(422, "text too short", title="Unprocessable"))

    with pytest.raises(ApiError) as exc_info:
        await client.request("POST", "/analyze", body={"text": "x"}, auth=True)

    error = exc_info.value
    assert str(error) == "text too short"
    assert error.message == "text too short"
    assert error.detail == "text too short"
    assert error.status == 422
    assert error.kind is ErrorKind.PROBLEM
    assert error.problem.title == "Unprocessable"


async def test_problem_without_detail_falls_back_to_status_text(make_client, problem):
    client = make_client(lambda request: problem(404))

    with pytest.raises(ApiError) as exc_info:
        await client.request("GET", "/analyses/9", auth=True)

    assert exc_info.value.message == "Not Found"
    assert exc_info.value.kind is ErrorKind.PROBLEM


async def test_plain_error_body_uses_status_text(make_client):
    client = make_client(lambda request: httpx.Response(500, json={"detail": "hidden"}))

    with pytest.raises(ApiError) as exc_info:
        await client.request("GET", "/stats", auth=True)

    error = exc_info.value
    assert error.message == "Internal Server Error"
    assert error.detail == "Internal Server Error"
    assert error.status == 500
    assert error.kind is ErrorKind.HTTP
    assert error.problem is None


async def test_malformed_problem_body_degrades_to_status_text(make_client):
    client = make_client(lambda request: httpx.Response(
        400,
        content=b"{not json",
        headers={"content-type": "application/problem+json"},
    ))

    with pytest.raises(ApiError) as exc_info:
        await client.request("GET", "/stats")

    assert exc_info.value.message == "Bad Request"
    assert exc_info.value.kind is ErrorKind.HTTP


async def test_non_401_error_keeps_session(make_client, session):
    session.set_token("tok")
    client = make_client(lambda request: httpx.Response(403))

    with pytest.raises(ApiError):
        await client.request("GET", "/stats", auth=True)

    assert session.get_token() == "tok"


async def test_transport_failure_propagates_unclassified(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(httpx.ConnectError):
        await make_client(handler).request("GET", "/health")


async def test_download_uses_content_disposition(make_client, session):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(
            200,
            content=b"%PDF-1.4",
            headers={
                "content-type": "application/pdf",
                "content-disposition": 'attachment; filename="report.pdf"',
            },
        )

    session.set_token("tok")
    download = await make_client(handler).download("/export/pdf", "analyses.pdf")

    assert download.filename == "report.pdf"
    assert download.content == b"%PDF-1.4"
    assert download.content_type == "application/pdf"
    assert seen["auth"] == "Bearer tok"


async def test_download_without_header_uses_fallback(make_client):
    client = make_client(lambda request: httpx.Response(200, content=b"a,b\n"))
    download = await client.download("/export/csv", "analyses.csv")
    assert download.filename == "analyses.csv"


async def test_download_failure_is_classified(make_client, problem):
    client = make_client(lambda request: problem(503, "export disabled"))

    with pytest.raises(ApiError) as exc_info:
        await client.download("/export/csv", "analyses.csv")

    assert exc_info.value.message == "export disabled"
    assert exc_info.value.status == 503
