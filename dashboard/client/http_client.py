"""
Typed HTTP client for the remote detector service.

Handles bearer authentication, content negotiation (JSON, binary or empty
body) and converts every failure response into a single ApiError.
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any, Callable, Mapping, Optional
from urllib.parse import quote, unquote

import httpx

from dashboard.client.errors import ApiError
from dashboard.client.schemas import ProblemDetails
from dashboard.core.logging import get_logger
from dashboard.core.session import SessionStore
from dashboard.dtos.download_dto import DownloadDTO

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"
PROBLEM_CONTENT_TYPE = "application/problem+json"

_EXTENDED_FILENAME = re.compile(r"filename\*\s*=\s*UTF-8''([^;]+)", re.IGNORECASE)
_PLAIN_FILENAME = re.compile(r'filename\s*=\s*"?([^";]+)"?', re.IGNORECASE)

SessionExpiredCallback = Callable[[str], None]


class ResponseType(str, Enum):
    JSON = "json"
    BLOB = "blob"


def extract_filename(content_disposition: Optional[str], fallback: str) -> str:
    """
    Derive a download filename from a Content-Disposition header.

    Precedence: RFC 5987 ``filename*=UTF-8''...``, then a quoted or bare
    ``filename=``, then the fallback.
    """
    if not content_disposition:
        return fallback

    match = _EXTENDED_FILENAME.search(content_disposition)
    if match is None:
        match = _PLAIN_FILENAME.search(content_disposition)
    if match is None:
        return fallback

    filename = unquote(match.group(1).strip())
    return filename or fallback


def build_login_url(login_path: str, message: str) -> str:
    return f"{login_path}?message={quote(message)}"


class ApiClient:
    """Executes requests against the detector service on behalf of one session."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        session: SessionStore,
        base_url: str,
        *,
        login_url: str = "/login?message=Session%20expired",
        on_session_expired: Optional[SessionExpiredCallback] = None,
    ) -> None:
        self._http = http
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._login_url = login_url
        self._on_session_expired = on_session_expired

    @property
    def session(self) -> SessionStore:
        return self._session

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _auth_headers(self, headers: httpx.Headers) -> None:
        token = self._session.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        auth: bool = False,
        response_type: ResponseType = ResponseType.JSON,
    ) -> Any:
        """
        Issue a request and decode its response.

        Args:
            method: HTTP method
            path: Server-relative route, appended to the base URL
            body: Request body. bytes/str are sent as-is, anything else is
                JSON-encoded
            headers: Caller-supplied headers
            auth: Attach the session's bearer token if one is set
            response_type: JSON (default) or BLOB for binary downloads

        Returns:
            Parsed JSON, raw bytes for BLOB requests, or None for empty and
            non-JSON responses

        Raises:
            ApiError: On any non-2xx response
            httpx.TransportError: On network failure, unchanged
        """
        request_headers = httpx.Headers(headers or {})
        if auth:
            self._auth_headers(request_headers)

        content: Optional[bytes | str] = None
        if body is not None and body != b"" and body != "":
            content = body if isinstance(body, (bytes, str)) else json.dumps(body)
            if "content-type" not in request_headers:
                request_headers["Content-Type"] = JSON_CONTENT_TYPE

        response = await self._http.request(
            method,
            self._url(path),
            content=content,
            headers=request_headers,
        )

        if not response.is_success:
            await self._raise_for_response(method, path, response)

        if response_type is ResponseType.BLOB:
            return response.content

        if response.status_code == httpx.codes.NO_CONTENT:
            return None

        if JSON_CONTENT_TYPE in response.headers.get("content-type", ""):
            return response.json()

        return None

    async def download(self, path: str, fallback: str) -> DownloadDTO:
        """Fetch a binary attachment and recover its suggested filename."""
        headers = httpx.Headers()
        self._auth_headers(headers)

        response = await self._http.get(self._url(path), headers=headers)
        if not response.is_success:
            await self._raise_for_response("GET", path, response)

        filename = extract_filename(response.headers.get("content-disposition"), fallback)
        logger.info("download_completed", path=path, filename=filename, size=len(response.content))
        return DownloadDTO(
            content=response.content,
            filename=filename,
            content_type=response.headers.get("content-type", "application/octet-stream"),
        )

    async def _raise_for_response(self, method: str, path: str, response: httpx.Response) -> None:
        if response.status_code == httpx.codes.UNAUTHORIZED:
            first = self._session.invalidate()
            logger.warning("session_expired", method=method, path=path, redirect=first)
            redirect_to = None
            if first:
                redirect_to = self._login_url
                if self._on_session_expired is not None:
                    self._on_session_expired(redirect_to)
            raise ApiError.unauthenticated(redirect_to)

        problem = await self._parse_problem(response)
        reason = response.reason_phrase or f"HTTP {response.status_code}"
        error = ApiError.from_problem(response.status_code, reason, problem)
        logger.warning(
            "api_request_failed",
            method=method,
            path=path,
            status_code=response.status_code,
            kind=error.kind.value,
            detail=error.detail,
        )
        raise error

    @staticmethod
    async def _parse_problem(response: httpx.Response) -> Optional[ProblemDetails]:
        if PROBLEM_CONTENT_TYPE not in response.headers.get("content-type", ""):
            return None
        try:
            await response.aread()
            return ProblemDetails.model_validate(response.json())
        except ValueError as e:
            # Covers JSON decode errors and pydantic validation errors
            logger.warning("problem_parse_failed", status_code=response.status_code, error=str(e))
            return None
