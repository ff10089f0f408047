"""
Session cookie middleware.

Assigns every browser a session id, exposes it on ``request.state`` and binds
it, with a fresh request id, to the logging context.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from dashboard.core.config import SessionCookieConfig
from dashboard.core.logging import get_logger, new_request_id, request_context
from dashboard.core.session import SessionRegistry

logger = get_logger(__name__)


class SessionCookieMiddleware(BaseHTTPMiddleware):
    """Reads or issues the session cookie for each request."""

    def __init__(self, app, cookie: SessionCookieConfig):
        super().__init__(app)
        self._cookie = cookie

    async def dispatch(self, request: Request, call_next):
        session_id = request.cookies.get(self._cookie.name)
        issued = session_id is None
        if issued:
            session_id = SessionRegistry.new_session_id()

        request.state.session_id = session_id
        request_id = new_request_id()

        with request_context(request_id, session_id):
            response = await call_next(request)
            logger.debug(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )

        response.headers["X-Request-ID"] = request_id
        if issued:
            response.set_cookie(
                self._cookie.name,
                session_id,
                max_age=self._cookie.max_age,
                httponly=True,
                secure=self._cookie.secure,
                samesite="lax",
            )
        return response
