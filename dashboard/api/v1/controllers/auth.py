from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from dashboard.api.v1.schemas.auth import Credentials, LoginPageResponse, SessionResponse
from dashboard.core.session import SessionStore
from dashboard.services.dashboard_service import DashboardService

router = APIRouter(
    route_class=DishkaRoute,
    tags=["Auth"],
)


@router.get("/login", response_model=LoginPageResponse)
async def login_page(
    session: FromDishka[SessionStore],
    message: str | None = None,
) -> LoginPageResponse:
    """Target of the session redirects. Echoes the reason, e.g. "Session expired"."""
    return LoginPageResponse(authenticated=session.is_authenticated, message=message)


@router.post("/login", response_model=SessionResponse)
async def login(
    credentials: Credentials,
    service: FromDishka[DashboardService],
) -> SessionResponse:
    """Sign in against the detector service and keep the token in this session."""
    auth = await service.login(credentials.email, credentials.password)
    return SessionResponse(authenticated=True, token_type=auth.token_type)


@router.post("/register", response_model=SessionResponse)
async def register(
    credentials: Credentials,
    service: FromDishka[DashboardService],
) -> SessionResponse:
    """Create an account and sign in."""
    auth = await service.register(credentials.email, credentials.password)
    return SessionResponse(authenticated=True, token_type=auth.token_type)


@router.post("/logout", response_model=SessionResponse)
async def logout(service: FromDishka[DashboardService]) -> SessionResponse:
    service.logout()
    return SessionResponse(authenticated=False)


@router.get("/session", response_model=SessionResponse)
async def session_state(session: FromDishka[SessionStore]) -> SessionResponse:
    return SessionResponse(authenticated=session.is_authenticated)
