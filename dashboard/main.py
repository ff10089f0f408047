"""
Main FastAPI application for the detector dashboard.
"""
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from dishka import make_async_container
from dishka.integrations import fastapi as fastapi_integration
from dishka.integrations.fastapi import DishkaRoute, FastapiProvider, FromDishka
from fastapi import APIRouter, FastAPI

from dashboard.api.exceptions.exception_handlers import register_exception_handlers
from dashboard.api.middlewares.session_middleware import SessionCookieMiddleware
from dashboard.api.v1.controllers.analysis import router as analysis_router
from dashboard.api.v1.controllers.auth import router as auth_router
from dashboard.client.detector_api import UpstreamHealth
from dashboard.client.errors import ApiError
from dashboard.core.config import Config, config
from dashboard.core.logging import get_logger, setup_logging
from dashboard.ioc import AppProvider

__version__ = "0.1.0"

logger = get_logger(__name__)


def create_app(
    app_config: Config = config,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application with Dishka DI container.

    Args:
        app_config: Application configuration
        transport: Optional httpx transport for the detector service client
    """
    container = make_async_container(
        AppProvider(transport),
        FastapiProvider(),
        context={Config: app_config},
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "application_startup",
            app_name=app_config.app_name,
            api_base_url=app_config.api_base_url,
        )
        yield
        logger.info("application_shutdown", app_name=app_config.app_name)
        await container.close()

    app = FastAPI(
        title=app_config.app_name,
        description="Dashboard for the AI vs human text detector",
        version=__version__,
        lifespan=lifespan,
    )

    fastapi_integration.setup_dishka(container, app)
    app.add_middleware(SessionCookieMiddleware, cookie=app_config.session_cookie)

    register_exception_handlers(app)

    health_router = APIRouter(route_class=DishkaRoute, tags=["Health"])

    @health_router.get("/health")
    async def health_check(upstream_health: FromDishka[UpstreamHealth]):
        """
        Liveness of the dashboard plus the detector service's own health endpoint.
        """
        try:
            upstream = (await upstream_health.check()).status
        except (httpx.TransportError, ApiError) as e:
            logger.warning("upstream_health_failed", error=str(e))
            upstream = "unreachable"
        return {"status": "healthy", "service": app_config.app_name, "upstream": upstream}

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(analysis_router)

    return app


setup_logging(
    level="DEBUG" if config.debug else "INFO",
    json_logs=not config.debug,
    app_name=config.app_name,
    version=__version__,
)

app = create_app()
