"""
Service provider for dependency injection.

This module provides all service dependencies.
"""

from collections.abc import AsyncIterable
from typing import Optional

import httpx
from dishka import Provider, Scope, from_context, provide
from fastapi import Request

from dashboard.client.detector_api import DetectorApi, UpstreamHealth
from dashboard.client.http_client import ApiClient, build_login_url
from dashboard.core.config import Config
from dashboard.core.session import SessionRegistry, SessionStore
from dashboard.services.dashboard_service import DashboardService


class ServiceProvider(Provider):
    """
    Provider for service dependencies.

    Shared infrastructure is provided at APP scope (singleton). Anything
    bound to a user session is provided at REQUEST scope.
    """

    config = from_context(provides=Config, scope=Scope.APP)

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        super().__init__()
        self._transport = transport

    @provide(scope=Scope.APP)
    def provide_session_registry(self, config: Config) -> SessionRegistry:
        return SessionRegistry(ttl=config.session_cookie.max_age)

    @provide(scope=Scope.APP)
    async def provide_http_client(self, config: Config) -> AsyncIterable[httpx.AsyncClient]:
        async with httpx.AsyncClient(
            timeout=config.request_timeout,
            transport=self._transport,
        ) as client:
            yield client

    @provide(scope=Scope.APP)
    def provide_upstream_health(self, http: httpx.AsyncClient, config: Config) -> UpstreamHealth:
        return UpstreamHealth(DetectorApi(ApiClient(http, SessionStore(), config.api_base_url)))

    @provide(scope=Scope.REQUEST)
    def provide_session(self, request: Request, registry: SessionRegistry) -> SessionStore:
        return registry.get(request.state.session_id)

    @provide(scope=Scope.REQUEST)
    def provide_api_client(
        self,
        http: httpx.AsyncClient,
        session: SessionStore,
        registry: SessionRegistry,
        config: Config,
    ) -> ApiClient:
        return ApiClient(
            http,
            session,
            config.api_base_url,
            login_url=build_login_url(config.login_path, config.session_expired_message),
            on_session_expired=registry.record_expiry,
        )

    @provide(scope=Scope.REQUEST)
    def provide_detector_api(self, client: ApiClient) -> DetectorApi:
        return DetectorApi(client)

    @provide(scope=Scope.REQUEST)
    def provide_dashboard_service(
        self,
        api: DetectorApi,
        session: SessionStore,
        config: Config,
    ) -> DashboardService:
        return DashboardService(api, session, login_path=config.login_path)
