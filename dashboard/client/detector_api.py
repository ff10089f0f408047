from urllib.parse import quote

from pydantic import TypeAdapter

from dashboard.client.http_client import ApiClient
from dashboard.client.schemas import (
    AnalysisDetail,
    AnalysisId,
    AnalysisListItem,
    AnalyzeResponse,
    AuthResponse,
    HealthResponse,
    StatsResponse,
    UserProfile,
)
from dashboard.dtos.download_dto import DownloadDTO

_ANALYSIS_LIST = TypeAdapter(list[AnalysisListItem])

CSV_FALLBACK_FILENAME = "analyses.csv"
PDF_FALLBACK_FILENAME = "analyses.pdf"


class DetectorApi:
    """Endpoints of the remote detector service, one method per route."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self._client.request(
            "POST", "/auth/login", body={"email": email, "password": password}, auth=False
        )
        return AuthResponse.model_validate(data)

    async def register(self, email: str, password: str) -> AuthResponse:
        data = await self._client.request(
            "POST", "/auth/register", body={"email": email, "password": password}, auth=False
        )
        return AuthResponse.model_validate(data)

    async def me(self) -> UserProfile:
        data = await self._client.request("GET", "/auth/me", auth=True)
        return UserProfile.model_validate(data)

    async def analyze(self, text: str) -> AnalyzeResponse:
        data = await self._client.request("POST", "/analyze", body={"text": text}, auth=True)
        return AnalyzeResponse.model_validate(data)

    async def list_analyses(self, limit: int = 20) -> list[AnalysisListItem]:
        data = await self._client.request("GET", f"/analyses?limit={limit}", auth=True)
        return _ANALYSIS_LIST.validate_python(data)

    async def get_analysis(self, analysis_id: AnalysisId) -> AnalysisDetail:
        data = await self._client.request("GET", f"/analyses/{quote(str(analysis_id), safe='')}", auth=True)
        return AnalysisDetail.model_validate(data)

    async def get_stats(self) -> StatsResponse:
        data = await self._client.request("GET", "/stats", auth=True)
        return StatsResponse.model_validate(data)

    async def export_csv(self) -> DownloadDTO:
        return await self._client.download("/export/csv", CSV_FALLBACK_FILENAME)

    async def export_pdf(self) -> DownloadDTO:
        return await self._client.download("/export/pdf", PDF_FALLBACK_FILENAME)

    async def health(self) -> HealthResponse:
        data = await self._client.request("GET", "/health", auth=False)
        return HealthResponse.model_validate(data)


class UpstreamHealth:
    """Unauthenticated health check that never touches a user session."""

    def __init__(self, api: DetectorApi) -> None:
        self._api = api

    async def check(self) -> HealthResponse:
        return await self._api.health()
