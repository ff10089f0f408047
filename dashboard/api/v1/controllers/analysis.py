from urllib.parse import quote

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query
from fastapi.responses import Response

from dashboard.api.v1.schemas.analysis import (
    AnalyzeRequest,
    HighlightedAnalysisResponse,
    OverviewResponse,
)
from dashboard.client.schemas import AnalysisListItem
from dashboard.core.config import config
from dashboard.services.dashboard_service import DashboardService

router = APIRouter(
    route_class=DishkaRoute,
    tags=["Analysis"],
)


def _content_disposition(filename: str) -> str:
    ascii_name = filename.encode("ascii", "ignore").decode().replace('"', "") or "download"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


@router.get("/dashboard", response_model=OverviewResponse)
async def dashboard(service: FromDishka[DashboardService]) -> OverviewResponse:
    """Profile and aggregate stats for the signed-in user."""
    overview = await service.overview()
    return OverviewResponse(profile=overview.profile, stats=overview.stats)


@router.post("/analyze", response_model=HighlightedAnalysisResponse)
async def analyze_text(
    request: AnalyzeRequest,
    service: FromDishka[DashboardService],
) -> HighlightedAnalysisResponse:
    """Classify the submitted text and return it split into highlighted runs."""
    result = await service.analyze(request.text)
    return HighlightedAnalysisResponse.from_dto(result)


@router.get("/history", response_model=list[AnalysisListItem])
async def history(
    service: FromDishka[DashboardService],
    limit: int = Query(config.default_history_limit, ge=1, le=500),
) -> list[AnalysisListItem]:
    return await service.history(limit)


@router.get("/history/export/{fmt}")
async def export_history(fmt: str, service: FromDishka[DashboardService]) -> Response:
    """Download the analysis history as CSV or PDF."""
    download = await service.export(fmt)
    return Response(
        content=download.content,
        media_type=download.content_type,
        headers={"Content-Disposition": _content_disposition(download.filename)},
    )


@router.get("/history/{analysis_id}", response_model=HighlightedAnalysisResponse)
async def analysis_detail(
    analysis_id: str,
    service: FromDishka[DashboardService],
) -> HighlightedAnalysisResponse:
    result = await service.analysis_detail(analysis_id)
    return HighlightedAnalysisResponse.from_dto(result)
