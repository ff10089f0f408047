"""Page-level orchestration for the dashboard: auth, overview, analysis and history views."""
import asyncio
from dataclasses import dataclass
from typing import Optional

from dashboard.client.detector_api import DetectorApi
from dashboard.client.errors import ApiError
from dashboard.client.schemas import (
    AnalysisDetail,
    AnalysisId,
    AnalysisListItem,
    AuthResponse,
    Segment,
    StatsResponse,
    UserProfile,
)
from dashboard.core.logging import get_logger
from dashboard.core.session import SessionStore
from dashboard.dtos.analysis_dto import HighlightedAnalysisDTO
from dashboard.dtos.download_dto import DownloadDTO
from dashboard.utils.segment_merge import merge_segments, partition_text

logger = get_logger(__name__)

EXPORT_FORMATS = ("csv", "pdf")


def format_label(label: int) -> str:
    return "AI" if label == 1 else "Human"


def highlight(
    text: str,
    segments: list[Segment],
    *,
    label: int,
    prob_ai: float,
    threshold: Optional[float] = None,
    analysis_id: Optional[AnalysisId] = None,
    created_at=None,
) -> HighlightedAnalysisDTO:
    """Attach merged segments and text runs to an analysis result."""
    raw = [s.to_dto() for s in segments]
    return HighlightedAnalysisDTO(
        label=label,
        label_name=format_label(label),
        prob_ai=prob_ai,
        text=text,
        segments=merge_segments(raw, len(text)),
        runs=partition_text(text, raw),
        threshold=threshold,
        id=analysis_id,
        created_at=created_at,
    )


@dataclass
class OverviewDTO:
    profile: UserProfile
    stats: StatsResponse


class DashboardService:
    """Runs dashboard views against the detector API for a single session."""

    def __init__(self, api: DetectorApi, session: SessionStore, login_path: str = "/login") -> None:
        self._api = api
        self._session = session
        self._login_path = login_path

    def _require_session(self) -> None:
        if not self._session.is_authenticated:
            logger.info("session_required")
            raise ApiError.unauthenticated(self._login_path)

    async def login(self, email: str, password: str) -> AuthResponse:
        auth = await self._api.login(email, password)
        self._session.set_token(auth.access_token)
        logger.info("login_succeeded")
        return auth

    async def register(self, email: str, password: str) -> AuthResponse:
        auth = await self._api.register(email, password)
        self._session.set_token(auth.access_token)
        logger.info("registration_succeeded")
        return auth

    def logout(self) -> None:
        self._session.clear_token()
        logger.info("logout")

    async def overview(self) -> OverviewDTO:
        """Load the profile and stats concurrently."""
        self._require_session()
        profile, stats = await asyncio.gather(self._api.me(), self._api.get_stats())
        return OverviewDTO(profile=profile, stats=stats)

    async def analyze(self, text: str) -> HighlightedAnalysisDTO:
        self._require_session()
        if not text.strip():
            raise ValueError("Text to analyze must not be blank")

        result = await self._api.analyze(text)
        logger.info(
            "analysis_completed",
            label=result.label,
            prob_ai=result.prob_ai,
            segments=len(result.segments),
        )
        return highlight(
            text,
            result.segments,
            label=result.label,
            prob_ai=result.prob_ai,
            threshold=result.threshold,
        )

    async def history(self, limit: int = 20) -> list[AnalysisListItem]:
        self._require_session()
        return await self._api.list_analyses(limit)

    async def analysis_detail(self, analysis_id: AnalysisId) -> HighlightedAnalysisDTO:
        self._require_session()
        detail: AnalysisDetail = await self._api.get_analysis(analysis_id)
        return highlight(
            detail.text,
            detail.segments,
            label=detail.label_pred,
            prob_ai=detail.prob_ai,
            threshold=detail.threshold,
            analysis_id=detail.id,
            created_at=detail.created_at,
        )

    async def export(self, fmt: str) -> DownloadDTO:
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt}")
        self._require_session()
        if fmt == "csv":
            return await self._api.export_csv()
        return await self._api.export_pdf()
