from datetime import datetime

from pydantic import BaseModel, Field

from dashboard.client.schemas import AnalysisId, StatsResponse, UserProfile
from dashboard.dtos.analysis_dto import HighlightedAnalysisDTO


class AnalyzeRequest(BaseModel):
    text: str = Field(min_length=1)


class SegmentView(BaseModel):
    start: int
    end: int
    prob_ai: float


class TextRunView(BaseModel):
    text: str
    start: int
    end: int
    flagged: bool
    prob_ai: float | None = None


class HighlightedAnalysisResponse(BaseModel):
    id: AnalysisId | None = None
    created_at: datetime | None = None
    label: int
    label_name: str
    prob_ai: float
    threshold: float | None = None
    text: str
    segments: list[SegmentView]
    runs: list[TextRunView]

    @classmethod
    def from_dto(cls, dto: HighlightedAnalysisDTO) -> "HighlightedAnalysisResponse":
        return cls(
            id=dto.id,
            created_at=dto.created_at,
            label=dto.label,
            label_name=dto.label_name,
            prob_ai=dto.prob_ai,
            threshold=dto.threshold,
            text=dto.text,
            segments=[SegmentView(start=s.start, end=s.end, prob_ai=s.prob_ai) for s in dto.segments],
            runs=[
                TextRunView(text=r.text, start=r.start, end=r.end, flagged=r.flagged, prob_ai=r.prob_ai)
                for r in dto.runs
            ],
        )


class OverviewResponse(BaseModel):
    profile: UserProfile
    stats: StatsResponse
