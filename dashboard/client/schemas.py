"""Response models for the remote detector service."""
from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from dashboard.dtos.analysis_dto import SegmentDTO

AnalysisId = Union[int, str]


class ProblemDetails(BaseModel):
    type: Optional[str] = None
    title: Optional[str] = None
    status: Optional[int] = None
    detail: Optional[str] = None
    instance: Optional[str] = None


class Segment(BaseModel):
    start: int
    end: int
    prob_ai: float = Field(ge=0.0, le=1.0)

    def to_dto(self) -> SegmentDTO:
        return SegmentDTO(start=self.start, end=self.end, prob_ai=self.prob_ai)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserProfile(BaseModel):
    id: AnalysisId
    email: str
    created_at: datetime


class AnalyzeResponse(BaseModel):
    label: Literal[0, 1]
    prob_ai: float
    threshold: float
    segments: list[Segment] = Field(default_factory=list)
    text: Optional[str] = None


class AnalysisListItem(BaseModel):
    id: AnalysisId
    created_at: datetime
    label_pred: Literal[0, 1]
    prob_ai: float
    preview: str
    segments: Optional[list[Segment]] = None


class AnalysisDetail(BaseModel):
    id: AnalysisId
    created_at: datetime
    label_pred: Literal[0, 1]
    prob_ai: float
    threshold: Optional[float] = None
    text: str
    segments: list[Segment] = Field(default_factory=list)


class StatsResponse(BaseModel):
    total_count: int
    ai_count: int
    human_count: int
    avg_prob_ai: float


class HealthResponse(BaseModel):
    status: str
