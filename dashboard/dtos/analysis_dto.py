from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union


@dataclass
class SegmentDTO:
    start: int
    end: int
    prob_ai: float


@dataclass
class TextRunDTO:
    """One run of the source text, either plain or flagged as AI-likely."""
    text: str
    start: int
    end: int
    flagged: bool
    prob_ai: Optional[float] = None


@dataclass
class HighlightedAnalysisDTO:
    """An analysis together with its render-ready segments."""
    label: int
    label_name: str
    prob_ai: float
    text: str
    segments: list[SegmentDTO] = field(default_factory=list)
    runs: list[TextRunDTO] = field(default_factory=list)
    threshold: Optional[float] = None
    id: Optional[Union[int, str]] = None
    created_at: Optional[datetime] = None
