"""
Data Transfer Objects (DTOs) package.

DTOs are simple dataclasses used to transfer data between layers.
"""

from dashboard.dtos.analysis_dto import (
    HighlightedAnalysisDTO,
    SegmentDTO,
    TextRunDTO,
)
from dashboard.dtos.download_dto import DownloadDTO

__all__ = [
    "HighlightedAnalysisDTO",
    "SegmentDTO",
    "TextRunDTO",
    "DownloadDTO",
]
