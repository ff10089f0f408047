"""Normalizes raw AI-likely spans into a render-ready partition of the source text."""
from collections.abc import Iterable
from operator import attrgetter

from dashboard.dtos.analysis_dto import SegmentDTO, TextRunDTO


def _clamp(value: int, upper: int) -> int:
    return max(0, min(upper, value))


def merge_segments(segments: Iterable[SegmentDTO], text_length: int) -> list[SegmentDTO]:
    """Clamp, drop empty, sort and merge overlapping or touching segments.

    The result is sorted by start, non-overlapping, every segment satisfies
    0 <= start < end <= text_length, and each merged segment keeps the
    maximum prob_ai of the segments it absorbed.
    """
    text_length = max(0, text_length)
    normalized = [
        SegmentDTO(
            start=_clamp(seg.start, text_length),
            end=_clamp(seg.end, text_length),
            prob_ai=seg.prob_ai,
        )
        for seg in segments
    ]
    # sorted() is stable, equal starts keep input order
    normalized = sorted(
        (seg for seg in normalized if seg.end > seg.start),
        key=attrgetter("start"),
    )

    merged: list[SegmentDTO] = []
    for seg in normalized:
        last = merged[-1] if merged else None
        if last is not None and seg.start <= last.end:
            last.end = max(last.end, seg.end)
            last.prob_ai = max(last.prob_ai, seg.prob_ai)
        else:
            merged.append(seg)

    return merged


def partition_text(text: str, segments: Iterable[SegmentDTO]) -> list[TextRunDTO]:
    """Split text into alternating plain and flagged runs.

    Runs cover the whole string exactly once, so joining their text
    reproduces the input.
    """
    if not text:
        return []

    runs: list[TextRunDTO] = []
    cursor = 0
    for seg in merge_segments(segments, len(text)):
        if cursor < seg.start:
            runs.append(TextRunDTO(
                text=text[cursor:seg.start],
                start=cursor,
                end=seg.start,
                flagged=False,
            ))
        runs.append(TextRunDTO(
            text=text[seg.start:seg.end],
            start=seg.start,
            end=seg.end,
            flagged=True,
            prob_ai=seg.prob_ai,
        ))
        cursor = seg.end

    if cursor < len(text):
        runs.append(TextRunDTO(
            text=text[cursor:],
            start=cursor,
            end=len(text),
            flagged=False,
        ))

    return runs
