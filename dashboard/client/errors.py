"""
Normalized errors raised by the detector API client.

Every non-2xx response is classified exactly once into an ApiError whose
``kind`` downstream handlers match on.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from dashboard.client.schemas import ProblemDetails


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PROBLEM = "problem"
    HTTP = "http"


class ApiError(Exception):
    """A failed request to the detector service."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        detail: Optional[str] = None,
        *,
        kind: ErrorKind = ErrorKind.HTTP,
        problem: Optional[ProblemDetails] = None,
        redirect_to: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.detail = detail
        self.kind = kind
        self.problem = problem
        # Set only on the error that invalidated the session first
        self.redirect_to = redirect_to

    @classmethod
    def unauthenticated(cls, redirect_to: Optional[str] = None) -> "ApiError":
        return cls(
            "Unauthorized",
            401,
            kind=ErrorKind.UNAUTHENTICATED,
            redirect_to=redirect_to,
        )

    @classmethod
    def from_problem(
        cls, status: int, reason: str, problem: Optional[ProblemDetails]
    ) -> "ApiError":
        if problem is not None:
            detail = problem.detail or reason
            return cls(detail, status, detail, kind=ErrorKind.PROBLEM, problem=problem)
        return cls(reason, status, reason, kind=ErrorKind.HTTP)

    @property
    def display_message(self) -> str:
        return self.detail or self.message

    def __repr__(self) -> str:
        return f"ApiError(kind={self.kind.value}, status={self.status}, message={self.message!r})"
