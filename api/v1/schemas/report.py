from __future__ import annotations
from typing import Any

from pydantic import BaseModel

from core.reports import ReportResult, plain


class SubjectErrorOut(BaseModel):
    subject: str
    error: str
    message: str


class ReportOut(BaseModel):
    """
    Rows are plain records; numbers stay fixed-point (serialised as strings)
    and undefined metrics come back as null.
    """
    name: str
    rows: list[dict[str, Any]]
    errors: list[SubjectErrorOut] = []
    summary: dict[str, Any] = {}

    @classmethod
    def from_result(cls, result: ReportResult) -> "ReportOut":
        return cls(
            name=result.name,
            rows=plain(result.rows),
            errors=[SubjectErrorOut(**vars(e)) for e in result.errors],
            summary=plain(result.summary),
        )
