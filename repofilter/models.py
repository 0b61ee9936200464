"""
Structured results returned by validation and summaries.

These are Pydantic models so they can be dumped straight to JSON (camelCase
aliases) for API responses and CLI output.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FilterModel(BaseModel):
    """Base model: immutable, accepts both field names and aliases."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class SegmentError(FilterModel):
    """One problem found in a filter string segment."""

    segment_index: int = Field(..., alias="segmentIndex")
    segment_text: str = Field(..., alias="segmentText")
    message: str


class ValidationResult(FilterModel):
    valid: bool
    errors: list[SegmentError] = Field(default_factory=list)

    @property
    def messages(self) -> list[str]:
        return [error.message for error in self.errors]


SummaryKind = Literal["list", "range", "null", "single"]


class FilterSummary(FilterModel):
    """Display-ready description of one condition."""

    field: str
    label: str
    operator: str
    display: str
    kind: SummaryKind
