"""Pydantic models describing the public API surface."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .pages import PageCategory, PageClassification

__all__ = [
    "HouseholdInput",
    "CalculationRequest",
    "PageClassificationInput",
    "PageSelectionRequest",
    "SummaryRequest",
    "format_validation_error",
]


class HouseholdInput(BaseModel):
    """Household facts that affect the surcharge threshold and repayments."""

    model_config = ConfigDict(extra="forbid")

    has_qualifying_cover: bool = False
    is_family: bool = False
    dependants: int = Field(default=0, ge=0, le=20)
    outstanding_loan_balance: float | None = Field(default=None, ge=0)

    @field_validator("has_qualifying_cover", "is_family", mode="before")
    @classmethod
    def _coerce_flags(cls, value: Any) -> Any:
        if value is None:
            return False
        return value


class CalculationRequest(BaseModel):
    """Complete payload accepted by the calculation endpoint."""

    model_config = ConfigDict(extra="forbid")

    year: int = Field(..., ge=0)
    taxable_income: float = Field(..., ge=0)
    household: HouseholdInput = Field(default_factory=HouseholdInput)
    include_offsets: bool = True
    include_breakdown: bool = True


class PageClassificationInput(BaseModel):
    """A classifier verdict for one page, as ``{"page": 3, "type": "schedule_1"}``."""

    model_config = ConfigDict(extra="forbid")

    page: int = Field(..., ge=1)
    type: PageCategory

    def to_classification(self) -> PageClassification:
        return PageClassification(page_number=self.page, category=self.type)


class PageSelectionRequest(BaseModel):
    """Classified pages plus an optional budget override and source filename."""

    model_config = ConfigDict(extra="forbid")

    classifications: list[PageClassificationInput] = Field(default_factory=list)
    budget: int | None = Field(default=None, gt=0)
    filename: str | None = None


class SummaryRequest(BaseModel):
    """Stored returns keyed by fiscal year."""

    model_config = ConfigDict(extra="forbid")

    returns: dict[str, Any] = Field(default_factory=dict)

    @field_validator("returns", mode="before")
    @classmethod
    def _require_mapping(cls, value: Any) -> Mapping[str, Any]:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return {str(key): item for key, item in value.items()}
        raise ValueError("'returns' must be an object mapping years to returns")


def format_validation_error(error: ValidationError, *, subject: str = "payload") -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid {subject}: {details}"
