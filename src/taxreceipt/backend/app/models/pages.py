"""Page classification inputs and page selection results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class PageCategory(str, Enum):
    """Section tags produced by the external page classifier."""

    MAIN_RETURN = "1040_main"
    SCHEDULE_1 = "schedule_1"
    SCHEDULE_2 = "schedule_2"
    SCHEDULE_3 = "schedule_3"
    SCHEDULE_A = "schedule_a"
    SCHEDULE_B = "schedule_b"
    SCHEDULE_C = "schedule_c"
    SCHEDULE_D = "schedule_d"
    SCHEDULE_E = "schedule_e"
    K1_SUMMARY = "k1_summary"
    K1_DETAIL = "k1_detail"
    STATE_MAIN = "state_main"
    STATE_SCHEDULE = "state_schedule"
    WORKSHEET = "worksheet"
    SUPPORTING_DOC = "supporting_doc"
    OTHER = "other"


class PageTier(str, Enum):
    """Admission priority of a page, highest first."""

    ESSENTIAL = "essential"
    IMPORTANT = "important"
    OPTIONAL = "optional"
    EXCLUDED = "excluded"


@dataclass(frozen=True, slots=True)
class PageClassification:
    page_number: int
    category: PageCategory


@dataclass(frozen=True, slots=True)
class PageSelection:
    """Partition of the input pages into pages to extract and pages to drop."""

    selected_pages: tuple[int, ...] = ()
    skipped_pages: tuple[int, ...] = ()
    reasons: Mapping[int, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "reasons", MappingProxyType(dict(self.reasons)))

    def as_dict(self) -> dict[str, Any]:
        return {
            "selected_pages": list(self.selected_pages),
            "skipped_pages": list(self.skipped_pages),
            "reasons": {str(page): reason for page, reason in sorted(self.reasons.items())},
        }


__all__ = ["PageCategory", "PageClassification", "PageSelection", "PageTier"]
