"""Choose which classified pages are forwarded to extraction.

Pages are admitted tier by tier (essential, important, optional) until the
page budget runs out. Once it does, every remaining page is skipped, essential
ones included. Excluded pages never count against the budget. Both output
lists come back in document order because the extractor rebuilds a reduced
document from them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from taxreceipt.backend.app.models import (
    InputContractError,
    PageCategory,
    PageClassification,
    PageSelection,
    PageTier,
)

_LOGGER = logging.getLogger(__name__)

# Keeps the reduced document within the extractor's context window.
DEFAULT_PAGE_BUDGET = 40

_ADMISSION_ORDER = (PageTier.ESSENTIAL, PageTier.IMPORTANT, PageTier.OPTIONAL)

DEFAULT_TIER_MAP: Mapping[PageCategory, PageTier] = MappingProxyType(
    {
        PageCategory.MAIN_RETURN: PageTier.ESSENTIAL,
        PageCategory.STATE_MAIN: PageTier.ESSENTIAL,
        PageCategory.SCHEDULE_1: PageTier.IMPORTANT,
        PageCategory.SCHEDULE_A: PageTier.IMPORTANT,
        PageCategory.SCHEDULE_B: PageTier.IMPORTANT,
        PageCategory.SCHEDULE_C: PageTier.IMPORTANT,
        PageCategory.SCHEDULE_D: PageTier.IMPORTANT,
        PageCategory.SCHEDULE_E: PageTier.IMPORTANT,
        PageCategory.K1_SUMMARY: PageTier.IMPORTANT,
        PageCategory.SCHEDULE_2: PageTier.OPTIONAL,
        PageCategory.SCHEDULE_3: PageTier.OPTIONAL,
        PageCategory.STATE_SCHEDULE: PageTier.OPTIONAL,
        PageCategory.K1_DETAIL: PageTier.EXCLUDED,
        PageCategory.WORKSHEET: PageTier.EXCLUDED,
        PageCategory.SUPPORTING_DOC: PageTier.EXCLUDED,
        PageCategory.OTHER: PageTier.EXCLUDED,
    }
)


def _category_label(category: PageCategory | str) -> str:
    return category.value if isinstance(category, PageCategory) else str(category)


def select_pages(
    classifications: Iterable[PageClassification],
    budget: int = DEFAULT_PAGE_BUDGET,
    tier_map: Mapping[PageCategory, PageTier] = DEFAULT_TIER_MAP,
) -> PageSelection:
    """Partition ``classifications`` into selected and skipped page numbers.

    Categories missing from ``tier_map`` are treated as excluded. Duplicate
    page numbers are passed through untouched.
    """

    if budget <= 0:
        raise InputContractError("Page budget must be a positive integer")

    buckets: dict[PageTier, list[int]] = {tier: [] for tier in PageTier}
    reasons: dict[int, str] = {}

    for classification in classifications:
        if classification.page_number < 1:
            raise InputContractError(
                f"Page numbers start at 1; got {classification.page_number}"
            )
        tier = tier_map.get(classification.category, PageTier.EXCLUDED)
        buckets[tier].append(classification.page_number)
        reasons[classification.page_number] = (
            f"{tier.value}: {_category_label(classification.category)}"
        )

    selected: list[int] = []
    skipped: list[int] = []
    remaining = budget

    for tier in _ADMISSION_ORDER:
        for page in buckets[tier]:
            if remaining > 0:
                selected.append(page)
                remaining -= 1
            else:
                skipped.append(page)

    skipped.extend(buckets[PageTier.EXCLUDED])

    selected.sort()
    skipped.sort()

    _LOGGER.debug(
        "Selected %d page(s), skipped %d (budget %d)", len(selected), len(skipped), budget
    )

    return PageSelection(
        selected_pages=tuple(selected),
        skipped_pages=tuple(skipped),
        reasons=reasons,
    )


__all__ = ["DEFAULT_PAGE_BUDGET", "DEFAULT_TIER_MAP", "select_pages"]
