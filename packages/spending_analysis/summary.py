"""Per-category totals."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .amounts import coerce_amount
from .models import UNCATEGORIZED, CategorySummary, Transaction


def _category_and_amount(item: Transaction | Mapping[str, Any]) -> tuple[str, Any]:
    if isinstance(item, Transaction):
        return item.category or UNCATEGORIZED, item.amount
    return item.get("category") or UNCATEGORIZED, item.get("amount")


def summarize_by_category(
    transactions: Iterable[Transaction | Mapping[str, Any]],
) -> CategorySummary:
    """Sum amounts per category.

    Accepts transactions or plain mappings with ``category``/``amount`` keys.
    Amounts are coerced with :func:`~spending_analysis.amounts.coerce_amount`
    so unparseable values add 0, but their category still appears.
    """

    totals: CategorySummary = {}
    for item in transactions:
        category, amount = _category_and_amount(item)
        totals[category] = totals.get(category, 0.0) + coerce_amount(amount)
    return totals


__all__ = ["summarize_by_category"]
