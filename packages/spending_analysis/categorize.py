"""Keyword-dictionary categorization.

Public API:
    - :func:`resolve_category`
    - :func:`categorize_transaction`
    - :func:`categorize_transactions`

A description is resolved to exactly one category name by a cascade of
tiers; each tier runs only when the previous ones did not settle on a single
category. Matching is case-insensitive and a keyword "hits" when it occurs as
a substring of the description.

1. Keyword tally: the category with the strictly highest hit count wins.
2. Among categories tied on the top count, one whose own name occurs in the
   description wins, provided exactly one does.
3. Among the tied categories, fuzzy similarity between description and name;
   candidates at or above ``name_threshold`` survive and the best score wins.
4. When no keyword hit at all, the same fuzzy pass over every category name.
5. The first category (dictionary order) with any hit, else
   :data:`~spending_analysis.models.UNCATEGORIZED`.

Equal fuzzy scores are resolved by dictionary order. The engine never raises
and is deterministic for a given description and dictionary.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .logging_setup import get_logger
from .models import UNCATEGORIZED, CategoryDictionary, CategoryEntry, Transaction
from .similarity import compare_strings

DEFAULT_NAME_THRESHOLD: float = 0.6

_logger = get_logger("spending_analysis.categorize")


def _hit_count(entry: CategoryEntry, text: str) -> int:
    return sum(1 for kw in entry.keywords if kw and kw.lower() in text)


def _best_fuzzy(
    text: str, candidates: Sequence[CategoryEntry], threshold: float
) -> tuple[str, float] | None:
    """Return the highest-scoring candidate name at or above ``threshold``.

    ``max`` keeps the first of equal scores, which is dictionary order since
    ``candidates`` preserves it.
    """

    scored = [(e.name, compare_strings(text, e.name.lower())) for e in candidates]
    survivors = [(name, score) for name, score in scored if score >= threshold]
    if not survivors:
        return None
    return max(survivors, key=lambda pair: pair[1])


def resolve_category(
    description: str | None,
    dictionary: CategoryDictionary,
    *,
    name_threshold: float = DEFAULT_NAME_THRESHOLD,
) -> str:
    """Resolve ``description`` to one category name from ``dictionary``."""

    text = (description or "").lower()

    hits = [(entry, _hit_count(entry, text)) for entry in dictionary]
    candidates = [(entry, n) for entry, n in hits if n > 0]

    if candidates:
        top_count = max(n for _, n in candidates)
        top = [entry for entry, n in candidates if n == top_count]
        if len(top) == 1:
            _logger.debug("keyword tally picked %r (%d hits)", top[0].name, top_count)
            return top[0].name

        mentioned = [e for e in top if e.name.lower() in text]
        if len(mentioned) == 1:
            _logger.debug("tie on %d hits broken by name mention %r", top_count, mentioned[0].name)
            return mentioned[0].name

        best = _best_fuzzy(text, top, name_threshold)
        if best is not None:
            _logger.debug("tie on %d hits broken by fuzzy name %r (%.3f)", top_count, *best)
            return best[0]
    else:
        best = _best_fuzzy(text, list(dictionary), name_threshold)
        if best is not None:
            _logger.debug("no keyword hits; fuzzy name match %r (%.3f)", *best)
            return best[0]

    for entry, n in hits:
        if n > 0:
            _logger.debug("fallback to first category with a hit: %r", entry.name)
            return entry.name
    return UNCATEGORIZED


def categorize_transaction(
    txn: Transaction,
    dictionary: CategoryDictionary,
    *,
    name_threshold: float = DEFAULT_NAME_THRESHOLD,
) -> Transaction:
    """Return a copy of ``txn`` carrying its resolved category."""

    category = resolve_category(txn.description, dictionary, name_threshold=name_threshold)
    return txn.with_category(category)


def categorize_transactions(
    transactions: Iterable[Transaction],
    dictionary: CategoryDictionary,
    *,
    name_threshold: float = DEFAULT_NAME_THRESHOLD,
) -> list[Transaction]:
    """Categorize every transaction, preserving input order."""

    return [
        categorize_transaction(txn, dictionary, name_threshold=name_threshold)
        for txn in transactions
    ]


__all__ = [
    "DEFAULT_NAME_THRESHOLD",
    "categorize_transaction",
    "categorize_transactions",
    "resolve_category",
]
