"""Public API and ledger orchestration for the ``spending_analysis`` package.

The engines themselves live in :mod:`~spending_analysis.query`,
:mod:`~spending_analysis.categorize` and :mod:`~spending_analysis.summary`.
This module composes them into the ledger-level operations used by the CLI:
categorizing a batch, adding one entry by hand, editing a transaction (which
re-runs categorization on the new description), assigning a category by hand,
deleting, and searching with a per-category summary of the matches.

All functions return new lists; ledgers passed in are left untouched.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, NamedTuple

from .categorize import DEFAULT_NAME_THRESHOLD, categorize_transactions
from .categorize import categorize_transaction as _categorize_one
from .ingest import to_transactions
from .logging_setup import get_logger
from .models import UNCATEGORIZED, CategoryDictionary, CategorySummary, Transaction
from .query import filter_transactions
from .summary import summarize_by_category

_logger = get_logger("spending_analysis.api")


class SearchResult(NamedTuple):
    """Matches for a query, plus their per-category totals."""

    transactions: Sequence[Transaction]
    summary: CategorySummary


def categorize_expenses(
    transactions: Iterable[Transaction],
    dictionary: CategoryDictionary,
    *,
    name_threshold: float = DEFAULT_NAME_THRESHOLD,
) -> list[Transaction]:
    """Categorize a batch of transactions (e.g. freshly ingested rows)."""

    out = categorize_transactions(transactions, dictionary, name_threshold=name_threshold)
    _logger.info("Categorized %d transactions", len(out))
    return out


def _index_of(ledger: Sequence[Transaction], txn_id: str) -> int:
    for i, txn in enumerate(ledger):
        if txn.id == txn_id:
            return i
    raise KeyError(txn_id)


def update_transaction(
    ledger: Sequence[Transaction],
    updated: Transaction,
    dictionary: CategoryDictionary,
    *,
    name_threshold: float = DEFAULT_NAME_THRESHOLD,
) -> tuple[list[Transaction], Transaction]:
    """Replace the transaction with ``updated.id`` and re-categorize it.

    Returns ``(new_ledger, categorized)``. Raises ``KeyError`` when the id is
    not in ``ledger``.
    """

    pos = _index_of(ledger, updated.id)
    categorized = _categorize_one(updated, dictionary, name_threshold=name_threshold)
    new_ledger = list(ledger)
    new_ledger[pos] = categorized
    return new_ledger, categorized


def recategorize_uncategorized(
    ledger: Sequence[Transaction],
    dictionary: CategoryDictionary,
    *,
    name_threshold: float = DEFAULT_NAME_THRESHOLD,
) -> tuple[list[Transaction], int]:
    """Re-run the cascade for entries without a category or ``Uncategorized``.

    Used after the dictionary gains a category or keyword. Transactions that
    already carry a real category are kept as they are. Returns the new
    ledger and the number of entries that received a category.
    """

    changed = 0
    out: list[Transaction] = []
    for txn in ledger:
        if txn.category and txn.category != UNCATEGORIZED:
            out.append(txn)
            continue
        categorized = _categorize_one(txn, dictionary, name_threshold=name_threshold)
        if categorized.category != UNCATEGORIZED:
            changed += 1
        out.append(categorized)
    return out, changed


def add_transaction(
    ledger: Sequence[Transaction],
    record: Mapping[str, Any],
    dictionary: CategoryDictionary,
    *,
    name_threshold: float = DEFAULT_NAME_THRESHOLD,
    id_factory: Callable[[], str] | None = None,
) -> tuple[list[Transaction], Transaction]:
    """Coerce one ``{date, description, amount}`` record, categorize it, append it.

    Returns ``(new_ledger, added)``. A record carrying an ``id`` already in
    ``ledger`` raises ``ValueError``.
    """

    [txn] = to_transactions([record], id_factory=id_factory)
    if any(t.id == txn.id for t in ledger):
        raise ValueError(f"transaction id already in the ledger: {txn.id!r}")
    added = _categorize_one(txn, dictionary, name_threshold=name_threshold)
    _logger.info("Added transaction %s as %r", added.id, added.category)
    return [*ledger, added], added


def assign_category(
    ledger: Sequence[Transaction], txn_id: str, category: str
) -> list[Transaction]:
    """Set the category of one transaction by hand."""

    pos = _index_of(ledger, txn_id)
    new_ledger = list(ledger)
    new_ledger[pos] = ledger[pos].with_category(category)
    return new_ledger


def delete_transaction(ledger: Sequence[Transaction], txn_id: str) -> list[Transaction]:
    """Drop the transaction with ``txn_id``; raises ``KeyError`` when absent."""

    pos = _index_of(ledger, txn_id)
    return [txn for i, txn in enumerate(ledger) if i != pos]


def search(ledger: Sequence[Transaction], query: str) -> SearchResult:
    """Filter ``ledger`` by ``query`` and total the matches per category.

    Query errors propagate unchanged.
    """

    matches = filter_transactions(ledger, query)
    return SearchResult(matches, summarize_by_category(matches))


__all__ = [
    "SearchResult",
    "add_transaction",
    "assign_category",
    "categorize_expenses",
    "delete_transaction",
    "recategorize_uncategorized",
    "search",
    "update_transaction",
]
