"""Public interface for the ``spending_analysis`` package.

This module re-exports the engines (query filtering, categorization,
aggregation), the data models, and the ledger-level API as the stable import
surface. There is no runtime logic here.
"""

from .api import (
    SearchResult,
    add_transaction,
    assign_category,
    categorize_expenses,
    delete_transaction,
    recategorize_uncategorized,
    search,
    update_transaction,
)
from .categorize import (
    DEFAULT_NAME_THRESHOLD,
    categorize_transaction,
    categorize_transactions,
    resolve_category,
)
from .dictionary import DEFAULT_DICTIONARY, add_category, add_keyword
from .errors import InvalidSyntaxError, MismatchedParenthesesError, QuerySyntaxError
from .ingest import load_csv, parse_csv_text, to_transactions
from .models import (
    UNCATEGORIZED,
    CategoryDictionary,
    CategoryEntry,
    CategorySummary,
    Transaction,
)
from .persistence import LedgerStore
from .query import CompiledQuery, compile_query, filter_transactions
from .similarity import compare_strings
from .summary import summarize_by_category

__all__ = [
    # API
    "SearchResult",
    "add_transaction",
    "assign_category",
    "categorize_expenses",
    "delete_transaction",
    "recategorize_uncategorized",
    "search",
    "update_transaction",
    # Engines
    "CompiledQuery",
    "compile_query",
    "filter_transactions",
    "DEFAULT_NAME_THRESHOLD",
    "categorize_transaction",
    "categorize_transactions",
    "resolve_category",
    "compare_strings",
    "summarize_by_category",
    # Dictionary / ingestion / storage
    "DEFAULT_DICTIONARY",
    "add_category",
    "add_keyword",
    "load_csv",
    "parse_csv_text",
    "to_transactions",
    "LedgerStore",
    # Models / errors
    "UNCATEGORIZED",
    "CategoryDictionary",
    "CategoryEntry",
    "CategorySummary",
    "Transaction",
    "QuerySyntaxError",
    "InvalidSyntaxError",
    "MismatchedParenthesesError",
]
