"""Exceptions raised by the query compiler and evaluator.

Both concrete errors derive from ``ValueError`` so callers that already guard
user input with ``except ValueError`` keep working. The query engine never
recovers from them; the caller decides what to show (the CLI prints
``Filter error: <message>``).
"""

from __future__ import annotations


class QuerySyntaxError(ValueError):
    """Base class for malformed search queries."""

    base_message = "Invalid query"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        msg = f"{self.base_message}: {detail}" if detail else self.base_message
        super().__init__(msg)


class MismatchedParenthesesError(QuerySyntaxError):
    """A ``(`` without its ``)`` or the other way round."""

    base_message = "Mismatched parentheses"


class InvalidSyntaxError(QuerySyntaxError):
    """Bad field comparison, bad value, or a structurally broken program."""

    base_message = "Invalid syntax"


__all__ = ["InvalidSyntaxError", "MismatchedParenthesesError", "QuerySyntaxError"]
