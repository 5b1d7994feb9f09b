"""Evaluation of a single query term against a transaction.

A term is either a field comparison ``<field><op><value>`` or a bare word.

Fields and their operators:

- ``amount``: ``< <= > >= = !=`` against a numeric value.
- ``date``: the same six comparators, at day granularity. Accepted literals
  are ``YYYY-MM-DD`` and ``M/D/YYYY``; anything else goes through
  ``dateutil``'s generic parser.
- ``description`` / ``category``: case-insensitive ``:`` (contains), ``=``,
  ``!=``, ``^=`` (prefix) and ``$=`` (suffix).

A bare word matches when it appears as a whole word in the description, so
``gas`` matches ``"Shell gas"`` but not ``"gasoline"``.
"""

from __future__ import annotations

import math
import operator
import re
from collections.abc import Callable
from datetime import date

from dateutil import parser as date_parser

from .errors import InvalidSyntaxError
from .models import Transaction

# Two-character comparators come first so ``<=`` is not read as ``<``.
_TERM_RE = re.compile(r"^([A-Za-z]+)\s*(<=|>=|!=|=|<|>|\^=|\$=|:)\s*(\S.*)$")

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_US_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

_ORDERING: dict[str, Callable[[object, object], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "=": operator.eq,
    "!=": operator.ne,
}

_TEXT: dict[str, Callable[[str, str], bool]] = {
    ":": lambda text, value: value in text,
    "=": operator.eq,
    "!=": operator.ne,
    "^=": str.startswith,
    "$=": str.endswith,
}


def match_literal_date(text: str) -> date | None:
    """Parse ``YYYY-MM-DD`` or ``M/D/YYYY``; ``None`` for any other shape.

    Raises ``ValueError`` when the shape matches but the day does not exist
    (e.g. ``2025-02-30``).
    """

    s = text.strip()
    m = _ISO_DATE_RE.match(s)
    if m:
        year, month, day = (int(g) for g in m.groups())
        return date(year, month, day)
    m = _US_DATE_RE.match(s)
    if m:
        month, day, year = (int(g) for g in m.groups())
        return date(year, month, day)
    return None


def parse_calendar_date(text: str) -> date:
    """Parse ``text`` as a local calendar day or raise :class:`InvalidSyntaxError`."""

    try:
        literal = match_literal_date(text)
        if literal is not None:
            return literal
        return date_parser.parse(text.strip()).date()
    except (ValueError, OverflowError) as exc:
        raise InvalidSyntaxError(f"unrecognized date {text!r}") from exc


def _parse_number(value: str) -> float:
    # ``float`` accepts digit-group underscores (``1_000``); queries do not.
    if "_" in value:
        raise InvalidSyntaxError(f"amount value is not a number: {value!r}")
    try:
        num = float(value)
    except ValueError as exc:
        raise InvalidSyntaxError(f"amount value is not a number: {value!r}") from exc
    if not math.isfinite(num):
        raise InvalidSyntaxError(f"amount value is not a number: {value!r}")
    return num


def _compare_amount(op: str, value: str, txn: Transaction) -> bool:
    cmp = _ORDERING.get(op)
    if cmp is None:
        raise InvalidSyntaxError(f"operator {op!r} is not valid for amount")
    return cmp(txn.amount, _parse_number(value))


def _compare_date(op: str, value: str, txn: Transaction) -> bool:
    cmp = _ORDERING.get(op)
    if cmp is None:
        raise InvalidSyntaxError(f"operator {op!r} is not valid for date")
    return cmp(parse_calendar_date(txn.date), parse_calendar_date(value))


def _compare_text(field: str, op: str, value: str, txn: Transaction) -> bool:
    cmp = _TEXT.get(op)
    if cmp is None:
        raise InvalidSyntaxError(f"operator {op!r} is not valid for {field}")
    text = (txn.description if field == "description" else txn.category) or ""
    return cmp(text.lower(), value.lower())


def matches_word(term: str, description: str) -> bool:
    """Whole-word, case-insensitive search for ``term`` in ``description``."""

    pattern = rf"\b{re.escape(term.lower())}\b"
    return re.search(pattern, description.lower()) is not None


def evaluate_term(term: str, txn: Transaction) -> bool:
    """Evaluate one query term for ``txn``.

    Raises :class:`InvalidSyntaxError` for unknown fields, operators that do
    not apply to the field, non-numeric amounts and unparseable dates.
    """

    m = _TERM_RE.match(term)
    if m is None:
        return matches_word(term, txn.description or "")

    field, op, raw = m.groups()
    field = field.lower()
    value = raw.strip()
    if field == "amount":
        return _compare_amount(op, value, txn)
    if field == "date":
        return _compare_date(op, value, txn)
    if field in ("description", "category"):
        return _compare_text(field, op, value, txn)
    raise InvalidSyntaxError(f"unknown field {field!r}")


__all__ = ["evaluate_term", "match_literal_date", "matches_word", "parse_calendar_date"]
