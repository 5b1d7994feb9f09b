"""Amount parsing shared by ingestion, persistence and aggregation.

Bank exports and hand-typed entries carry amounts as numbers or as strings
such as ``"4.50"``, ``"-$1,234.56"`` or ``"(12.00)"``. Everything that enters
the core goes through :func:`coerce_amount`, so the engines only ever see a
finite ``float``.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any


def parse_amount(raw: str) -> float:
    """Parse a textual amount, raising ``ValueError`` when it is not numeric.

    Accepts a leading ``+``/``-``, a ``$`` symbol, surrounding parentheses
    (negative), and ``,`` thousands separators, in any order.
    """

    s = raw.strip()
    if not s:
        raise ValueError("amount is empty")
    negative = False
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if s.startswith("$"):
            s = s[1:].lstrip()
            changed = True
        if len(s) >= 2 and s.startswith("(") and s.endswith(")"):
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = s.replace(",", "")
    if "_" in s:
        raise ValueError(f"invalid amount: {raw!r}")
    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    if not d.is_finite():
        raise ValueError(f"invalid amount: {raw!r}")
    value = float(d)
    return -abs(value) if negative else value


def coerce_amount(value: Any) -> float:
    """Return ``value`` as a finite float; unparseable or missing values are 0."""

    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        f = float(value)
        return f if math.isfinite(f) else 0.0
    if isinstance(value, str):
        try:
            return parse_amount(value)
        except ValueError:
            return 0.0
    return 0.0


__all__ = ["coerce_amount", "parse_amount"]
