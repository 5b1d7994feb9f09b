"""CSV ingestion: raw rows to uncategorized :class:`Transaction` objects.

Parsing follows RFC 4180 via the stdlib :mod:`csv` module. Header names and
cell values are trimmed, and cells that look numeric are converted to
numbers, so a row ``2025-01-01,Coffee,4.50`` becomes
``{"date": "2025-01-01", "description": "Coffee", "amount": 4.5}``.

:func:`to_transactions` is the coercion boundary: amounts become finite
floats, known date shapes are normalized to ``YYYY-MM-DD`` and every record
gets an ``id``. Categorization happens afterwards, in the caller.
"""

from __future__ import annotations

import csv
import math
import re
import uuid
from collections.abc import Callable, Iterable, Mapping
from io import StringIO
from os import PathLike
from pathlib import Path
from typing import Any

from .amounts import coerce_amount
from .logging_setup import get_logger
from .models import Transaction
from .predicates import match_literal_date

_logger = get_logger("spending_analysis.ingest")

_INT_RE = re.compile(r"^[+-]?\d+$")

REQUIRED_COLUMNS: tuple[str, ...] = ("date", "description", "amount")


# ---------------------------------------------------------------------------
# Helpers (cell conversion, date normalization)
# ---------------------------------------------------------------------------


def _to_number(value: str) -> int | float | str:
    if not value or "_" in value:
        return value
    if _INT_RE.match(value):
        return int(value)
    try:
        f = float(value)
    except ValueError:
        return value
    return f if math.isfinite(f) else value


def normalize_date(value: Any) -> str:
    """Return ISO ``YYYY-MM-DD`` for ISO/US literals; other text is kept as-is."""

    s = "" if value is None else str(value).strip()
    try:
        parsed = match_literal_date(s)
    except ValueError:
        return s
    return parsed.isoformat() if parsed is not None else s


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_csv_text(csv_text: str) -> list[dict[str, Any]]:
    """Parse CSV text with a header row into a list of dicts.

    Blank lines are skipped; missing trailing cells become ``""`` and extra
    cells without a header are dropped.
    """

    with StringIO(csv_text.strip()) as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header is None:
            return []
        keys = [h.strip() for h in header]
        rows: list[dict[str, Any]] = []
        for cells in reader:
            if all(not c.strip() for c in cells):
                continue
            values = [c.strip() for c in cells] + [""] * (len(keys) - len(cells))
            rows.append({k: _to_number(v) for k, v in zip(keys, values, strict=False)})
        return rows


def to_transactions(
    records: Iterable[Mapping[str, Any]],
    *,
    id_factory: Callable[[], str] | None = None,
) -> list[Transaction]:
    """Coerce raw ``{date, description, amount}`` records into transactions.

    A non-empty ``id`` on the record is kept; otherwise ``id_factory`` (by
    default a random UUID hex) supplies one. ``category`` is left unset.
    """

    make_id = id_factory or _new_id
    out: list[Transaction] = []
    for record in records:
        raw_id = record.get("id")
        tx_id = str(raw_id).strip() if raw_id not in (None, "") else ""
        description = record.get("description")
        out.append(
            Transaction(
                id=tx_id or make_id(),
                date=normalize_date(record.get("date")),
                description="" if description is None else str(description).strip(),
                amount=coerce_amount(record.get("amount")),
            )
        )
    return out


def load_csv(
    csv_path: str | PathLike[str],
    *,
    id_factory: Callable[[], str] | None = None,
) -> list[Transaction]:
    """Read ``csv_path`` and return uncategorized transactions.

    Raises ``csv.Error`` when the header lacks any of ``date``,
    ``description`` or ``amount``.
    """

    p = Path(csv_path)
    rows = parse_csv_text(p.read_text(encoding="utf-8"))
    if rows:
        missing = [c for c in REQUIRED_COLUMNS if c not in rows[0]]
        if missing:
            raise csv.Error("CSV header is missing columns: " + ", ".join(missing))
    txns = to_transactions(rows, id_factory=id_factory)
    _logger.info("Loaded %d transactions from %s", len(txns), p)
    return txns


__all__ = [
    "REQUIRED_COLUMNS",
    "coerce_amount",
    "load_csv",
    "normalize_date",
    "parse_csv_text",
    "to_transactions",
]
