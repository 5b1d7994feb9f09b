"""Keyword dictionary editing helpers.

Exports
-------
- ``DEFAULT_DICTIONARY``: the starter dictionary used when none is saved.
- ``add_category(...)``: append a new category, optionally with a first
  keyword. Name conflicts are detected case-insensitively.
- ``add_keyword(...)``: append a keyword to an existing category.
- ``normalize_name(...)`` and ``validate_name(...)``: name checks shared by
  the CLI and the editing operations.

Every operation returns a new :class:`~spending_analysis.models.CategoryDictionary`;
the one passed in is never modified.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .logging_setup import get_logger
from .models import UNCATEGORIZED, CategoryDictionary, CategoryEntry

_logger = get_logger("spending_analysis.dictionary")

DEFAULT_DICTIONARY = CategoryDictionary.from_pairs(
    [
        ("Gas", ("shell", "exxon", "chevron", "bp")),
        ("Coffee", ("starbucks", "dunkin", "peets")),
        ("Groceries", ("whole foods", "trader joe", "aldi", "kroger")),
    ]
)

# ---------------------------
# Name normalization/validation
# ---------------------------

_ALLOWED_RE = re.compile(r"^[A-Za-z0-9 &\-/']+$")


def normalize_name(name: str) -> str:
    """Trim and collapse internal whitespace; case is left alone."""

    return " ".join(name.strip().split())


@dataclass(frozen=True, slots=True)
class NameValidation:
    ok: bool
    reason: str | None = None


def validate_name(name: str, *, min_len: int = 1, max_len: int = 64) -> NameValidation:
    """Check a category name.

    Rules
    -----
    - Length 1..64 after normalization.
    - Letters, digits, spaces and ``& - / '`` only.
    - ``Uncategorized`` is reserved for the engine's fallback.
    """

    n = normalize_name(name)
    if len(n) < min_len:
        return NameValidation(False, "Name cannot be empty")
    if len(n) > max_len:
        return NameValidation(False, f"Name must be at most {max_len} characters")
    if not _ALLOWED_RE.match(n):
        return NameValidation(False, "Only letters, numbers, spaces, and & - / ' are allowed")
    if n.lower() == UNCATEGORIZED.lower():
        return NameValidation(False, f"{UNCATEGORIZED!r} is reserved")
    return NameValidation(True, None)


def find_category(dictionary: CategoryDictionary, name: str) -> CategoryEntry | None:
    """Case-insensitive lookup by normalized name."""

    key = normalize_name(name).lower()
    for entry in dictionary:
        if entry.name.lower() == key:
            return entry
    return None


# ---------------------------
# Editing operations
# ---------------------------


def add_category(
    dictionary: CategoryDictionary, name: str, keyword: str | None = None
) -> CategoryDictionary:
    """Append category ``name`` (with an optional first keyword).

    Raises ``ValueError`` for an invalid name or one that already exists.
    """

    check = validate_name(name)
    if not check.ok:
        raise ValueError(f"Invalid category name {name!r}: {check.reason}")
    n = normalize_name(name)
    existing = find_category(dictionary, n)
    if existing is not None:
        raise ValueError(f"Category already exists: {existing.name!r}")

    kw = (keyword or "").strip()
    entry = CategoryEntry(n, (kw,) if kw else ())
    _logger.info("Added category %r (keywords=%s)", n, list(entry.keywords))
    return CategoryDictionary((*dictionary.entries, entry))


def add_keyword(dictionary: CategoryDictionary, category: str, keyword: str) -> CategoryDictionary:
    """Append ``keyword`` to ``category``.

    Raises ``KeyError`` for an unknown category and ``ValueError`` for a
    blank keyword. A keyword already present (case-insensitively) leaves the
    dictionary unchanged.
    """

    kw = keyword.strip()
    if not kw:
        raise ValueError("keyword cannot be empty")
    target = find_category(dictionary, category)
    if target is None:
        raise KeyError(category)
    if any(k.lower() == kw.lower() for k in target.keywords):
        return dictionary

    updated = CategoryEntry(target.name, (*target.keywords, kw))
    _logger.info("Added keyword %r to %r", kw, target.name)
    return CategoryDictionary(
        tuple(updated if e.name == target.name else e for e in dictionary.entries)
    )


__all__ = [
    "DEFAULT_DICTIONARY",
    "NameValidation",
    "add_category",
    "add_keyword",
    "find_category",
    "normalize_name",
    "validate_name",
]
