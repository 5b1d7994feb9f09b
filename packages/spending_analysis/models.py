"""Data models and type aliases for ``spending_analysis``.

The core works on two entities:

- :class:`Transaction`: one ledger row. ``amount`` is always a finite float
  by the time a transaction exists; raw values are coerced at the ingestion
  and persistence boundaries.
- :class:`CategoryDictionary`: the user's keyword dictionary as an explicit,
  ordered sequence of ``(name, keywords)`` entries. Order is part of the
  contract because the categorization cascade breaks ties by it.

Pydantic models at the bottom of this module describe the JSON interchange
shapes and are only used when reading or writing files.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, field_validator

from .amounts import coerce_amount

UNCATEGORIZED = "Uncategorized"

# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single ledger entry.

    Attributes
    ----------
    id:
        Opaque identifier, unique within a ledger and never changed.
    date:
        Calendar day, stored as ``YYYY-MM-DD`` when ingested from a known
        format.
    description:
        Free text from the bank export or typed by the user.
    amount:
        Finite numeric amount.
    category:
        Category name chosen by the categorization engine (or the user);
        ``None`` before categorization.
    """

    id: str
    date: str
    description: str
    amount: float
    category: str | None = None

    def with_category(self, category: str) -> Transaction:
        return replace(self, category=category)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "description": self.description,
            "amount": self.amount,
            "category": self.category,
        }


# Totals per category name, in order of first appearance.
type CategorySummary = dict[str, float]


# ---------------------------------------------------------------------------
# Keyword dictionary
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CategoryEntry:
    """One dictionary entry: a category name and its keywords."""

    name: str
    keywords: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CategoryDictionary:
    """Ordered, immutable keyword dictionary.

    ``entries`` keeps categories in insertion order. Names must be unique;
    keyword lists may be empty.
    """

    entries: tuple[CategoryEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for entry in self.entries:
            if entry.name in seen:
                raise ValueError(f"duplicate category name: {entry.name!r}")
            seen.add(entry.name)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> CategoryDictionary:
        """Build a dictionary from a name → keywords mapping, keeping its order."""

        return cls(
            tuple(
                CategoryEntry(str(name), tuple(str(k) for k in kws))
                for name, kws in mapping.items()
            )
        )

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, Sequence[str]]]) -> CategoryDictionary:
        return cls(tuple(CategoryEntry(name, tuple(kws)) for name, kws in pairs))

    def to_mapping(self) -> dict[str, list[str]]:
        return {e.name: list(e.keywords) for e in self.entries}

    def names(self) -> list[str]:
        return [e.name for e in self.entries]

    def get(self, name: str) -> CategoryEntry | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def __iter__(self) -> Iterator[CategoryEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, name: object) -> bool:
        return any(e.name == name for e in self.entries)


# ---------------------------------------------------------------------------
# JSON interchange DTOs
# ---------------------------------------------------------------------------


class TransactionModel(BaseModel):
    """Validated JSON shape of a stored transaction.

    ``amount`` accepts numbers and numeric strings; anything unparseable is
    stored as ``0.0``, mirroring how aggregation treats such values.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str
    date: str = ""
    description: str = ""
    amount: float = 0.0
    category: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> str:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("id must be a non-empty string")
        return str(v)

    @field_validator("description", "date", mode="before")
    @classmethod
    def _text_or_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, v: Any) -> float:
        return coerce_amount(v)

    @field_validator("category")
    @classmethod
    def _blank_category_is_none(cls, v: str | None) -> str | None:
        return v or None

    def to_transaction(self) -> Transaction:
        return Transaction(
            id=self.id,
            date=self.date,
            description=self.description,
            amount=self.amount,
            category=self.category,
        )


# Insertion order of the JSON object is preserved by the validated dict.
DictionaryPayload: TypeAdapter[dict[str, list[str]]] = TypeAdapter(dict[str, list[str]])
TransactionListPayload: TypeAdapter[list[TransactionModel]] = TypeAdapter(list[TransactionModel])


__all__ = [
    "UNCATEGORIZED",
    "CategoryDictionary",
    "CategoryEntry",
    "CategorySummary",
    "DictionaryPayload",
    "Transaction",
    "TransactionListPayload",
    "TransactionModel",
]
