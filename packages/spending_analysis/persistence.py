"""JSON file storage for the ledger and the keyword dictionary.

Layout (relative to the data root, default: ``./.ledger``):

- ``transactions.json``: array of ``{id, date, description, amount, category}``
- ``dictionary.json``: object mapping category name → array of keywords;
  key order is the dictionary order.

Override the root with the ``SPENDING_ANALYSIS_DATA_DIR`` environment
variable or by passing it explicitly. Writes target ``.tmp`` first and then
``os.replace`` into place.
"""

from __future__ import annotations

import contextlib
import json
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .dictionary import DEFAULT_DICTIONARY
from .logging_setup import get_logger
from .models import (
    CategoryDictionary,
    DictionaryPayload,
    Transaction,
    TransactionListPayload,
)

DATA_DIR_ENV_VAR = "SPENDING_ANALYSIS_DATA_DIR"
TRANSACTIONS_FILE = "transactions.json"
DICTIONARY_FILE = "dictionary.json"

_logger = get_logger("spending_analysis.persistence")


def default_data_root() -> Path:
    """Return the data root: ``$SPENDING_ANALYSIS_DATA_DIR`` or ``./.ledger``."""

    root = os.getenv(DATA_DIR_ENV_VAR)
    if root and root.strip():
        return Path(root).expanduser().resolve()
    return (Path.cwd() / ".ledger").resolve()


def _write_json_atomic(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    # Clean up the temp file when the write or the rename fails
    try:
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
            f.write("\n")
        os.replace(tmp, path)
    except Exception:
        with contextlib.suppress(FileNotFoundError):
            tmp.unlink()
        raise


def _read_json(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e


class LedgerStore:
    """Load and save the ledger and dictionary under one directory."""

    def __init__(self, root: str | os.PathLike[str] | None = None) -> None:
        self.root = Path(root).expanduser().resolve() if root is not None else default_data_root()

    @property
    def transactions_path(self) -> Path:
        return self.root / TRANSACTIONS_FILE

    @property
    def dictionary_path(self) -> Path:
        return self.root / DICTIONARY_FILE

    # ---- transactions ---------------------------------------------------

    def load_transactions(self) -> list[Transaction]:
        """Return the saved ledger, or ``[]`` when nothing was saved yet."""

        path = self.transactions_path
        if not path.exists():
            return []
        try:
            models = TransactionListPayload.validate_python(_read_json(path))
        except ValidationError as e:
            raise ValueError(f"{path} does not hold a transaction list: {e}") from e
        txns = [m.to_transaction() for m in models]
        _logger.debug("Loaded %d transactions from %s", len(txns), path)
        return txns

    def save_transactions(self, transactions: Iterable[Transaction]) -> None:
        payload = [t.to_dict() for t in transactions]
        _write_json_atomic(self.transactions_path, payload)
        _logger.debug("Saved %d transactions to %s", len(payload), self.transactions_path)

    # ---- dictionary -----------------------------------------------------

    def load_dictionary(self) -> CategoryDictionary:
        """Return the saved dictionary, or the default one when none exists."""

        path = self.dictionary_path
        if not path.exists():
            return DEFAULT_DICTIONARY
        try:
            mapping = DictionaryPayload.validate_python(_read_json(path))
        except ValidationError as e:
            raise ValueError(f"{path} does not hold a keyword dictionary: {e}") from e
        return CategoryDictionary.from_mapping(mapping)

    def save_dictionary(self, dictionary: CategoryDictionary) -> None:
        _write_json_atomic(self.dictionary_path, dictionary.to_mapping())
        _logger.debug("Saved %d categories to %s", len(dictionary), self.dictionary_path)


__all__ = [
    "DATA_DIR_ENV_VAR",
    "DICTIONARY_FILE",
    "TRANSACTIONS_FILE",
    "LedgerStore",
    "default_data_root",
]
