import json
from pathlib import Path

import pytest

from spending_analysis import persistence
from spending_analysis.dictionary import DEFAULT_DICTIONARY, add_category
from spending_analysis.models import CategoryDictionary, Transaction
from spending_analysis.persistence import LedgerStore, default_data_root


def _ledger() -> list[Transaction]:
    return [
        Transaction("b", "2025-01-02", "Starbucks", 4.5, "Coffee"),
        Transaction("a", "2025-01-01", "Mystery", -12.0, None),
    ]


def test_default_root_comes_from_env(_isolate_data_dir: Path):
    assert default_data_root() == _isolate_data_dir.resolve()
    assert LedgerStore().root == _isolate_data_dir.resolve()


def test_default_root_falls_back_to_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.delenv("SPENDING_ANALYSIS_DATA_DIR")
    assert default_data_root() == (tmp_path / ".ledger").resolve()


def test_missing_files_give_empty_ledger_and_default_dictionary(tmp_path: Path):
    store = LedgerStore(tmp_path / "fresh")
    assert store.load_transactions() == []
    assert store.load_dictionary() is DEFAULT_DICTIONARY


def test_transactions_round_trip_in_order(tmp_path: Path):
    store = LedgerStore(tmp_path / "d")
    store.save_transactions(_ledger())
    assert store.load_transactions() == _ledger()
    assert not store.transactions_path.with_suffix(".json.tmp").exists()

    raw = json.loads(store.transactions_path.read_text(encoding="utf-8"))
    assert raw[1] == {
        "id": "a",
        "date": "2025-01-01",
        "description": "Mystery",
        "amount": -12.0,
        "category": None,
    }


def test_dictionary_round_trip_keeps_order(tmp_path: Path):
    store = LedgerStore(tmp_path / "d")
    d = add_category(DEFAULT_DICTIONARY, "Dining", keyword="taco")
    store.save_dictionary(d)
    loaded = store.load_dictionary()
    assert loaded == d
    assert loaded.names() == ["Gas", "Coffee", "Groceries", "Dining"]


def test_loading_coerces_hand_edited_rows(tmp_path: Path):
    store = LedgerStore(tmp_path / "d")
    store.transactions_path.parent.mkdir(parents=True)
    store.transactions_path.write_text(
        json.dumps([{"id": 7, "date": "2025-01-01", "description": "x", "amount": "$3.50",
                     "category": "  "}]),
        encoding="utf-8",
    )
    [txn] = store.load_transactions()
    assert txn.id == "7"
    assert txn.amount == 3.5
    assert txn.category is None


@pytest.mark.parametrize(
    ("filename", "content", "loader"),
    [
        ("transactions.json", "{not json", "load_transactions"),
        ("transactions.json", '{"id": "x"}', "load_transactions"),
        ("transactions.json", '[{"id": ""}]', "load_transactions"),
        ("dictionary.json", '["Gas"]', "load_dictionary"),
        ("dictionary.json", '{"Gas": "shell"}', "load_dictionary"),
    ],
)
def test_invalid_files_raise_value_error(
    tmp_path: Path, filename: str, content: str, loader: str
):
    store = LedgerStore(tmp_path / "d")
    store.root.mkdir(parents=True)
    (store.root / filename).write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        getattr(store, loader)()


def test_empty_dictionary_is_persisted_as_empty(tmp_path: Path):
    store = LedgerStore(tmp_path / "d")
    store.save_dictionary(CategoryDictionary())
    assert len(store.load_dictionary()) == 0


def test_failed_write_keeps_previous_file_and_removes_temp(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    store = LedgerStore(tmp_path / "d")
    store.save_transactions(_ledger())

    def _fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(persistence.os, "replace", _fail_replace)
    with pytest.raises(OSError, match="disk full"):
        store.save_transactions([])

    assert not store.transactions_path.with_suffix(".json.tmp").exists()
    assert store.load_transactions() == _ledger()
