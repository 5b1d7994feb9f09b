from pathlib import Path

import pytest

from spending_analysis import cli
from spending_analysis.categorize import DEFAULT_NAME_THRESHOLD
from spending_analysis.models import Transaction
from spending_analysis.persistence import LedgerStore


@pytest.fixture()
def store(tmp_path: Path) -> LedgerStore:
    s = LedgerStore(tmp_path / "data")
    s.save_transactions(
        [
            Transaction("t1", "2025-01-01", "Shell station", 40.0, "Gas"),
            Transaction("t2", "2025-01-02", "Corner bodega", 12.0, "Uncategorized"),
        ]
    )
    return s


# ---- Threshold resolution ----------------------------------------------------


def test_threshold_defaults():
    assert cli._resolve_name_threshold(None) == DEFAULT_NAME_THRESHOLD


def test_threshold_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(cli.THRESHOLD_ENV_VAR, "0.35")
    assert cli._resolve_name_threshold(None) == pytest.approx(0.35)
    # Explicit option wins over the environment
    assert cli._resolve_name_threshold(0.9) == pytest.approx(0.9)


@pytest.mark.parametrize("env_value", ["high", "1.5"])
def test_bad_threshold_env_falls_back(monkeypatch: pytest.MonkeyPatch, env_value: str):
    monkeypatch.setenv(cli.THRESHOLD_ENV_VAR, env_value)
    assert cli._resolve_name_threshold(None) == DEFAULT_NAME_THRESHOLD


# ---- Handlers ----------------------------------------------------------------


def test_search_prints_rows_then_summary(store: LedgerStore, capsys: pytest.CaptureFixture[str]):
    assert cli.cmd_search("shell OR bodega", store=store) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "t1\t2025-01-01\tShell station\t40.00\tGas",
        "t2\t2025-01-02\tCorner bodega\t12.00\tUncategorized",
        "",
        "Gas\t40.00",
        "Uncategorized\t12.00",
    ]


@pytest.mark.parametrize(
    ("query", "message"),
    [
        ("(shell", "Filter error: Mismatched parentheses"),
        ("AND", "Filter error: Invalid syntax"),
        ("colour=red", "Filter error: Invalid syntax"),
    ],
)
def test_search_reports_query_errors(
    store: LedgerStore, capsys: pytest.CaptureFixture[str], query: str, message: str
):
    assert cli.cmd_search(query, store=store) == 1
    assert message in capsys.readouterr().err


def test_import_missing_file(store: LedgerStore, capsys: pytest.CaptureFixture[str]):
    code = cli.cmd_import_csv("nope.csv", store=store, name_threshold=DEFAULT_NAME_THRESHOLD)
    assert code == 1
    assert "File not found" in capsys.readouterr().err


def test_import_rejects_duplicate_ids(
    store: LedgerStore, tmp_path: Path, capsys: pytest.CaptureFixture[str]
):
    p = tmp_path / "dup.csv"
    p.write_text("id,date,description,amount\nt1,2025-02-01,Exxon,30\n", encoding="utf-8")
    code = cli.cmd_import_csv(str(p), store=store, name_threshold=DEFAULT_NAME_THRESHOLD)
    assert code == 1
    assert "t1" in capsys.readouterr().err
    assert len(store.load_transactions()) == 2


def test_import_rejects_ids_repeated_within_the_csv(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
):
    fresh = LedgerStore(tmp_path / "fresh")
    p = tmp_path / "twice.csv"
    p.write_text(
        "id,date,description,amount\nx1,2025-02-01,Exxon,30\nx1,2025-02-02,Aldi,12\n",
        encoding="utf-8",
    )
    code = cli.cmd_import_csv(str(p), store=fresh, name_threshold=DEFAULT_NAME_THRESHOLD)
    assert code == 1
    assert "repeated in the CSV: x1" in capsys.readouterr().err
    assert fresh.load_transactions() == []


def test_add_appends_a_categorized_entry(store: LedgerStore, capsys: pytest.CaptureFixture[str]):
    code = cli.cmd_add(
        date="3/1/2025",
        description="Peets run",
        amount="6.40",
        store=store,
        name_threshold=DEFAULT_NAME_THRESHOLD,
    )
    assert code == 0
    ledger = store.load_transactions()
    assert [t.id for t in ledger[:2]] == ["t1", "t2"]
    added = ledger[2]
    assert (added.date, added.description, added.amount, added.category) == (
        "2025-03-01",
        "Peets run",
        6.4,
        "Coffee",
    )
    assert capsys.readouterr().out.strip() == f"{added.id}\t2025-03-01\tPeets run\t6.40\tCoffee"


@pytest.mark.parametrize(
    ("date", "description", "amount"),
    [
        ("2025-02-30", "Peets", "1"),
        ("yesterday", "Peets", "1"),
        ("2025-03-01", "   ", "1"),
        ("2025-03-01", "Peets", "1_000"),
        ("2025-03-01", "Peets", "lots"),
    ],
)
def test_add_validates_inputs(store: LedgerStore, date: str, description: str, amount: str):
    code = cli.cmd_add(
        date=date,
        description=description,
        amount=amount,
        store=store,
        name_threshold=DEFAULT_NAME_THRESHOLD,
    )
    assert code == 1
    assert len(store.load_transactions()) == 2


def test_add_keyword_with_corrupt_ledger_keeps_dictionary(
    store: LedgerStore, capsys: pytest.CaptureFixture[str]
):
    store.transactions_path.write_text("{not json", encoding="utf-8")
    code = cli.cmd_add_keyword(
        "Groceries", "bodega", store=store, name_threshold=DEFAULT_NAME_THRESHOLD
    )
    assert code == 1
    assert "not valid JSON" in capsys.readouterr().err
    assert not store.dictionary_path.exists()


def test_add_keyword_backfills_uncategorized(
    store: LedgerStore, capsys: pytest.CaptureFixture[str]
):
    code = cli.cmd_add_keyword(
        "groceries", "bodega", store=store, name_threshold=DEFAULT_NAME_THRESHOLD
    )
    assert code == 0
    assert "Categorized 1 previously uncategorized" in capsys.readouterr().out
    assert [t.category for t in store.load_transactions()] == ["Gas", "Groceries"]
    assert store.load_dictionary().get("Groceries").keywords[-1] == "bodega"


def test_add_keyword_unknown_category(store: LedgerStore, capsys: pytest.CaptureFixture[str]):
    code = cli.cmd_add_keyword("Travel", "x", store=store, name_threshold=DEFAULT_NAME_THRESHOLD)
    assert code == 1
    assert "unknown category" in capsys.readouterr().err


def test_add_category_rejects_existing(store: LedgerStore, capsys: pytest.CaptureFixture[str]):
    code = cli.cmd_add_category("gas", None, store=store, name_threshold=DEFAULT_NAME_THRESHOLD)
    assert code == 1
    assert "already exists" in capsys.readouterr().err


def test_assign_requires_known_category(store: LedgerStore):
    assert cli.cmd_assign("t2", "Travel", store=store) == 1
    assert cli.cmd_assign("missing", "Gas", store=store) == 1
    assert cli.cmd_assign("t2", "coffee", store=store) == 0
    assert store.load_transactions()[1].category == "Coffee"


def test_edit_validates_inputs(store: LedgerStore):
    kwargs = {"store": store, "name_threshold": DEFAULT_NAME_THRESHOLD}
    assert cli.cmd_edit("t1", date="2025-02-30", description=None, amount=None, **kwargs) == 1
    assert cli.cmd_edit("t1", date=None, description=None, amount="lots", **kwargs) == 1
    assert cli.cmd_edit("zz", date=None, description="x", amount=None, **kwargs) == 1


def test_edit_recategorizes(store: LedgerStore, capsys: pytest.CaptureFixture[str]):
    code = cli.cmd_edit(
        "t2",
        date="2/3/2025",
        description="Dunkin run",
        amount="$5.25",
        store=store,
        name_threshold=DEFAULT_NAME_THRESHOLD,
    )
    assert code == 0
    assert capsys.readouterr().out.strip() == "t2\t2025-02-03\tDunkin run\t5.25\tCoffee"
    assert store.load_transactions()[1] == Transaction(
        "t2", "2025-02-03", "Dunkin run", 5.25, "Coffee"
    )


def test_delete(store: LedgerStore):
    assert cli.cmd_delete("t1", store=store) == 0
    assert [t.id for t in store.load_transactions()] == ["t2"]
    assert cli.cmd_delete("t1", store=store) == 1
