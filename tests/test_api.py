import pytest

from spending_analysis.api import (
    add_transaction,
    assign_category,
    categorize_expenses,
    delete_transaction,
    recategorize_uncategorized,
    search,
    update_transaction,
)
from spending_analysis.dictionary import DEFAULT_DICTIONARY, add_keyword
from spending_analysis.errors import MismatchedParenthesesError
from spending_analysis.models import Transaction


def _ledger() -> list[Transaction]:
    raw = [
        Transaction("t1", "2025-01-01", "Shell station", 40.0),
        Transaction("t2", "2025-01-02", "Starbucks latte", 4.5),
        Transaction("t3", "2025-01-03", "Corner bodega", 12.0),
        Transaction("t4", "2025-01-04", "Kroger weekly", 85.25),
    ]
    return categorize_expenses(raw, DEFAULT_DICTIONARY)


def test_categorize_expenses_assigns_every_transaction():
    assert [t.category for t in _ledger()] == ["Gas", "Coffee", "Uncategorized", "Groceries"]


def test_search_returns_matches_and_their_summary():
    result = search(_ledger(), "amount>10 AND NOT kroger")
    assert [t.id for t in result.transactions] == ["t1", "t3"]
    assert result.summary == {"Gas": 40.0, "Uncategorized": 12.0}


def test_search_with_blank_query_returns_everything():
    ledger = _ledger()
    result = search(ledger, "   ")
    assert result.transactions is ledger
    assert sum(result.summary.values()) == pytest.approx(141.75)


def test_search_propagates_query_errors():
    with pytest.raises(MismatchedParenthesesError):
        search(_ledger(), "(shell OR latte")


def test_update_transaction_recategorizes_from_new_description():
    ledger = _ledger()
    edited = Transaction("t3", "2025-01-03", "Chevron fill-up", 12.0, "Uncategorized")
    new_ledger, updated = update_transaction(ledger, edited, DEFAULT_DICTIONARY)
    assert updated.category == "Gas"
    assert new_ledger[2] == updated
    assert ledger[2].category == "Uncategorized"
    assert [t.id for t in new_ledger] == [t.id for t in ledger]


def test_update_unknown_id_raises():
    with pytest.raises(KeyError):
        update_transaction(_ledger(), Transaction("nope", "", "x", 0.0), DEFAULT_DICTIONARY)


def test_recategorize_only_touches_uncategorized_entries():
    ledger = assign_category(_ledger(), "t1", "Coffee")
    d = add_keyword(DEFAULT_DICTIONARY, "Groceries", "bodega")
    out, changed = recategorize_uncategorized(ledger, d)
    assert changed == 1
    assert [t.category for t in out] == ["Coffee", "Coffee", "Groceries", "Groceries"]


def test_add_transaction_coerces_and_categorizes():
    ledger = _ledger()
    record = {"date": "3/1/2025", "description": " Exxon 44 ", "amount": "$30.10"}
    new_ledger, added = add_transaction(
        ledger, record, DEFAULT_DICTIONARY, id_factory=lambda: "t5"
    )
    assert added == Transaction("t5", "2025-03-01", "Exxon 44", 30.10, "Gas")
    assert new_ledger[-1] == added
    assert len(ledger) == 4


def test_add_transaction_mints_a_fresh_id():
    new_ledger, added = add_transaction(
        _ledger(), {"date": "2025-03-01", "description": "x", "amount": 1}, DEFAULT_DICTIONARY
    )
    assert added.id not in {t.id for t in _ledger()}
    assert added.category == "Uncategorized"
    assert len(new_ledger) == 5


def test_add_transaction_rejects_an_existing_id():
    with pytest.raises(ValueError, match="t1"):
        add_transaction(
            _ledger(), {"id": "t1", "description": "shell", "amount": 5}, DEFAULT_DICTIONARY
        )


def test_assign_category_by_hand():
    out = assign_category(_ledger(), "t3", "Groceries")
    assert out[2].category == "Groceries"
    with pytest.raises(KeyError):
        assign_category(out, "missing", "Gas")


def test_delete_transaction():
    out = delete_transaction(_ledger(), "t2")
    assert [t.id for t in out] == ["t1", "t3", "t4"]
    with pytest.raises(KeyError):
        delete_transaction(out, "t2")
