"""CLI for the ``spending_analysis`` package.

This module exposes callable command handlers (``cmd_*``, each returning a
process exit code) and a Typer-based console interface that wraps them. The
root callback loads a local ``.env`` with ``python-dotenv`` (without
overriding the environment) and configures logging before any command runs.

Output is plain text: one tab-separated line per transaction
(``id, date, description, amount, category``) followed, for ``search`` and
``summary``, by ``category<TAB>total`` lines. Errors go to stderr.
"""

from __future__ import annotations

import csv
import os
from collections import Counter
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from . import api
from .amounts import parse_amount
from .categorize import DEFAULT_NAME_THRESHOLD
from .dictionary import add_category, add_keyword, find_category
from .errors import QuerySyntaxError
from .ingest import load_csv
from .logging_setup import configure_logging, get_logger
from .models import UNCATEGORIZED, CategoryDictionary, CategorySummary, Transaction
from .persistence import LedgerStore
from .predicates import match_literal_date
from .summary import summarize_by_category

THRESHOLD_ENV_VAR = "SPENDING_ANALYSIS_NAME_THRESHOLD"

_logger = get_logger("spending_analysis.cli")


# ---- Small module-level helpers --------------------------------------------


def _resolve_name_threshold(value: float | None) -> float:
    """Resolve the fuzzy-name threshold from the option, env, then default.

    Values outside ``[0, 1]`` or unparseable env values fall back to the
    default with a warning.
    """

    if value is None:
        env_val = os.getenv(THRESHOLD_ENV_VAR)
        if not env_val:
            return DEFAULT_NAME_THRESHOLD
        try:
            value = float(env_val)
        except ValueError:
            _logger.warning("Ignoring non-numeric %s=%r", THRESHOLD_ENV_VAR, env_val)
            return DEFAULT_NAME_THRESHOLD
    if not 0.0 <= value <= 1.0:
        _logger.warning("Name threshold %r outside [0, 1]; using %s", value, DEFAULT_NAME_THRESHOLD)
        return DEFAULT_NAME_THRESHOLD
    return value


def _err(message: str) -> None:
    typer.echo(message, err=True)


def _format_txn(txn: Transaction) -> str:
    return "\t".join(
        [txn.id, txn.date, txn.description, f"{txn.amount:.2f}", txn.category or UNCATEGORIZED]
    )


def _echo_summary(summary: CategorySummary) -> None:
    for category, total in summary.items():
        typer.echo(f"{category}\t{total:.2f}")


def _iso_date_or_none(value: str) -> str | None:
    """Return ``value`` as ``YYYY-MM-DD``, or report it and return ``None``."""

    try:
        parsed = match_literal_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        _err(f"Error: invalid date {value!r}; use YYYY-MM-DD or M/D/YYYY")
        return None
    return parsed.isoformat()


def _report_uncategorized(ledger: list[Transaction]) -> None:
    pending = [t for t in ledger if (t.category or UNCATEGORIZED) == UNCATEGORIZED]
    if pending:
        _err(
            f"{len(pending)} transaction(s) are {UNCATEGORIZED}; "
            "use 'assign' or 'add-keyword' to categorize them."
        )


# ---- Command handlers ------------------------------------------------------


def cmd_import_csv(csv_path: str, *, store: LedgerStore, name_threshold: float) -> int:
    """Import a ``date,description,amount`` CSV into the ledger.

    Rows are coerced, categorized against the saved dictionary, appended to
    the saved ledger, and echoed as ``<id>\\t<category>`` lines.
    """

    try:
        incoming = load_csv(csv_path)
    except FileNotFoundError:
        _err(f"Error: File not found: {csv_path}")
        return 1
    except PermissionError:
        _err(f"Error: Permission denied: {csv_path}")
        return 1
    except csv.Error as e:
        _err(f"Error: Failed to parse CSV: {e}")
        return 1

    try:
        dictionary = store.load_dictionary()
        ledger = store.load_transactions()
    except ValueError as e:
        _err(f"Error: {e}")
        return 1

    repeated = [tx_id for tx_id, n in Counter(t.id for t in incoming).items() if n > 1]
    if repeated:
        _err(f"Error: transaction ids repeated in the CSV: {', '.join(repeated)}")
        return 1
    known = {t.id for t in ledger}
    clashes = [t.id for t in incoming if t.id in known]
    if clashes:
        _err(f"Error: transaction ids already in the ledger: {', '.join(clashes)}")
        return 1

    categorized = api.categorize_expenses(incoming, dictionary, name_threshold=name_threshold)
    store.save_transactions([*ledger, *categorized])

    for txn in categorized:
        typer.echo(f"{txn.id}\t{txn.category}")
    _report_uncategorized(categorized)
    return 0


def cmd_search(query: str, *, store: LedgerStore) -> int:
    """Print the transactions matching ``query`` and their category totals."""

    try:
        ledger = store.load_transactions()
    except ValueError as e:
        _err(f"Error: {e}")
        return 1

    try:
        result = api.search(ledger, query)
    except QuerySyntaxError as e:
        _err(f"Filter error: {e}")
        return 1

    for txn in result.transactions:
        typer.echo(_format_txn(txn))
    typer.echo("")
    _echo_summary(result.summary)
    return 0


def cmd_summary(*, store: LedgerStore) -> int:
    try:
        ledger = store.load_transactions()
    except ValueError as e:
        _err(f"Error: {e}")
        return 1
    _echo_summary(summarize_by_category(ledger))
    return 0


def _save_dictionary_and_backfill(
    store: LedgerStore, dictionary: CategoryDictionary, name_threshold: float
) -> None:
    # Read the ledger first so a corrupt file leaves the dictionary unchanged.
    current = store.load_transactions()
    store.save_dictionary(dictionary)
    ledger, changed = api.recategorize_uncategorized(
        current, dictionary, name_threshold=name_threshold
    )
    if changed:
        store.save_transactions(ledger)
        typer.echo(f"Categorized {changed} previously uncategorized transaction(s).")


def cmd_add_category(
    name: str, keyword: str | None, *, store: LedgerStore, name_threshold: float
) -> int:
    """Add a category (optionally with a first keyword) to the dictionary."""

    try:
        dictionary = add_category(store.load_dictionary(), name, keyword)
        _save_dictionary_and_backfill(store, dictionary, name_threshold)
    except ValueError as e:
        _err(f"Error: {e}")
        return 1
    return 0


def cmd_add_keyword(
    category: str, keyword: str, *, store: LedgerStore, name_threshold: float
) -> int:
    """Append a keyword to an existing category."""

    try:
        dictionary = add_keyword(store.load_dictionary(), category, keyword)
        _save_dictionary_and_backfill(store, dictionary, name_threshold)
    except KeyError:
        _err(f"Error: unknown category: {category!r}")
        return 1
    except ValueError as e:
        _err(f"Error: {e}")
        return 1
    return 0


def cmd_assign(txn_id: str, category: str, *, store: LedgerStore) -> int:
    """Assign a dictionary category to one transaction by hand."""

    try:
        entry = find_category(store.load_dictionary(), category)
        if entry is None:
            _err(f"Error: unknown category: {category!r} (add it with 'add-category')")
            return 1
        ledger = api.assign_category(store.load_transactions(), txn_id, entry.name)
    except KeyError:
        _err(f"Error: unknown transaction id: {txn_id!r}")
        return 1
    except ValueError as e:
        _err(f"Error: {e}")
        return 1
    store.save_transactions(ledger)
    typer.echo(f"{txn_id}\t{entry.name}")
    return 0


def cmd_add(
    *,
    date: str,
    description: str,
    amount: str,
    store: LedgerStore,
    name_threshold: float,
) -> int:
    """Add one transaction by hand; it is categorized like imported rows."""

    iso = _iso_date_or_none(date)
    if iso is None:
        return 1
    if not description.strip():
        _err("Error: description cannot be empty")
        return 1
    try:
        value = parse_amount(amount)
    except ValueError as e:
        _err(f"Error: {e}")
        return 1

    try:
        ledger = store.load_transactions()
        dictionary = store.load_dictionary()
    except ValueError as e:
        _err(f"Error: {e}")
        return 1

    ledger, added = api.add_transaction(
        ledger,
        {"date": iso, "description": description, "amount": value},
        dictionary,
        name_threshold=name_threshold,
    )
    store.save_transactions(ledger)
    typer.echo(_format_txn(added))
    _report_uncategorized([added])
    return 0


def cmd_edit(
    txn_id: str,
    *,
    date: str | None,
    description: str | None,
    amount: str | None,
    store: LedgerStore,
    name_threshold: float,
) -> int:
    """Edit a transaction's fields and re-categorize it from its description."""

    try:
        ledger = store.load_transactions()
        dictionary = store.load_dictionary()
    except ValueError as e:
        _err(f"Error: {e}")
        return 1

    current = next((t for t in ledger if t.id == txn_id), None)
    if current is None:
        _err(f"Error: unknown transaction id: {txn_id!r}")
        return 1

    changes: dict[str, object] = {}
    if date is not None:
        iso = _iso_date_or_none(date)
        if iso is None:
            return 1
        changes["date"] = iso
    if description is not None:
        changes["description"] = description.strip()
    if amount is not None:
        try:
            changes["amount"] = parse_amount(amount)
        except ValueError as e:
            _err(f"Error: {e}")
            return 1

    ledger, updated = api.update_transaction(
        ledger, replace(current, **changes), dictionary, name_threshold=name_threshold
    )
    store.save_transactions(ledger)
    typer.echo(_format_txn(updated))
    _report_uncategorized([updated])
    return 0


def cmd_delete(txn_id: str, *, store: LedgerStore) -> int:
    try:
        ledger = api.delete_transaction(store.load_transactions(), txn_id)
    except KeyError:
        _err(f"Error: unknown transaction id: {txn_id!r}")
        return 1
    except ValueError as e:
        _err(f"Error: {e}")
        return 1
    store.save_transactions(ledger)
    return 0


# ---- Typer wiring ----------------------------------------------------------

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Search, categorize and summarize a personal transaction ledger.",
)


class _Settings:
    __slots__ = ("name_threshold", "store")

    def __init__(self, store: LedgerStore, name_threshold: float) -> None:
        self.store = store
        self.name_threshold = name_threshold


def _settings(ctx: typer.Context) -> _Settings:
    # Set by the root callback; subcommand contexts inherit ``obj``.
    return ctx.obj


def _exit(code: int) -> None:
    if code:
        raise typer.Exit(code)


# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--csv-path",
    help="Path to a CSV file with date, description and amount columns",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)


@app.command("import-csv")
def import_csv_cmd(ctx: typer.Context, csv_path: Annotated[Path, CSV_PATH_OPTION]) -> None:
    """Import and categorize transactions from a CSV file."""

    s = _settings(ctx)
    _exit(cmd_import_csv(str(csv_path), store=s.store, name_threshold=s.name_threshold))


@app.command("search")
def search_cmd(ctx: typer.Context, query: str = typer.Argument(..., help="Boolean query")) -> None:
    """Filter the ledger, e.g. ``"(coffee OR gas) AND amount>5"``."""

    _exit(cmd_search(query, store=_settings(ctx).store))


@app.command("summary")
def summary_cmd(ctx: typer.Context) -> None:
    """Print totals per category over the whole ledger."""

    _exit(cmd_summary(store=_settings(ctx).store))


@app.command("add-category")
def add_category_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="New category name"),
    keyword: str | None = typer.Option(None, "--keyword", "-k", help="First keyword"),
) -> None:
    """Add a category to the keyword dictionary."""

    s = _settings(ctx)
    _exit(cmd_add_category(name, keyword, store=s.store, name_threshold=s.name_threshold))


@app.command("add-keyword")
def add_keyword_cmd(
    ctx: typer.Context,
    category: str = typer.Argument(..., help="Existing category name"),
    keyword: str = typer.Argument(..., help="Keyword to match in descriptions"),
) -> None:
    """Add a keyword to a category."""

    s = _settings(ctx)
    _exit(cmd_add_keyword(category, keyword, store=s.store, name_threshold=s.name_threshold))


@app.command("assign")
def assign_cmd(
    ctx: typer.Context,
    txn_id: str = typer.Argument(..., metavar="ID"),
    category: str = typer.Argument(...),
) -> None:
    """Set a transaction's category by hand."""

    _exit(cmd_assign(txn_id, category, store=_settings(ctx).store))


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    date: str = typer.Option(..., help="Date (YYYY-MM-DD or M/D/YYYY)"),
    description: str = typer.Option(..., help="Description"),
    amount: str = typer.Option(..., help="Amount, e.g. 12.50 or -$3.00"),
) -> None:
    """Add one transaction and categorize it from its description."""

    s = _settings(ctx)
    _exit(
        cmd_add(
            date=date,
            description=description,
            amount=amount,
            store=s.store,
            name_threshold=s.name_threshold,
        )
    )


@app.command("edit")
def edit_cmd(
    ctx: typer.Context,
    txn_id: str = typer.Argument(..., metavar="ID"),
    date: str | None = typer.Option(None, help="New date (YYYY-MM-DD or M/D/YYYY)"),
    description: str | None = typer.Option(None, help="New description"),
    amount: str | None = typer.Option(None, help="New amount"),
) -> None:
    """Edit a transaction; its category is recomputed from the description."""

    s = _settings(ctx)
    _exit(
        cmd_edit(
            txn_id,
            date=date,
            description=description,
            amount=amount,
            store=s.store,
            name_threshold=s.name_threshold,
        )
    )


@app.command("delete")
def delete_cmd(ctx: typer.Context, txn_id: str = typer.Argument(..., metavar="ID")) -> None:
    """Remove a transaction from the ledger."""

    _exit(cmd_delete(txn_id, store=_settings(ctx).store))


@app.callback()
def _root(
    ctx: typer.Context,
    *,
    data_dir: Path | None = typer.Option(
        None,
        "--data-dir",
        help="Directory holding transactions.json and dictionary.json "
        "(default: $SPENDING_ANALYSIS_DATA_DIR or ./.ledger).",
    ),
    name_threshold: float | None = typer.Option(
        None,
        "--name-threshold",
        help=f"Fuzzy category-name threshold (default {DEFAULT_NAME_THRESHOLD}; "
        f"env {THRESHOLD_ENV_VAR}).",
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (env SPENDING_ANALYSIS_LOG_LEVEL)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding
    already-set variables), configures logging, and resolves the shared
    settings passed to every subcommand.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)
    ctx.obj = _Settings(LedgerStore(data_dir), _resolve_name_threshold(name_threshold))


if __name__ == "__main__":  # pragma: no cover
    app()
