"""Pytest configuration for test isolation.

The persistence layer defaults to ``./.ledger`` under the working directory
and the CLI reads its threshold and log level from the environment (and from
a ``.env`` file). Tests must not pick up a developer's ledger or settings, so
an autouse fixture points the data root at a per-test temporary directory and
clears the tunables.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from spending_analysis import logging_setup


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_root = tmp_path / "ledger"
    data_root.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("SPENDING_ANALYSIS_DATA_DIR", os.fspath(data_root))
    monkeypatch.delenv("SPENDING_ANALYSIS_NAME_THRESHOLD", raising=False)
    monkeypatch.delenv("SPENDING_ANALYSIS_LOG_LEVEL", raising=False)
    # Keep the CLI's ``load_dotenv`` away from any .env in the repo root.
    monkeypatch.chdir(tmp_path)
    return data_root


@pytest.fixture(autouse=True)
def _reset_package_logging():
    # ``configure_logging`` binds its handler to the ``sys.stderr`` of the
    # moment, which CliRunner swaps out; start every test unconfigured.
    yield
    pkg_logger = logging.getLogger(logging_setup.PACKAGE_LOGGER)
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.setLevel(logging.NOTSET)
    pkg_logger.propagate = True
    logging_setup._handler = None
