from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Iterator

import psycopg
import pytest

from record_loader.db.initialize import _run_sql_file


# for avoiding schema drift: re-init tables fresh each test session.
DROP_ALL = """
DROP TABLE IF EXISTS
  reject_rows,
  loaded_records,
  ingest_runs
CASCADE;
"""

TRUNCATE_ALL = """
TRUNCATE TABLE
  reject_rows,
  loaded_records,
  ingest_runs
RESTART IDENTITY CASCADE;
"""


@pytest.fixture(scope="session")
def dsn() -> str:
    """Postgres for integration tests. Skips them when `RECORD_LOADER_TEST_DSN` is not set."""
    url = os.getenv("RECORD_LOADER_TEST_DSN")
    if not url:
        pytest.skip("RECORD_LOADER_TEST_DSN not set")
    return url


@pytest.fixture(scope="session")
def wait_for_db(dsn: str) -> None:
    """Wait until Postgres accepts connection. Raise `RuntimeError` on timeout."""
    deadline = time.time() + 10
    last_err: Exception | None = None
    while time.time() < deadline:
        try:
            with psycopg.connect(dsn, autocommit=True) as conn:
                conn.execute("SELECT 1;")
            return
        except psycopg.OperationalError as e:
            last_err = e
            time.sleep(0.2)
    raise RuntimeError(f"DB not ready: {dsn}. Last error: {last_err}")


@pytest.fixture(scope="session")
def _schema(wait_for_db: None, dsn: str, repo_root: Path) -> None:
    """Initialize the schema ONLY once per test session."""
    with psycopg.connect(dsn) as c:
        c.execute(DROP_ALL)
        c.commit()
        _run_sql_file(c, repo_root / "sql" / "000_init.sql")


@pytest.fixture()
def conn(_schema: None, dsn: str) -> Iterator[psycopg.Connection]:
    """A clean `psycopg` connection: all table rows cleared before each test."""
    with psycopg.connect(dsn) as c:
        c.execute(TRUNCATE_ALL)
        c.commit()
        yield c
