from __future__ import annotations

import os
from typing import Optional

import psycopg
from psycopg import Connection

from record_loader.settings import DEFAULT_DSN



def get_database_url() -> str:
    """Returns the configured DSN (`RECORD_LOADER_DSN`, else the local docker default)."""
    # CLI/runtime uses RECORD_LOADER_DSN.
    # tests have RECORD_LOADER_TEST_DSN set.
    return os.getenv("RECORD_LOADER_DSN", DEFAULT_DSN)


def connect(database_url: Optional[str] = None) -> Connection:
    """
    Return a psycopg connection.

    - Uses `RECORD_LOADER_DSN`, if not provided earlier.
    - Leaves autocommit OFF (commits explicitly managed elsewhere).
    """
    url = database_url or get_database_url()
    return psycopg.connect(url)
