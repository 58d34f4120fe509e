from __future__ import annotations

from pathlib import Path
from typing import Literal
from uuid import UUID

from psycopg import Connection


RunStatus = Literal["running", "succeeded", "failed"]


def insert_ingest_run(conn: Connection, *, input_path: Path, profile: str, workers: int) -> UUID:
    """
    Create an `ingest_runs` row, returns `run_id`.

    The caller commits immediately so the run ledger persists even if later steps error.
    """
    row = conn.execute(
        """
        INSERT INTO ingest_runs (input_path, profile, workers, status)
        VALUES (%s, %s, %s, 'running')
        RETURNING run_id
        """,
        (str(input_path), profile, workers),
    ).fetchone()
    if row is None:
        raise RuntimeError("INSERT INTO ingest_runs returned no run_id")
    return row[0]


def update_ingest_run_status(
    conn: Connection,
    *,
    run_id: UUID,
    status: RunStatus,
    loaded: int | None = None,
    rejected: int | None = None,
) -> None:
    """Updates `status` (and final counts, when known) of the run `run_id`."""
    conn.execute(
        """
        UPDATE ingest_runs
        SET status = %s,
            loaded = COALESCE(%s, loaded),
            rejected = COALESCE(%s, rejected),
            finished_at = CASE WHEN %s = 'running' THEN NULL ELSE now() END
        WHERE run_id = %s
        """,
        (status, loaded, rejected, status, run_id),
    )
