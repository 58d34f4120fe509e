from __future__ import annotations

import logging
from pathlib import Path
from uuid import UUID

from psycopg import Connection

from record_loader.db.ingest_runs import insert_ingest_run, update_ingest_run_status
from record_loader.db.sink import PostgresSink
from record_loader.ingest.engine import RecordReader
from record_loader.ingest.sinks import FanoutSink, LoggingSink, OutcomeSink, TallySink
from record_loader.ingest.summary import LoadSummary
from record_loader.parsing.registry import get_descriptor

logger = logging.getLogger(__name__)


def _summarize(tally: TallySink, *, profile: str, input_path: Path, workers: int, run_id: UUID | None) -> LoadSummary:
    """Fold a tally into a `LoadSummary`. File-level failures are not lines."""
    line_failures = [e for e in tally.failures if e.line is not None]
    return LoadSummary(
        profile=profile,
        input_path=str(input_path),
        workers=workers,
        total=tally.loaded + len(line_failures),
        loaded=tally.loaded,
        rejected=len(line_failures),
        fatal=len(line_failures) != len(tally.failures),
        run_id=run_id,
    )


def load_file(
    *,
    input_path: Path,
    profile: str,
    workers: int,
    conn: Connection | None = None,
) -> LoadSummary:
    """
    End-to-end file loading orchestrator:
      - Look up the profile's `RecordDescriptor`,
      - Run a `RecordReader` over `input_path` with `workers` threads,
      - Log every outcome and tally it,
      - When `conn` is given:
            - create an `ingest_runs` row (committed immediately),
            - persist records -> `loaded_records`, failures -> `reject_rows`,
            - and mark the run `succeeded` (or `failed` on a fatal file/header failure).

    Does not raise on invalid data, those lines are counted as rejected.
    Raises on infra related exceptions (DB issues/bad connection, etc.).
    """
    descriptor = get_descriptor(profile)
    tally = TallySink()
    sinks: list[OutcomeSink] = [LoggingSink(), tally]

    if conn is None:
        RecordReader(input_path, workers, descriptor).process(FanoutSink(*sinks))
        return _summarize(tally, profile=profile, input_path=input_path, workers=workers, run_id=None)

    ## -- create run ledger, committed immediately
    run_id = insert_ingest_run(conn, input_path=input_path, profile=profile, workers=workers)
    conn.commit()

    try:
        db_sink = PostgresSink(conn, run_id=run_id, profile=profile)
        RecordReader(input_path, workers, descriptor).process(FanoutSink(*sinks, db_sink))
        db_sink.flush()

        summary = _summarize(tally, profile=profile, input_path=input_path, workers=workers, run_id=run_id)
        update_ingest_run_status(
            conn,
            run_id=run_id,
            status="failed" if summary.fatal else "succeeded",
            loaded=summary.loaded,
            rejected=summary.rejected,
        )
        conn.commit()
        return summary

    except Exception:
        # revert all changes (excluding run ledger)
        conn.rollback()
        logger.error("load of %s failed, marking run %s failed", input_path, run_id)
        update_ingest_run_status(conn, run_id=run_id, status="failed")
        conn.commit()
        raise
