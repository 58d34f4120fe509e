from __future__ import annotations

import logging
import threading
from typing import Any
from uuid import UUID

from psycopg import Connection

from record_loader.db.record_writers import insert_loaded_records
from record_loader.db.reject_writers import RejectInsert, insert_reject_rows
from record_loader.parsing.types import ProcessingError


logger = logging.getLogger(__name__)

BATCH_SIZE = 500        # config: increase or decrease.


class PostgresSink:
    """
    Persists outcomes of one ingest run.

    Outcomes are buffered per kind and written in batches of `batch_size`.
    Worker threads share one connection: every buffer swap and write happens
    under a single lock. Call `flush()` after `process()` returns to write
    what is left; committing stays with the caller.

    A failed batch write is logged, stops all further writes and is raised
    by `flush()`, so the caller's run fails instead of silently losing rows.
    """

    def __init__(self, conn: Connection, *, run_id: UUID, profile: str, batch_size: int = BATCH_SIZE) -> None:
        self.conn = conn
        self.run_id = run_id
        self.profile = profile
        self.batch_size = batch_size
        self._lock = threading.Lock()
        self._records: list[Any] = []
        self._rejects: list[RejectInsert] = []
        self._write_error: Exception | None = None

    def on_success(self, record: Any) -> None:
        with self._lock:
            if self._write_error is not None:
                return
            self._records.append(record)
            if len(self._records) >= self.batch_size:
                self._write_records()

    def on_fail(self, error: ProcessingError) -> None:
        with self._lock:
            if self._write_error is not None:
                return
            self._rejects.append(RejectInsert.from_error(error, profile=self.profile))
            if len(self._rejects) >= self.batch_size:
                self._write_rejects()

    def flush(self) -> None:
        """Write any remainder left in the buffers. Raise if any batch failed."""
        with self._lock:
            if self._write_error is None:
                self._write_records()
            if self._write_error is None:
                self._write_rejects()
            if self._write_error is not None:
                raise RuntimeError(f"persisting outcomes of run {self.run_id} failed") from self._write_error

    ## -- lock held by callers

    def _write_records(self) -> None:
        try:
            insert_loaded_records(self.conn, run_id=self.run_id, profile=self.profile, records=self._records)
        except Exception as e:
            logger.exception("writing %d records of run %s failed", len(self._records), self.run_id)
            self._write_error = e
        finally:
            self._records.clear()

    def _write_rejects(self) -> None:
        try:
            insert_reject_rows(self.conn, run_id=self.run_id, rejects=self._rejects)
        except Exception as e:
            logger.exception("writing %d rejects of run %s failed", len(self._rejects), self.run_id)
            self._write_error = e
        finally:
            self._rejects.clear()
