from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence
from uuid import UUID

from psycopg import Connection, sql

from record_loader.parsing.types import ProcessingError


@dataclass(frozen=True)
class RejectInsert:
    """`reject_rows` table's expected data schema for one failed outcome."""
    profile: str
    line: str | None            # `None` for file-level failures
    reason_code: str
    reason_detail: str

    @classmethod
    def from_error(cls, error: ProcessingError, *, profile: str) -> RejectInsert:
        return cls(
            profile=profile,
            line=error.line,
            reason_code=error.code.value,
            reason_detail=error.detail,
        )


# fixed cols in `reject_rows`
_REJECT_COLS = ("run_id", "profile", "line", "reason_code", "reason_detail")


def insert_reject_rows(conn: Connection, *, run_id: UUID, rejects: Sequence[RejectInsert]) -> None:
    """
    Insert `rejects` into the DB's `reject_rows`.

    Table/column identifiers are fixed/non derived constants.
    Values are parameterized directly.
    """
    query = sql.SQL("INSERT INTO {tbl} ({cols}) VALUES ({vals})").format(
        tbl=sql.Identifier("reject_rows"),
        cols=sql.SQL(", ").join(sql.Identifier(c) for c in _REJECT_COLS),
        vals=sql.SQL(", ").join(sql.Placeholder() for _ in _REJECT_COLS),
    )

    params: list[tuple[Any, ...]] = [
        (run_id, r.profile, r.line, r.reason_code, r.reason_detail)
        for r in rejects
    ]

    if params:
        with conn.cursor() as cur:
            cur.executemany(query, params)
