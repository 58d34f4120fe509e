from __future__ import annotations

import dataclasses
from typing import Any, Mapping, Sequence
from uuid import UUID

from psycopg import Connection, sql
from psycopg.types.json import Jsonb


def record_payload(record: Any) -> Mapping[str, Any]:
    """
    A record's field values as a JSON-ready mapping.

    Dataclass records go through `dataclasses.asdict`, any other record through `vars()`.
    """
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return dataclasses.asdict(record)
    try:
        return dict(vars(record))
    except TypeError:
        raise TypeError(f"Cannot serialize record of type {type(record).__name__}") from None


# fixed cols in `loaded_records`
_RECORD_COLS = ("run_id", "profile", "payload")


def insert_loaded_records(conn: Connection, *, run_id: UUID, profile: str, records: Sequence[Any]) -> None:
    """
    Insert successfully assembled `records` into `loaded_records` as `jsonb` payloads.
    """
    query = sql.SQL("INSERT INTO {tbl} ({cols}) VALUES ({vals})").format(
        tbl=sql.Identifier("loaded_records"),
        cols=sql.SQL(", ").join(sql.Identifier(c) for c in _RECORD_COLS),
        vals=sql.SQL(", ").join(sql.Placeholder() for _ in _RECORD_COLS),
    )

    params = [(run_id, profile, Jsonb(dict(record_payload(r)))) for r in records]

    if params:
        with conn.cursor() as cur:
            cur.executemany(query, params)  # sequential batch processing
