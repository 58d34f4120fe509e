from __future__ import annotations

import argparse
import logging
from pathlib import Path

from record_loader.cli.loader import load_file
from record_loader.db.connect import connect
from record_loader.db.initialize import db_init
from record_loader.parsing.registry import PROFILE_NAMES
from record_loader.settings import load_settings


LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def main(argv: list[str] | None = None) -> int:
    """
    A CLI for reading delimited files into typed records.

    The `cmd` options are:
    ## load:
    Reads the file line by line on a worker pool and logs every outcome.
    - `--input` as the path to the data (falls back to `RECORD_LOADER_FILE`),
    - `--profile` as the record type to build,
    - `--workers` as the pool size (falls back to `RECORD_LOADER_THREADS`, then 4),
    - `--db` to also persist records and rejects to Postgres (`RECORD_LOADER_DSN`).

    A results summary will print in the terminal upon completion of a load.

    ### Example load usage:
    - `loader load --input data/accounts.csv --profile accounts --workers 8`

    ## db:
    Database controlling commands, includes DB initialization functionality.
    - `init` is the command to (re)initialize the DB
    - `--sql` is an optional pointer to the SQL file or dir of files to run.

    Returns 0 on a completed load (rejected lines included),
    1 when the file or its header could not be processed at all.
    """
    p = argparse.ArgumentParser(prog="loader")
    p.add_argument("--log-level", default=None, help="Logging level (default: RECORD_LOADER_LOG_LEVEL or INFO).")
    sub = p.add_subparsers(dest="cmd", required=True)

    # load cmd
    load = sub.add_parser("load", help="Read a delimited file into records.")
    load.add_argument("--input", default=None, help="Path to input file.")
    load.add_argument("--profile", required=True, choices=PROFILE_NAMES)
    load.add_argument("--workers", type=int, default=None, help="Worker thread count.")
    load.add_argument("--db", action="store_true", help="Persist outcomes to Postgres.")

    # db cmd
    db = sub.add_parser("db", help="Database utilities.")
    db_sub = db.add_subparsers(dest="db_cmd", required=True)

    db_init_p = db_sub.add_parser("init", help="Initialize DB schema from SQL file(s).")
    db_init_p.add_argument("--sql", default="sql", help="Path to schema SQL file OR a directory of `.sql` files.")

    args = p.parse_args(argv)

    settings = load_settings(
        input_path=getattr(args, "input", None),
        workers=getattr(args, "workers", None),
        log_level=args.log_level,
    )
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    if args.cmd == "load":
        if settings.input_path is None:
            p.error("load: --input is required (or set RECORD_LOADER_FILE)")
        if settings.workers < 1:
            p.error(f"load: --workers must be >= 1, got {settings.workers}")

        if args.db:
            with connect(settings.database_url) as conn:
                summary = load_file(
                    input_path=settings.input_path,
                    profile=args.profile,
                    workers=settings.workers,
                    conn=conn,
                )
        else:
            summary = load_file(input_path=settings.input_path, profile=args.profile, workers=settings.workers)

        print(summary.render_one_line())
        return 1 if summary.fatal else 0

    if args.cmd == "db" and args.db_cmd == "init":
        files = db_init(sql_path=Path(args.sql), database_url=settings.database_url)
        print(f"Initialized schema from {args.sql} ({len(files)} file(s))")
        return 0

    return 2
