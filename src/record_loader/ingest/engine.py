from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable

from record_loader.ingest.readers import open_lines, read_header, stream_lines
from record_loader.ingest.sinks import OutcomeSink
from record_loader.parsing.schema import RecordAssembler, RecordDescriptor, build_bindings
from record_loader.parsing.types import (
    EngineClosedError,
    FileAccessError,
    ProcessingError,
    SetterInvocationError,
)

logger = logging.getLogger(__name__)


def _deliver(callback: Callable[[Any], None], outcome: Any) -> None:
    """
    Hand one outcome to a sink method.

    A sink that raises is logged, not re-reported: reporting it through
    `on_fail` would give the line a second terminal call.
    """
    try:
        callback(outcome)
    except Exception:
        logger.exception("outcome sink raised while handling %r", outcome)


class RecordReader:
    """
    Reads a delimited file into records of one type.

    The calling thread reads lines sequentially, a fixed pool of `workers`
    threads splits, converts and assembles them. Each line reaches the sink
    exactly once, through `on_success` or `on_fail`, in no particular order.

    Single-use: `process()` tears the pool down when it returns.

    Example:
        reader = RecordReader("accounts.csv", 4, ACCOUNT_DESCRIPTOR)
        reader.process(LoggingSink())
    """

    def __init__(self, path: Path | str, workers: int, descriptor: RecordDescriptor) -> None:
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.path = Path(path)
        self.workers = workers
        self.descriptor = descriptor
        self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="record-loader")
        self._closed = False

    def __enter__(self) -> RecordReader:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        """Stop accepting work and wait, without a deadline, for all submitted lines."""
        self._pool.shutdown(wait=True)
        self._closed = True

    def process(self, sink: OutcomeSink) -> None:
        """
        Process every data line of the file, blocking until all are done.

        Never raises processing errors: a file that cannot be opened or read,
        or a header that does not bind, is reported once through
        `sink.on_fail` and no lines are dispatched.
        """
        if self._closed:
            _deliver(sink.on_fail, EngineClosedError(f"reader for {str(self.path)!r} was already processed"))
            return

        dispatched = 0
        try:
            try:
                f = open_lines(self.path)
            except FileAccessError as e:
                _deliver(sink.on_fail, e)
                return

            with f:
                lines = stream_lines(f)
                try:
                    bindings = build_bindings(read_header(lines), self.descriptor)
                except ProcessingError as e:
                    _deliver(sink.on_fail, e)
                    return

                # bindings are frozen from here on, shared read-only by the workers
                assembler = RecordAssembler(bindings=bindings, factory=self.descriptor.factory)

                try:
                    for line in lines:
                        self._pool.submit(self._process_line, assembler, line, sink)
                        dispatched += 1
                except FileAccessError as e:
                    # lines already submitted still run to completion
                    _deliver(sink.on_fail, e)
        finally:
            self.close()

        logger.info("processed %d lines from %s with %d workers", dispatched, self.path, self.workers)

    @staticmethod
    def _process_line(assembler: RecordAssembler, line: str, sink: OutcomeSink) -> None:
        """One unit of work, run on a pool thread."""
        try:
            record = assembler.assemble_line(line)
        except ProcessingError as e:
            _deliver(sink.on_fail, e)
            return
        except Exception as e:
            # anything else must still end the line with exactly one outcome
            error = SetterInvocationError(f"{type(e).__name__}: {e}", line=line)
            error.__cause__ = e
            _deliver(sink.on_fail, error)
            return
        _deliver(sink.on_success, record)
