from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Protocol

from record_loader.parsing.types import ProcessingError


class OutcomeSink(Protocol):
    """
    Receives exactly one terminal call per processed line.

    Calls arrive in no particular order and may come from several worker
    threads at once. Sinks holding state must guard it themselves.
    """
    def on_success(self, record: Any) -> None: ...

    def on_fail(self, error: ProcessingError) -> None: ...


class CallbackSink:
    """Adapts a pair of plain functions to `OutcomeSink`."""

    def __init__(
        self,
        on_success: Callable[[Any], None],
        on_fail: Callable[[ProcessingError], None],
    ) -> None:
        self._on_success = on_success
        self._on_fail = on_fail

    def on_success(self, record: Any) -> None:
        self._on_success(record)

    def on_fail(self, error: ProcessingError) -> None:
        self._on_fail(error)


class LoggingSink:
    """Logs every outcome: records at INFO, failures at ERROR."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("record_loader.outcomes")

    def on_success(self, record: Any) -> None:
        self.logger.info("Successfully read: %s", record)

    def on_fail(self, error: ProcessingError) -> None:
        # traceback carries the chained cause, if any
        self.logger.error("Unsuccessfully read: %s", error, exc_info=error)


class TallySink:
    """
    Counts outcomes across worker threads.

    Keeps the failures (arrival order) but not the records.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.loaded = 0
        self.rejected = 0
        self.failures: list[ProcessingError] = []

    @property
    def total(self) -> int:
        with self._lock:
            return self.loaded + self.rejected

    def on_success(self, record: Any) -> None:
        with self._lock:
            self.loaded += 1

    def on_fail(self, error: ProcessingError) -> None:
        with self._lock:
            self.rejected += 1
            self.failures.append(error)


class FanoutSink:
    """Forwards each outcome to every wrapped sink, in the order given."""

    def __init__(self, *sinks: OutcomeSink) -> None:
        self.sinks = sinks

    def on_success(self, record: Any) -> None:
        for s in self.sinks:
            s.on_success(record)

    def on_fail(self, error: ProcessingError) -> None:
        for s in self.sinks:
            s.on_fail(error)
