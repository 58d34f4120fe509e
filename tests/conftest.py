from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable

import pytest

from record_loader.parsing.types import ProcessingError


def _find_repo_root(start: Path) -> Path:
    marker = "pyproject.toml"
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if (p / marker).exists():
            return p
    raise RuntimeError(f"Could not find repo root from: {start}")


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """The absolute path to the repo root (finds by walking up to `pyproject.toml`)."""
    return _find_repo_root(Path(__file__))


class RecordingSink:
    """Thread-safe sink keeping every outcome, for assertions."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.records: list[Any] = []
        self.failures: list[ProcessingError] = []

    def on_success(self, record: Any) -> None:
        with self._lock:
            self.records.append(record)

    def on_fail(self, error: ProcessingError) -> None:
        with self._lock:
            self.failures.append(error)

    @property
    def calls(self) -> int:
        return len(self.records) + len(self.failures)


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def write_file(tmp_path: Path) -> Callable[..., Path]:
    """Write `text` to a file under `tmp_path` and return its path. Text is written verbatim."""
    def _write(text: str, name: str = "input.csv", encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.write_bytes(text.encode(encoding))
        return path
    return _write
