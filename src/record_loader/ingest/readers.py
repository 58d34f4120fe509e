from __future__ import annotations

from pathlib import Path
from typing import Iterator, TextIO

from record_loader.parsing.types import FileAccessError


def open_lines(path: Path) -> TextIO:
    """
    Open `path` for sequential UTF-8 reading.

    `\\r\\n` and `\\r` line endings are translated to `\\n` on read.
    Raises `FileAccessError` when the file cannot be opened.
    """
    try:
        return path.open("r", encoding="utf-8")
    except OSError as e:
        raise FileAccessError(f"cannot open {str(path)!r}: {e.strerror or e}") from e


def stream_lines(f: TextIO) -> Iterator[str]:
    """
    Yields each remaining line of `f` without its line terminator.

    Blank lines are yielded too, a final newline does not produce an extra line.
    Read failures (I/O, undecodable bytes) are raised as `FileAccessError`.
    """
    try:
        for raw in f:
            yield raw[:-1] if raw.endswith("\n") else raw
    except (OSError, UnicodeDecodeError) as e:
        raise FileAccessError(f"cannot read {getattr(f, 'name', '<stream>')!r}: {e}") from e


def read_header(lines: Iterator[str]) -> str:
    """Return the header line. An empty file has none and raises `FileAccessError`."""
    header = next(lines, None)
    if header is None:
        raise FileAccessError("missing header line: file is empty")
    return header
