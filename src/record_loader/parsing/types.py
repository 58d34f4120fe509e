from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class FieldType(str, Enum):
    """Field value kinds a column can be converted into."""
    text = "text"
    int32 = "int32"
    int64 = "int64"


class ErrorCode(str, Enum):
    """Typed failure classifications."""
    file_access = "file_access"
    engine_closed = "engine_closed"             # a reader processed twice
    schema = "schema"
    conversion = "conversion"
    unsupported_type = "unsupported_type"
    setter_invocation = "setter_invocation"


@dataclass(eq=False)
class ProcessingError(Exception):
    """
    Base for every failure reported through a sink's `on_fail`.

    `line` is the raw content of the data line that failed,
    or `None` for file-level failures (open, header, binding).
    The underlying exception, if any, is chained as `__cause__`.
    """
    detail: str
    line: str | None = None

    code: ClassVar[ErrorCode]

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.code.value}: {self.detail}"
        return f"{self.code.value}: {self.detail} (line: {self.line!r})"


## -- fatal, reported once per `process()` call

class FileAccessError(ProcessingError):
    """File cannot be opened, or the header/lines cannot be read."""
    code = ErrorCode.file_access


class EngineClosedError(FileAccessError):
    """The reader's worker pool was already torn down."""
    code = ErrorCode.engine_closed


class SchemaError(ProcessingError):
    """A required field has no matching header column."""
    code = ErrorCode.schema


## -- per line, isolated

class ConversionError(ProcessingError):
    """Token cannot be parsed as the field's declared type."""
    code = ErrorCode.conversion


class UnsupportedTypeError(ProcessingError):
    """Field declares a type with no registered converter."""
    code = ErrorCode.unsupported_type


class SetterInvocationError(ProcessingError):
    """Assigning an already converted value to the record failed."""
    code = ErrorCode.setter_invocation
