from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence

from .primitives import DELIMITER, convert_value, split_line
from .types import ProcessingError, SchemaError, SetterInvocationError

logger = logging.getLogger(__name__)

# Typing:
# Setter assigns an already converted value onto a record.
# Factory builds a fresh, empty record.
Setter = Callable[[Any, Any], None]
Factory = Callable[[], Any]

UTF_8_BOM = "\ufeff"


def attribute_setter(name: str) -> Setter:
    """Setter assigning to the record attribute `name`."""
    def _set(record: Any, value: Any) -> None:
        setattr(record, name, value)
    return _set


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """A record field that can be filled from a column of the same name."""
    name: str                       # matched against header column names.
    field_type: Any                 # a `FieldType`; anything else fails on assignment.
    setter: Setter | None = None    # defaults to `setattr(record, name, value)`.
    required: bool = True           # header must carry this column.

    def resolve_setter(self) -> Setter:
        return self.setter if self.setter is not None else attribute_setter(self.name)


@dataclass(frozen=True, slots=True)
class RecordDescriptor:
    """
    Static description of a target record type.

    `factory` builds an empty record, `fields` lists what can be set on it.
    """
    factory: Factory
    fields: Sequence[FieldSpec] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class FieldBinding:
    """One column position bound to a record field."""
    index: int
    name: str
    setter: Setter
    field_type: Any


BindingTable = Mapping[int, FieldBinding]


## -- header -> bindings

def parse_header(header_line: str) -> dict[str, int]:
    """
    Map every header column name to its 0-based position.

    Only the first token may carry a BOM artifact, which is removed.
    Duplicate names: the last position wins.
    """
    positions: dict[str, int] = {}
    for i, name in enumerate(header_line.split(DELIMITER)):
        if i == 0 and name.startswith(UTF_8_BOM):
            name = name[len(UTF_8_BOM):]
        positions[name] = i
    return positions


def build_bindings(header_line: str, descriptor: RecordDescriptor) -> BindingTable:
    """
    Build the read-only column position -> `FieldBinding` table for a file.

    - Columns with no matching field stay unbound and are ignored later.
    - A required field with no matching column raises `SchemaError`.
    - Field types are not checked here, unsupported ones fail per line on assignment.
    """
    positions = parse_header(header_line)

    table: dict[int, FieldBinding] = {}
    for f in descriptor.fields:
        index = positions.get(f.name)
        if index is None:
            if f.required:
                raise SchemaError(f"{f.name}: no matching header column in {sorted(positions)}")
            continue
        table[index] = FieldBinding(index=index, name=f.name, setter=f.resolve_setter(), field_type=f.field_type)

    logger.debug("bound %d of %d header columns", len(table), len(positions))
    return MappingProxyType(table)


## -- tokens -> record

def assemble_record(tokens: Sequence[str], bindings: BindingTable, factory: Factory) -> Any:
    """
    Build one record from a line's tokens.

    Tokens are applied in ascending column order, the first failure aborts
    and the partially filled record is dropped.
    """
    try:
        record = factory()
    except Exception as e:
        raise SetterInvocationError(f"record construction failed: {type(e).__name__}: {e}") from e

    for i, token in enumerate(tokens):
        binding = bindings.get(i)
        if binding is None:
            continue

        value = convert_value(token, binding.field_type, field=binding.name)
        try:
            binding.setter(record, value)
        except ProcessingError:
            raise
        except Exception as e:
            raise SetterInvocationError(f"{binding.name}: {type(e).__name__}: {e}") from e
    return record


@dataclass(frozen=True, slots=True)
class RecordAssembler:
    """
    Turns a raw data line into a record, or raises a `ProcessingError`
    tagged with the line it came from.
    """
    bindings: BindingTable
    factory: Factory

    def assemble_line(self, line: str) -> Any:
        try:
            return assemble_record(split_line(line), self.bindings, self.factory)
        except ProcessingError as e:
            e.line = line
            raise
