from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from record_loader.parsing.schema import (
    FieldSpec,
    RecordAssembler,
    RecordDescriptor,
    assemble_record,
    build_bindings,
    parse_header,
)
from record_loader.parsing.types import (
    ConversionError,
    ErrorCode,
    FieldType,
    SchemaError,
    SetterInvocationError,
    UnsupportedTypeError,
)


@dataclass
class Row:
    id: int | None = None
    name: str | None = None
    balance: int | None = None


DESCRIPTOR = RecordDescriptor(
    factory=Row,
    fields=(
        FieldSpec("id", FieldType.int64),
        FieldSpec("name", FieldType.text),
        FieldSpec("balance", FieldType.int32),
    ),
)


## -- header

def test_parse_header_positions_are_zero_based() -> None:
    assert parse_header("id,name,balance") == {"id": 0, "name": 1, "balance": 2}


def test_parse_header_strips_bom_from_first_token_only() -> None:
    assert parse_header("\ufeffid,name") == {"id": 0, "name": 1}
    # a BOM anywhere else is part of the name
    assert parse_header("id,\ufeffname") == {"id": 0, "\ufeffname": 1}


def test_bindings_with_and_without_bom_match() -> None:
    plain = build_bindings("id,name,balance", DESCRIPTOR)
    bom = build_bindings("\ufeffid,name,balance", DESCRIPTOR)
    assert {i: b.name for i, b in plain.items()} == {i: b.name for i, b in bom.items()}


## -- binding

def test_bindings_follow_column_positions_not_field_order() -> None:
    table = build_bindings("balance,extra,name,id", DESCRIPTOR)
    assert {i: b.name for i, b in table.items()} == {0: "balance", 2: "name", 3: "id"}
    assert table[3].field_type == FieldType.int64


def test_unmatched_columns_are_left_unbound() -> None:
    table = build_bindings("id,name,balance,notes", DESCRIPTOR)
    assert 3 not in table


def test_missing_required_column_is_a_schema_error() -> None:
    with pytest.raises(SchemaError) as e:
        build_bindings("id,name", DESCRIPTOR)
    assert e.value.code == ErrorCode.schema
    assert "balance" in e.value.detail
    assert e.value.line is None


def test_missing_optional_column_is_skipped() -> None:
    descriptor = RecordDescriptor(
        factory=Row,
        fields=(FieldSpec("id", FieldType.int64), FieldSpec("name", FieldType.text, required=False)),
    )
    table = build_bindings("id", descriptor)
    assert list(table) == [0]


def test_unsupported_type_is_not_checked_at_bind_time() -> None:
    descriptor = RecordDescriptor(factory=Row, fields=(FieldSpec("balance", float),))
    table = build_bindings("balance", descriptor)
    assert table[0].field_type is float


def test_binding_table_is_read_only() -> None:
    table = build_bindings("id,name,balance", DESCRIPTOR)
    with pytest.raises(TypeError):
        table[5] = table[0]  # type: ignore[index]


## -- assembling

def test_assemble_sample_account_line() -> None:
    table = build_bindings("id,name,balance", DESCRIPTOR)
    row = RecordAssembler(bindings=table, factory=Row).assemble_line('7,"Alice",1500')
    assert row == Row(id=7, name="Alice", balance=1500)


def test_assemble_skips_unbound_and_missing_trailing_columns() -> None:
    table = build_bindings("id,notes,name,balance", DESCRIPTOR)
    row = assemble_record(["1", "ignored", "Bob"], table, Row)
    assert row == Row(id=1, name="Bob", balance=None)


def test_assemble_applies_columns_in_ascending_order() -> None:
    seen: list[str] = []

    def tracking(name: str):
        def _set(record: Any, value: Any) -> None:
            seen.append(name)
            setattr(record, name, value)
        return _set

    descriptor = RecordDescriptor(
        factory=Row,
        fields=tuple(FieldSpec(n, t, setter=tracking(n)) for n, t in (
            ("id", FieldType.int64), ("name", FieldType.text), ("balance", FieldType.int32),
        )),
    )
    table = build_bindings("balance,id,name", descriptor)
    assemble_record(["5", "1", "Ada"], table, Row)
    assert seen == ["balance", "id", "name"]


def test_first_error_aborts_and_is_tagged_with_line() -> None:
    table = build_bindings("id,name,balance", DESCRIPTOR)
    assembler = RecordAssembler(bindings=table, factory=Row)
    with pytest.raises(ConversionError) as e:
        assembler.assemble_line("x,Ada,y")
    assert "id" in e.value.detail      # column 0 fails first
    assert e.value.line == "x,Ada,y"


def test_unsupported_type_fails_only_when_assigned() -> None:
    descriptor = RecordDescriptor(
        factory=Row,
        fields=(FieldSpec("id", FieldType.int64), FieldSpec("balance", float, required=False)),
    )
    table = build_bindings("id,balance", descriptor)
    assembler = RecordAssembler(bindings=table, factory=Row)

    assert assembler.assemble_line("1") == Row(id=1)
    with pytest.raises(UnsupportedTypeError):
        assembler.assemble_line("1,2.5")


def test_setter_failure_becomes_setter_invocation_error() -> None:
    def _refuse(record: Any, value: Any) -> None:
        raise AttributeError("read-only")

    descriptor = RecordDescriptor(factory=Row, fields=(FieldSpec("name", FieldType.text, setter=_refuse),))
    table = build_bindings("name", descriptor)
    with pytest.raises(SetterInvocationError) as e:
        RecordAssembler(bindings=table, factory=Row).assemble_line("Ada")
    assert isinstance(e.value.__cause__, AttributeError)
    assert e.value.line == "Ada"


def test_factory_failure_becomes_setter_invocation_error() -> None:
    def _broken() -> Row:
        raise RuntimeError("no records today")

    table = build_bindings("id,name,balance", DESCRIPTOR)
    with pytest.raises(SetterInvocationError):
        assemble_record(["1"], table, _broken)


def test_each_line_gets_a_fresh_record() -> None:
    table = build_bindings("id,name,balance", DESCRIPTOR)
    assembler = RecordAssembler(bindings=table, factory=Row)
    a = assembler.assemble_line("1,Ada,10")
    b = assembler.assemble_line("2")
    assert a is not b
    assert b == Row(id=2)
