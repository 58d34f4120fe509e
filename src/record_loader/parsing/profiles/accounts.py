from __future__ import annotations

from dataclasses import dataclass

from record_loader.parsing.schema import FieldSpec, RecordDescriptor
from record_loader.parsing.types import FieldType


@dataclass
class Account:
    """A bank account row, e.g. `7,"Alice",1500`."""
    id: int | None = None
    name: str | None = None
    balance: int | None = None


def _set_name(account: Account, value: str) -> None:
    account.name = value


ACCOUNT_DESCRIPTOR = RecordDescriptor(
    factory=Account,
    fields=(
        FieldSpec("id", FieldType.int64),
        FieldSpec("name", FieldType.text, setter=_set_name),
        FieldSpec("balance", FieldType.int32),
    ),
)
