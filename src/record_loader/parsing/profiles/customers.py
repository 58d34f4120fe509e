from __future__ import annotations

from dataclasses import dataclass

from record_loader.parsing.schema import FieldSpec, RecordDescriptor
from record_loader.parsing.types import FieldType


@dataclass
class Customer:
    """
    A customer row. `email` and `country` are optional columns:
    files without them still bind, the fields just stay `None`.
    """
    customer_id: int | None = None
    full_name: str | None = None
    email: str | None = None
    country: str | None = None
    age: int | None = None


def _set_country(customer: Customer, value: str) -> None:
    # country codes are stored upper cased
    customer.country = value.upper()


CUSTOMER_DESCRIPTOR = RecordDescriptor(
    factory=Customer,
    fields=(
        FieldSpec("customer_id", FieldType.int64),
        FieldSpec("full_name", FieldType.text),
        FieldSpec("email", FieldType.text, required=False),
        FieldSpec("country", FieldType.text, setter=_set_country, required=False),
        FieldSpec("age", FieldType.int32, required=False),
    ),
)
