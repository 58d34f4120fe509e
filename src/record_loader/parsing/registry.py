from __future__ import annotations

from record_loader.parsing.schema import RecordDescriptor


# profile names accepted by the CLI
PROFILE_NAMES: tuple[str, ...] = ("accounts", "customers")


def get_descriptor(profile: str) -> RecordDescriptor:
    """
    A registry that assigns a profile name its `RecordDescriptor`.
    `FieldSpec` lists live inside the profile modules.
    """
    if profile == "accounts":
        from .profiles.accounts import ACCOUNT_DESCRIPTOR
        return ACCOUNT_DESCRIPTOR

    if profile == "customers":
        from .profiles.customers import CUSTOMER_DESCRIPTOR
        return CUSTOMER_DESCRIPTOR

    raise ValueError(f"Unknown profile: {profile}")
