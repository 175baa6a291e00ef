"""Custom GraphQL scalars.

- BigInt: unsigned 64-bit integers, serialized as decimal strings
- Base64: base64-encoded bytes, serialized as strings
- SuiAddress: ``0x``-prefixed 32-byte hex address, normalized on input
"""

from __future__ import annotations

import base64
import binascii
from datetime import UTC, datetime
from typing import Any, NewType

import strawberry

from ledger_gateway.infra.ledger.addresses import is_valid_address, normalize_address


def _parse_bigint(value: Any) -> str:
    text = str(value)
    if not text.isdigit():
        raise ValueError(f"BigInt must be a non-negative decimal integer, got {value!r}")
    return str(int(text))


def _serialize_base64(value: Any) -> str:
    if isinstance(value, bytes | bytearray):
        return base64.b64encode(value).decode("ascii")
    return str(value)


def _parse_base64(value: Any) -> str:
    try:
        base64.b64decode(str(value), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid Base64 value: {e}") from e
    return str(value)


def _parse_address(value: Any) -> str:
    text = str(value)
    if not text.startswith("0x") or not is_valid_address(text):
        raise ValueError(f"Invalid address {value!r}: expected 0x followed by up to 64 hex digits")
    return normalize_address(text)


BigInt = strawberry.scalar(
    NewType("BigInt", str),
    name="BigInt",
    description="Unsigned 64-bit integer (serialized as a decimal string)",
    serialize=str,
    parse_value=_parse_bigint,
)

Base64 = strawberry.scalar(
    NewType("Base64", str),
    name="Base64",
    description="Base64-encoded bytes",
    serialize=_serialize_base64,
    parse_value=_parse_base64,
)

SuiAddress = strawberry.scalar(
    NewType("SuiAddress", str),
    name="SuiAddress",
    description="32-byte address as 0x followed by 64 hex digits",
    serialize=str,
    parse_value=_parse_address,
)


def ms_to_datetime(value: str | int | None) -> datetime | None:
    """Convert an upstream millisecond timestamp to an aware UTC datetime."""
    if value is None:
        return None
    return datetime.fromtimestamp(int(value) / 1000, tz=UTC)


__all__ = ["Base64", "BigInt", "SuiAddress", "ms_to_datetime"]
