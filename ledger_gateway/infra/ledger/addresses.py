"""Address normalization.

The node returns object ids and addresses as ``0x`` followed by 64 lowercase
hex digits, while clients may send the short form (``0x5``). Comparisons
between the two go through ``normalize_address``.
"""

from __future__ import annotations

import re

ADDRESS_LENGTH = 64

_ADDRESS_RE = re.compile(r"(0x)?[0-9a-fA-F]{1,64}")


def is_valid_address(value: str) -> bool:
    return _ADDRESS_RE.fullmatch(value) is not None


def normalize_address(value: str) -> str:
    """Return ``value`` as ``0x`` plus 64 lowercase hex digits.

    Values that are not hex addresses are returned unchanged so they still
    compare equal to themselves.
    """
    if not is_valid_address(value):
        return value
    digits = value[2:] if value[:2].lower() == "0x" else value
    return "0x" + digits.lower().rjust(ADDRESS_LENGTH, "0")


__all__ = ["ADDRESS_LENGTH", "is_valid_address", "normalize_address"]
