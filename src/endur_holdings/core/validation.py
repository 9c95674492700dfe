"""Starknet address and felt helpers."""

import re
from collections.abc import Mapping
from typing import Any

STARKNET_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{64}$")


def is_valid_starknet_address(address: Any) -> bool:
    """
    Check whether a value is a full-length Starknet address.

    Parameters
    ----------
    address : Any
        Candidate address

    Returns
    -------
    bool
        True for ``0x`` followed by exactly 64 hex characters

    """
    if not address or not isinstance(address, str):
        return False
    return STARKNET_ADDRESS_PATTERN.match(address) is not None


def to_int(value: Any) -> int:
    """
    Convert a decoded felt / u256 value to ``int``.

    Accepts ints, decimal strings and ``0x``-prefixed hex strings.

    Raises
    ------
    ValueError
        If the value cannot be interpreted as an integer

    """
    if isinstance(value, bool):
        msg = f"Cannot convert boolean {value!r} to an amount"
        raise ValueError(msg)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("0x"):
            return int(text, 16)
        return int(text)
    # starknet-py style wrappers expose __int__
    return int(value)


def same_address(left: str | None, right: str | None) -> bool:
    """Compare two addresses numerically so zero-padding and case do not matter."""
    if not left or not right:
        return False
    try:
        return int(left, 16) == int(right, 16)
    except ValueError:
        return False


def get_field(value: Any, key: str | int) -> Any:
    """
    Read a member of a decoded contract result.

    Chain readers return structs either as mappings or as attribute objects,
    and tuples as sequences; this hides the difference.

    """
    if isinstance(key, int):
        return value[key]
    if isinstance(value, Mapping):
        return value[key]
    return getattr(value, key)
