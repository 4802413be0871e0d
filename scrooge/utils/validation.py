"""
Input Validation - field checks for ledger value types and loaded files.

Every validator returns ``(is_valid, error_message)`` so callers decide
whether a failure is an exception (malformed construction) or a plain
rejection.
"""

from typing import Any, Optional, Tuple

# =============================================================================
# Constants
# =============================================================================

HASH_SIZE = 32
MAX_OWNER_SIZE = 2**16 - 1
MAX_SIGNATURE_SIZE = 2**16 - 1

# Amounts are signed 64-bit minor units. Negative values are representable
# so that transactions carrying them can be built and then rejected.
MIN_AMOUNT = -(2**63)
MAX_AMOUNT = 2**63 - 1

MAX_INDEX = 2**32 - 1


# =============================================================================
# Validation Functions
# =============================================================================


def validate_bytes(
    data: Any,
    name: str,
    expected_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate bytes input.

    Args:
        data: Data to validate
        name: Field name for error messages
        expected_length: Exact expected length
        max_length: Maximum allowed length

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(data, (bytes, bytearray)):
        return False, f"{name} must be bytes, got {type(data).__name__}"

    if expected_length is not None and len(data) != expected_length:
        return False, f"{name} must be {expected_length} bytes, got {len(data)}"

    if max_length is not None and len(data) > max_length:
        return False, f"{name} exceeds max length {max_length}, got {len(data)}"

    return True, ""


def validate_hash(hash_value: Any, name: str = "hash") -> Tuple[bool, str]:
    """Validate a 32-byte hash value."""
    return validate_bytes(hash_value, name, expected_length=HASH_SIZE)


def validate_integer(
    value: Any,
    name: str,
    min_val: int,
    max_val: int,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    ``bool`` is rejected even though it subclasses ``int``.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_amount(amount: Any) -> Tuple[bool, str]:
    """Validate a (possibly negative) token amount."""
    return validate_integer(amount, "value", MIN_AMOUNT, MAX_AMOUNT)


def validate_index(index: Any, name: str = "index") -> Tuple[bool, str]:
    """Validate an output index."""
    return validate_integer(index, name, 0, MAX_INDEX)


def validate_hex_string(
    value: Any,
    name: str,
    expected_bytes: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate a hex string (with or without 0x prefix).

    Args:
        value: Value to validate
        name: Field name
        expected_bytes: Expected byte length when decoded

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    hex_str = value[2:] if value.startswith(("0x", "0X")) else value

    if len(hex_str) % 2 != 0:
        return False, f"{name} has odd length, invalid hex"

    try:
        bytes.fromhex(hex_str)
    except ValueError:
        return False, f"{name} contains invalid hex characters"

    if expected_bytes is not None:
        actual_bytes = len(hex_str) // 2
        if actual_bytes != expected_bytes:
            return False, f"{name} must be {expected_bytes} bytes, got {actual_bytes}"

    return True, ""


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_bytes",
    "validate_hash",
    "validate_integer",
    "validate_amount",
    "validate_index",
    "validate_hex_string",
    "HASH_SIZE",
    "MAX_OWNER_SIZE",
    "MAX_SIGNATURE_SIZE",
    "MIN_AMOUNT",
    "MAX_AMOUNT",
    "MAX_INDEX",
]
