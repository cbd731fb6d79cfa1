"""
Input Validation - sanity checks for values entering the auction.

Every validator returns ``(is_valid, error_message)``; callers decide
whether to raise. Amounts are non-negative integers in the smallest
currency unit.
"""

import re
from typing import Any, Tuple

# =============================================================================
# Constants
# =============================================================================

MIN_AMOUNT = 0
MAX_AMOUNT = 2**128 - 1
MAX_CONTENT_LENGTH = 4096
MAX_ACCOUNT_LENGTH = 64

ITEM_ID_LENGTH = 64
_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")
# Loosely follows NEAR-style account names: lowercase, digits, separators
_ACCOUNT_RE = re.compile(r"^[a-z0-9]+([._-][a-z0-9]+)*$")


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = MIN_AMOUNT,
    max_val: int = MAX_AMOUNT,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    # bool is an int subclass; True is not an amount
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_amount(amount: Any, name: str = "amount") -> Tuple[bool, str]:
    """Validate a money amount."""
    return validate_integer(amount, name, MIN_AMOUNT, MAX_AMOUNT)


def validate_content(
    content: Any,
    max_length: int = MAX_CONTENT_LENGTH,
) -> Tuple[bool, str]:
    """Validate item content (non-empty string, bounded length)."""
    if not isinstance(content, str):
        return False, f"content must be str, got {type(content).__name__}"

    if not content:
        return False, "content must not be empty"

    if len(content) > max_length:
        return False, f"content exceeds max length {max_length}, got {len(content)}"

    return True, ""


def validate_account(account: Any) -> Tuple[bool, str]:
    """Validate an account identifier."""
    if not isinstance(account, str):
        return False, f"account must be str, got {type(account).__name__}"

    if not 2 <= len(account) <= MAX_ACCOUNT_LENGTH:
        return False, f"account length must be 2..{MAX_ACCOUNT_LENGTH}, got {len(account)}"

    if not _ACCOUNT_RE.match(account):
        return False, f"account has invalid characters: {account!r}"

    return True, ""


def validate_item_id(item_id: Any) -> Tuple[bool, str]:
    """Validate a content-derived item identifier (64 hex chars)."""
    if not isinstance(item_id, str):
        return False, f"item_id must be str, got {type(item_id).__name__}"

    if len(item_id) != ITEM_ID_LENGTH:
        return False, f"item_id must be {ITEM_ID_LENGTH} hex chars, got {len(item_id)}"

    if not _HEX_RE.match(item_id):
        return False, "item_id must be hexadecimal"

    return True, ""


def require(result: Tuple[bool, str]) -> None:
    """Raise ValueError if a validation result failed."""
    is_valid, error = result
    if not is_valid:
        raise ValueError(error)
