"""
Hashing primitives for Clearhouse.

Items are content-addressed: the identifier of a listing is the
SHA-256 digest of its content, rendered as upper-case hex. Two
suppliers listing identical content produce the same identifier.
"""

import hashlib

from clearhouse.utils.validation import validate_item_id


# =============================================================================
# Hashing
# =============================================================================


def sha256(data: bytes) -> bytes:
    """Compute SHA-256 hash."""
    return hashlib.sha256(data).digest()


def item_id(content: str) -> str:
    """
    Derive the identifier of an item from its content.

    Args:
        content: Item content as listed by a supplier

    Returns:
        64 upper-case hex characters
    """
    return bytes_to_hex(sha256(content.encode("utf-8"))).upper()


def normalize_item_id(value: str) -> str:
    """
    Canonical form of a caller-supplied item identifier.

    Raises:
        ValueError: if the value is not 64 hex characters
    """
    is_valid, error = validate_item_id(value)
    if not is_valid:
        raise ValueError(error)
    return value.upper()


# =============================================================================
# Encoding
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string (no 0x prefix)."""
    return data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string to bytes (handles 0x prefix)."""
    if hex_str.startswith("0x"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)


__all__ = [
    "sha256",
    "item_id",
    "normalize_item_id",
    "bytes_to_hex",
    "hex_to_bytes",
]
