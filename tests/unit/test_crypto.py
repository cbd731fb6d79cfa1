"""
Unit tests for content-derived identifiers.
"""

import pytest

from clearhouse.crypto import (
    sha256,
    item_id,
    normalize_item_id,
    bytes_to_hex,
    hex_to_bytes,
)


class TestItemId:
    """Tests for item identifier derivation."""

    def test_known_digest(self):
        """Identifier is the upper-case SHA-256 hex of the content."""
        assert item_id("test phrase") == (
            "03725d0a96e114361230a7978eeefa0d646d7656dce5e44ae4e70a4dea5e674c".upper()
        )

    def test_known_item(self):
        assert item_id("test_item") == (
            "68E5EE009D13B901BBB36D3BB47FC59ACA581D6DB141DA0574287495244A9225"
        )

    def test_deterministic(self):
        assert item_id("lamp") == item_id("lamp")

    def test_distinct_content(self):
        assert item_id("lamp") != item_id("Lamp")

    def test_fixed_width(self):
        assert len(item_id("")) == 64
        assert len(item_id("x" * 10_000)) == 64

    def test_matches_sha256(self):
        assert item_id("abc") == bytes_to_hex(sha256(b"abc")).upper()


class TestNormalize:
    """Tests for caller-supplied identifiers."""

    def test_lowercase_accepted(self):
        key = item_id("lamp")
        assert normalize_item_id(key.lower()) == key

    def test_wrong_length(self):
        with pytest.raises(ValueError, match="64 hex"):
            normalize_item_id("ABCD")

    def test_not_hex(self):
        with pytest.raises(ValueError, match="hexadecimal"):
            normalize_item_id("Z" * 64)

    def test_not_string(self):
        with pytest.raises(ValueError):
            normalize_item_id(1234)


class TestHexHelpers:
    def test_hex_prefix(self):
        assert hex_to_bytes("0x0a0b") == b"\x0a\x0b"
        assert hex_to_bytes("0a0b") == b"\x0a\x0b"
