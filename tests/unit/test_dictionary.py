"""
Unit tests for the encode and decode dictionaries.

Tests cover:
- Eligibility by UTF-8 length
- Index assignment order
- Capacity cap
- Out-of-range lookups
"""

import pytest

from msgpack_intern.dictionary import (
    MAX_DICT_LEN,
    MIN_INTERNED_STRING_LEN,
    DecodeDictionary,
    EncodeDictionary,
    is_internable,
)
from msgpack_intern.errors import IndexOutOfRange

# ============================================================================
# Eligibility
# ============================================================================


# Test protocol constants
def test_constants() -> None:
    """Verify minimum length and capacity values."""
    assert MIN_INTERNED_STRING_LEN == 3
    assert MAX_DICT_LEN == 65535


# Test that short ASCII strings are not internable
@pytest.mark.parametrize("s", ["", "a", "xy"])
def test_short_strings_not_internable(s: str) -> None:
    """Verify strings under 3 bytes are never interned."""
    assert not is_internable(s)


# Test that 3-character strings are internable
def test_three_char_string_internable() -> None:
    """Verify a 3-character string is eligible."""
    assert is_internable("abc")


# Test that length is measured in UTF-8 bytes
def test_multibyte_string_measured_in_bytes() -> None:
    """Verify 'é' (2 bytes) is not eligible but 'éa' (3 bytes) is."""
    assert not is_internable("é")
    assert is_internable("éa")


# ============================================================================
# EncodeDictionary
# ============================================================================


# Test that indices are assigned in insertion order from 0
def test_encode_dict_assigns_sequential_indices() -> None:
    """Verify first-seen order determines indices."""
    d = EncodeDictionary()
    assert d.add("alpha") == 0
    assert d.add("beta") == 1
    assert d.index_of("alpha") == 0
    assert d.index_of("beta") == 1
    assert len(d) == 2


# Test that adding an existing string does not duplicate it
def test_encode_dict_no_duplicates() -> None:
    """Verify re-adding keeps the original index and size."""
    d = EncodeDictionary()
    d.add("alpha")
    assert d.add("alpha") == 0
    assert len(d) == 1


# Test lookup of unknown strings
def test_encode_dict_unknown_returns_none() -> None:
    """Verify index_of returns None for a string never added."""
    d = EncodeDictionary()
    assert d.index_of("missing") is None
    assert "missing" not in d


# Test the capacity cap
def test_encode_dict_full_rejects_new_strings() -> None:
    """Verify no entry is added once the cap is reached."""
    d = EncodeDictionary()
    for i in range(MAX_DICT_LEN):
        d.add(f"s{i:05d}")
    assert d.is_full
    assert d.add("one-more") is None
    assert "one-more" not in d
    assert len(d) == MAX_DICT_LEN


# Test clear
def test_encode_dict_clear() -> None:
    """Verify clear empties the dictionary and restarts indices."""
    d = EncodeDictionary()
    d.add("alpha")
    d.clear()
    assert len(d) == 0
    assert d.add("beta") == 0


# ============================================================================
# DecodeDictionary
# ============================================================================


# Test append and lookup
def test_decode_dict_append_and_lookup() -> None:
    """Verify position in the list is the index."""
    d = DecodeDictionary()
    assert d.append("alpha") == 0
    assert d.append("beta") == 1
    assert d.lookup(0) == "alpha"
    assert d.lookup(1) == "beta"
    assert d.strings == ("alpha", "beta")


# Test lookup beyond the end
def test_decode_dict_lookup_out_of_range() -> None:
    """Verify IndexOutOfRange for an index equal to the size."""
    d = DecodeDictionary()
    d.append("alpha")
    with pytest.raises(IndexOutOfRange, match="index=1 does not exist"):
        d.lookup(1)


# Test lookup of a negative index
def test_decode_dict_lookup_negative() -> None:
    """Verify negative indices never wrap around."""
    d = DecodeDictionary()
    d.append("alpha")
    with pytest.raises(IndexOutOfRange):
        d.lookup(-1)


# Test the capacity cap
def test_decode_dict_full_rejects_append() -> None:
    """Verify append is a no-op once the cap is reached."""
    d = DecodeDictionary()
    for i in range(MAX_DICT_LEN):
        d.append(f"s{i:05d}")
    assert d.is_full
    assert d.append("one-more") is None
    assert len(d) == MAX_DICT_LEN


# Test that strings snapshot is detached from the dictionary
def test_decode_dict_strings_is_snapshot() -> None:
    """Verify strings returns an immutable copy."""
    d = DecodeDictionary()
    d.append("alpha")
    snapshot = d.strings
    d.append("beta")
    assert snapshot == ("alpha",)
