"""
MessagePack wire codes used by the interning layer.

Only the codes the dispatch layer has to recognise itself are listed
here; everything else is left to the msgpack library.
"""

from __future__ import annotations

NIL = 0xC0

FIXED_STR_LOW = 0xA0
FIXED_STR_HIGH = 0xBF
FIXED_STR_MASK = 0x1F

STR8 = 0xD9
STR16 = 0xDA
STR32 = 0xDB

BIN8 = 0xC4
BIN16 = 0xC5
BIN32 = 0xC6

FIXEXT1 = 0xD4
FIXEXT2 = 0xD5
FIXEXT4 = 0xD6

FIXED_ARRAY_LOW = 0x90
FIXED_ARRAY_HIGH = 0x9F
FIXED_ARRAY_MASK = 0x0F
ARRAY16 = 0xDC
ARRAY32 = 0xDD

FIXED_MAP_LOW = 0x80
FIXED_MAP_HIGH = 0x8F
FIXED_MAP_MASK = 0x0F
MAP16 = 0xDE
MAP32 = 0xDF

# Payload length carried by each fixext envelope
FIXEXT_LENGTHS = {FIXEXT1: 1, FIXEXT2: 2, FIXEXT4: 4}

# Width in bytes of the length prefix of each string/binary code
LENGTH_PREFIX_WIDTHS = {
    STR8: 1,
    BIN8: 1,
    STR16: 2,
    BIN16: 2,
    STR32: 4,
    BIN32: 4,
}


def is_fixed_string(code: int) -> bool:
    """Check if code is a fixstr (length packed into the code byte)."""
    return FIXED_STR_LOW <= code <= FIXED_STR_HIGH


def is_string(code: int) -> bool:
    """Check if code starts a str value (any width)."""
    return is_fixed_string(code) or code in (STR8, STR16, STR32)


def is_fixed_array(code: int) -> bool:
    """Check if code is a fixarray (up to 15 elements in the code byte)."""
    return FIXED_ARRAY_LOW <= code <= FIXED_ARRAY_HIGH


def is_fixed_map(code: int) -> bool:
    """Check if code is a fixmap (up to 15 pairs in the code byte)."""
    return FIXED_MAP_LOW <= code <= FIXED_MAP_HIGH
