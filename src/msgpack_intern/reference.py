"""
Reference codec: dictionary indices as fixext envelopes.

A reference is a big-endian unsigned index carried in a fixext1, fixext2
or fixext4 envelope tagged with the reserved extension type id. The
narrowest width that holds the index is always used.
"""

from __future__ import annotations

import struct
from typing import TYPE_CHECKING

from msgpack_intern import codes
from msgpack_intern.errors import IndexOverflow, MalformedIndexWidth

if TYPE_CHECKING:  # pragma: no cover
    from msgpack_intern.source import ByteSource

# Minimum signed 8-bit value, outside the range applications normally use
INTERNED_STRING_EXT_ID = -128

MAX_UINT8 = 0xFF
MAX_UINT16 = 0xFFFF
MAX_UINT32 = 0xFFFFFFFF

# struct formats keyed by payload width
_INDEX_FORMATS = {1: ">B", 2: ">H", 4: ">I"}

_FIXEXT_BY_WIDTH = {1: codes.FIXEXT1, 2: codes.FIXEXT2, 4: codes.FIXEXT4}


def index_width(idx: int) -> int:
    """Width in bytes of the narrowest payload able to hold idx.

    Raises:
        IndexOverflow: If idx is negative or wider than 4 bytes.
    """
    if idx < 0:
        raise IndexOverflow(idx)
    if idx <= MAX_UINT8:
        return 1
    if idx <= MAX_UINT16:
        return 2
    if idx <= MAX_UINT32:
        return 4
    raise IndexOverflow(idx)


def index_payload(idx: int) -> bytes:
    """Encode a dictionary index as a reference payload (no envelope).

    Raises:
        IndexOverflow: If idx does not fit in 4 bytes.
    """
    return struct.pack(_INDEX_FORMATS[index_width(idx)], idx)


def encode_index(idx: int) -> bytes:
    """Encode a dictionary index as a complete reference envelope.

    Args:
        idx: Dictionary index to reference.

    Returns:
        fixext envelope bytes (code, reserved type id, payload).

    Raises:
        IndexOverflow: If idx does not fit in 4 bytes.
    """
    width = index_width(idx)
    # Negative type ids are outside msgpack.ExtType's range
    header = struct.pack(
        ">Bb", _FIXEXT_BY_WIDTH[width], INTERNED_STRING_EXT_ID
    )
    return header + index_payload(idx)


def decode_index(payload: bytes) -> int:
    """Decode a reference payload back into a dictionary index.

    Args:
        payload: 1, 2 or 4 byte big-endian unsigned integer.

    Raises:
        MalformedIndexWidth: If the payload has any other length.
    """
    fmt = _INDEX_FORMATS.get(len(payload))
    if fmt is None:
        raise MalformedIndexWidth(len(payload))
    idx: int = struct.unpack(fmt, payload)[0]
    return idx


def read_index(source: ByteSource, length: int) -> int:
    """Read and decode a reference payload of the given length.

    The width is checked before anything is consumed from the source.
    """
    if length not in _INDEX_FORMATS:
        raise MalformedIndexWidth(length)
    return decode_index(source.read(length))
