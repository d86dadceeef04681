"""
msgpack-intern: string interning for MessagePack streams.

Repeated strings within one stream are written once as a literal and
afterwards as a short reference into a per-stream dictionary.
"""

from __future__ import annotations

from typing import Any, Optional

from msgpack_intern.config import CodecOptions
from msgpack_intern.decoder import Decoder
from msgpack_intern.dictionary import (
    MAX_DICT_LEN,
    MIN_INTERNED_STRING_LEN,
    DecodeDictionary,
    EncodeDictionary,
)
from msgpack_intern.encoder import Encoder
from msgpack_intern.errors import (
    CodecError,
    DecoderStateError,
    ExtensionTypeMismatch,
    ExtraData,
    IndexOutOfRange,
    IndexOverflow,
    InvalidStringCode,
    MalformedIndexWidth,
    ReservedExtensionType,
    TruncatedInput,
    UnexpectedCode,
)
from msgpack_intern.reference import (
    INTERNED_STRING_EXT_ID,
    decode_index,
    encode_index,
)
from msgpack_intern.registry import (
    ExtensionCodec,
    ExtensionRegistry,
    default_registry,
    register_interned_strings,
)
from msgpack_intern.source import ByteSource

__version__ = "0.1.0"
__author__ = "msgpack-intern contributors"

# Package metadata
__title__ = "msgpack-intern"
__description__ = "String interning for MessagePack streams"

__license__ = "MIT"

# Version tuple for programmatic access (major, minor, patch)
VERSION = (0, 1, 0)


def packb(value: Any, options: Optional[CodecOptions] = None) -> bytes:
    """Encode a single value with a fresh Encoder.

    Args:
        value: Value to encode.
        options: Codec options; pass use_interned_strings=True to intern
            strings nested in the value.

    Returns:
        Encoded bytes.
    """
    encoder = Encoder(options=options)
    encoder.encode(value)
    return encoder.getvalue()


def unpackb(data: bytes, options: Optional[CodecOptions] = None) -> Any:
    """Decode exactly one value with a fresh Decoder.

    Args:
        data: Encoded bytes.
        options: Codec options matching those used to encode.

    Returns:
        Decoded value.

    Raises:
        ExtraData: If bytes remain after the value.
    """
    decoder = Decoder(data, options=options)
    value = decoder.decode()
    remaining = len(data) - decoder.position
    if remaining:
        raise ExtraData(value, remaining)
    return value


__all__ = [
    "__version__",
    "__author__",
    "VERSION",
    # Codec
    "Encoder",
    "Decoder",
    "CodecOptions",
    "packb",
    "unpackb",
    # Building blocks
    "ByteSource",
    "EncodeDictionary",
    "DecodeDictionary",
    "encode_index",
    "decode_index",
    "INTERNED_STRING_EXT_ID",
    "MIN_INTERNED_STRING_LEN",
    "MAX_DICT_LEN",
    # Extensions
    "ExtensionCodec",
    "ExtensionRegistry",
    "default_registry",
    "register_interned_strings",
    # Errors
    "CodecError",
    "MalformedIndexWidth",
    "IndexOutOfRange",
    "ExtensionTypeMismatch",
    "IndexOverflow",
    "UnexpectedCode",
    "InvalidStringCode",
    "TruncatedInput",
    "ExtraData",
    "ReservedExtensionType",
    "DecoderStateError",
]
