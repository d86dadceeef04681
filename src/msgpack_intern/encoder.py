"""
Encoder: MessagePack writer with string interning.

The first occurrence of an eligible string is written as a literal and
recorded in the encode dictionary; later occurrences are written as a
reference to its index. Values that are not strings are written by
msgpack.Packer unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Optional

import msgpack

from msgpack_intern.config import CodecOptions
from msgpack_intern.dictionary import (
    MIN_INTERNED_STRING_LEN,
    EncodeDictionary,
    is_internable,
)
from msgpack_intern.reference import encode_index

logger = logging.getLogger(__name__)


class Encoder:
    """Writes values to a stream, interning repeated strings.

    The dictionary lives as long as the encoder (or until reset()), so
    successive encode calls on one instance share it. Pair each encoder
    with exactly one decoder reading the same stream.

    Attributes:
        options: Codec options shared with the matching decoder.

    Example:
        >>> encoder = Encoder()
        >>> for s in ["abcdef", "xy", "abcdef"]:
        ...     encoder.encode_interned_string(s)
        >>> encoder.getvalue()
        b'\\xa6abcdef\\xa2xy\\xd4\\x80\\x00'
    """

    def __init__(
        self,
        stream: Optional[BinaryIO] = None,
        options: Optional[CodecOptions] = None,
    ) -> None:
        """Initialise Encoder.

        Args:
            stream: Binary stream to write to. If None, output is kept in
                memory and returned by getvalue().
            options: Codec options; defaults to CodecOptions().
        """
        self.options = options if options is not None else CodecOptions()
        self._stream = stream
        self._buffer = bytearray()
        self._packer = msgpack.Packer(use_bin_type=True)
        self._dict = EncodeDictionary()

    @property
    def dict_len(self) -> int:
        """Number of strings interned so far."""
        return len(self._dict)

    def interned_index(self, s: str) -> Optional[int]:
        """Get the dictionary index of s, or None if it is not interned."""
        return self._dict.index_of(s)

    def getvalue(self) -> bytes:
        """Get the bytes written so far in in-memory mode.

        Raises:
            RuntimeError: If the encoder writes to a stream.
        """
        if self._stream is not None:
            raise RuntimeError("Encoder writes to a stream, not a buffer.")
        return bytes(self._buffer)

    def reset(self, stream: Optional[BinaryIO] = None) -> None:
        """Start a new stream with an empty dictionary.

        Args:
            stream: New output stream, or None for in-memory output.
        """
        logger.debug(f"Resetting encoder ({len(self._dict)} interned)")
        self._dict.clear()
        self._buffer.clear()
        self._stream = stream

    def _write(self, data: bytes) -> None:
        if self._stream is None:
            self._buffer.extend(data)
        else:
            self._stream.write(data)

    # ========================================================================
    # Interning entry points
    # ========================================================================

    def encode_interned_string(self, s: str, intern: bool = True) -> None:
        """Write a string field, as a reference where possible.

        Args:
            s: String to write.
            intern: Record s in the dictionary if it is new. Strings
                already in the dictionary are always written as
                references, whatever this flag says.
        """
        if is_internable(s):
            idx = self._dict.index_of(s)
            if idx is not None:
                self._write(encode_index(idx))
                return
            if intern:
                self._dict.add(s)
        # First occurrences are written in full so the decoder sees them
        self._write(self._packer.pack(s))

    def encode_interned_value(self, value: Any, intern: bool = True) -> None:
        """Write a field that may or may not hold a string.

        The decoder reads bin literals on this path as strings, so bytes
        are interned under their decoded text just like str values.

        Args:
            value: None, a string, bytes, or any value the generic
                encoder accepts.
            intern: Record new strings in the dictionary.
        """
        if value is None:
            self.encode_nil()
        elif isinstance(value, str):
            self.encode_interned_string(value, intern)
        elif isinstance(value, (bytes, bytearray)):
            self._encode_interned_bytes(bytes(value), intern)
        else:
            self.encode(value)

    def _encode_interned_bytes(self, data: bytes, intern: bool) -> None:
        """Write a bin literal, keyed by the text the decoder will see.

        Raises:
            UnicodeDecodeError: If data is not valid UTF-8 under
                options.unicode_errors.
        """
        key = data.decode("utf-8", self.options.unicode_errors)
        if len(data) >= MIN_INTERNED_STRING_LEN:
            idx = self._dict.index_of(key)
            if idx is not None:
                self._write(encode_index(idx))
                return
            if intern:
                self._dict.add(key)
        self._write(self._packer.pack(data))

    # ========================================================================
    # Generic value encoding
    # ========================================================================

    def encode_nil(self) -> None:
        self._write(self._packer.pack(None))

    def encode(self, value: Any) -> None:
        """Write any value msgpack can represent.

        Containers are walked here so strings nested in them are interned
        when options.use_interned_strings is set. With the option off,
        strings already in the dictionary are still written as
        references, but new ones are not recorded.

        Args:
            value: Value to write.

        Raises:
            TypeError: If msgpack cannot serialise the value.
        """
        if isinstance(value, str):
            use_interned = self.options.use_interned_strings
            if use_interned or len(self._dict) > 0:
                self.encode_interned_string(value, use_interned)
            else:
                self._write(self._packer.pack(value))
        elif isinstance(value, (list, tuple)):
            self._write(self._packer.pack_array_header(len(value)))
            for item in value:
                self.encode(item)
        elif isinstance(value, dict):
            self._write(self._packer.pack_map_header(len(value)))
            for key, val in value.items():
                self.encode(key)
                self.encode(val)
        else:
            codec = self.options.registry.codec_for_value(value)
            if codec is not None:
                ext = msgpack.ExtType(codec.type_id, codec.encode(self, value))
                self._write(self._packer.pack(ext))
            else:
                self._write(self._packer.pack(value))
