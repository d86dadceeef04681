"""
Decoder: MessagePack reader resolving interned string references.

Literal strings read through the interning path are appended to the
decode dictionary in the same order the encoder assigned their indices;
references are looked up in it. Codes that cannot start a string are
rewound and handed to msgpack.Unpacker, which consumes exactly the bytes
of that one value.
"""

from __future__ import annotations

import logging
import struct
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import msgpack

from msgpack_intern import codes
from msgpack_intern.config import CodecOptions
from msgpack_intern.dictionary import MIN_INTERNED_STRING_LEN, DecodeDictionary
from msgpack_intern.errors import (
    DecoderStateError,
    ExtensionTypeMismatch,
    InvalidStringCode,
    TruncatedInput,
    UnexpectedCode,
)
from msgpack_intern.reference import INTERNED_STRING_EXT_ID, read_index
from msgpack_intern.source import ByteSource, SourceInput

logger = logging.getLogger(__name__)

# First chunk fed to msgpack when delegating; doubled while it runs short
_DELEGATE_CHUNK = 64

_UINT_FORMATS = {1: ">B", 2: ">H", 4: ">I"}


class Decoder:
    """Reads values from a stream written by an Encoder.

    Any error escaping a decode call leaves the dictionary in an
    unknown state, so the decoder refuses further calls until reset().

    Attributes:
        options: Codec options shared with the matching encoder.

    Example:
        >>> decoder = Decoder(b"\\xa6abcdef\\xa2xy\\xd4\\x80\\x00")
        >>> [decoder.decode_interned_string() for _ in range(3)]
        ['abcdef', 'xy', 'abcdef']
    """

    def __init__(
        self,
        source: SourceInput | ByteSource,
        options: Optional[CodecOptions] = None,
    ) -> None:
        """Initialise Decoder.

        Args:
            source: Bytes-like object, binary stream or ByteSource.
            options: Codec options; defaults to CodecOptions().
        """
        self.options = options if options is not None else CodecOptions()
        self._source = self._wrap(source)
        self._dict = DecodeDictionary()
        self._ext_hook = self.options.registry.ext_hook(self)
        self._failed = False

    def _wrap(self, source: SourceInput | ByteSource) -> ByteSource:
        if isinstance(source, ByteSource):
            return source
        return ByteSource(source, read_size=self.options.read_size)

    @property
    def dict_len(self) -> int:
        """Number of strings interned so far."""
        return len(self._dict)

    @property
    def interned_strings(self) -> tuple[str, ...]:
        """Interned strings in index order."""
        return self._dict.strings

    @property
    def position(self) -> int:
        """Number of bytes consumed from the source."""
        return self._source.position

    def reset(self, source: Optional[SourceInput | ByteSource] = None) -> None:
        """Start a new stream with an empty dictionary.

        Args:
            source: New input, or None to keep reading the current one.
        """
        logger.debug(f"Resetting decoder ({len(self._dict)} interned)")
        self._dict.clear()
        self._failed = False
        if source is not None:
            self._source = self._wrap(source)

    @contextmanager
    def _decode_call(self) -> Iterator[None]:
        """Context manager guarding one public decode call.

        Marks the decoder failed if an exception escapes.
        """
        if self._failed:
            raise DecoderStateError(
                "msgpack: decoder cannot be reused after a failed decode; "
                "call reset() first"
            )
        try:
            yield
        except Exception as e:
            self._failed = True
            logger.debug(f"Decoder marked failed: {e}")
            raise

    def __iter__(self) -> Iterator[Any]:
        """Decode top-level values until the input is exhausted."""
        while not self._source.at_eof():
            yield self.decode()

    # ========================================================================
    # Interning entry points
    # ========================================================================

    def decode_interned_string(self, intern: bool = True) -> str:
        """Read a string field.

        Args:
            intern: Record new literals in the dictionary. Must match
                the flag the encoder used for the same field.

        Returns:
            The string; nil decodes to "".

        Raises:
            InvalidStringCode: If the code cannot start a string.
        """
        with self._decode_call():
            code = self._source.read_byte()
            try:
                return self._decode_interned_string(code, intern)
            except UnexpectedCode:
                raise InvalidStringCode(code) from None

    def decode_interned_value(self, intern: bool = True) -> Any:
        """Read a field that may or may not hold a string.

        Strings, nil and references are handled by the interning path.
        Any other code is rewound and decoded by the generic decoder.

        Args:
            intern: Record new literals in the dictionary.
        """
        with self._decode_call():
            code = self._source.read_byte()
            try:
                return self._decode_interned_string(code, intern)
            except UnexpectedCode:
                self._source.unread_byte()
            return self._decode_value()

    def interned_string_at(self, idx: int) -> str:
        """Get the interned string at idx.

        Raises:
            IndexOutOfRange: If idx is not in the dictionary.
        """
        return self._dict.lookup(idx)

    def _decode_interned_string(self, code: int, intern: bool) -> str:
        """Decode a string whose leading code byte was already read.

        Args:
            code: The code byte.
            intern: Record eligible literals in the dictionary.

        Raises:
            UnexpectedCode: If code is not nil, a literal or a fixext.
                Nothing beyond the code byte has been consumed then.
        """
        if codes.is_fixed_string(code):
            return self._read_literal(code & codes.FIXED_STR_MASK, intern)

        if code == codes.NIL:
            return ""

        if code in codes.FIXEXT_LENGTHS:
            type_id = struct.unpack(">b", self._source.read(1))[0]
            if type_id != INTERNED_STRING_EXT_ID:
                raise ExtensionTypeMismatch(type_id, INTERNED_STRING_EXT_ID)
            idx = read_index(self._source, codes.FIXEXT_LENGTHS[code])
            return self._dict.lookup(idx)

        width = codes.LENGTH_PREFIX_WIDTHS.get(code)
        if width is not None:
            return self._read_literal(self._read_uint(width), intern)

        raise UnexpectedCode(code)

    def _read_literal(self, n: int, intern: bool) -> str:
        if n <= 0:
            return ""
        s = self._source.read(n).decode("utf-8", self.options.unicode_errors)
        if intern and n >= MIN_INTERNED_STRING_LEN:
            self._dict.append(s)
        return s

    def _read_uint(self, width: int) -> int:
        n: int = struct.unpack(
            _UINT_FORMATS[width], self._source.read(width)
        )[0]
        return n

    # ========================================================================
    # Generic value decoding
    # ========================================================================

    def decode(self) -> Any:
        """Read any value.

        Arrays and maps are walked here so strings nested in them are
        interned when options.use_interned_strings is set. References
        anywhere in the value resolve against the dictionary, so strings
        interned through the entry points may appear in any value.
        """
        with self._decode_call():
            return self._decode_value()

    def _decode_value(self) -> Any:
        code = self._source.read_byte()

        if codes.is_fixed_array(code):
            return self._decode_array(code & codes.FIXED_ARRAY_MASK)
        if code == codes.ARRAY16:
            return self._decode_array(self._read_uint(2))
        if code == codes.ARRAY32:
            return self._decode_array(self._read_uint(4))

        if codes.is_fixed_map(code):
            return self._decode_map(code & codes.FIXED_MAP_MASK)
        if code == codes.MAP16:
            return self._decode_map(self._read_uint(2))
        if code == codes.MAP32:
            return self._decode_map(self._read_uint(4))

        # Known strings are referenced even with interning off
        use_interned = self.options.use_interned_strings
        if codes.is_string(code) and (use_interned or len(self._dict) > 0):
            return self._decode_interned_string(code, use_interned)

        self._source.unread_byte()
        return self._delegate()

    def _decode_array(self, n: int) -> list[Any]:
        return [self._decode_value() for _ in range(n)]

    def _decode_map(self, n: int) -> dict[Any, Any]:
        result = {}
        for _ in range(n):
            key = self._decode_value()
            if isinstance(key, list):
                key = tuple(key)
            result[key] = self._decode_value()
        return result

    def _delegate(self) -> Any:
        """Decode one scalar value with msgpack.Unpacker.

        Bytes are fed to the unpacker from the read-ahead buffer without
        consuming them; once a value is complete, exactly the bytes it
        used are consumed.
        """
        unpacker = msgpack.Unpacker(
            raw=False,
            ext_hook=self._ext_hook,
            unicode_errors=self.options.unicode_errors,
            strict_map_key=False,
        )
        fed = 0
        chunk_size = _DELEGATE_CHUNK
        while True:
            chunk = self._source.peek(fed, chunk_size)
            if not chunk:
                raise TruncatedInput(
                    "msgpack: unexpected end of input at offset "
                    f"{self._source.position + fed}"
                )
            unpacker.feed(chunk)
            fed += len(chunk)
            try:
                value = unpacker.unpack()
            except msgpack.OutOfData:
                chunk_size *= 2
                continue
            self._source.skip(unpacker.tell())
            return value
