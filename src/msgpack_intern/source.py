"""
Peekable byte source used by the decoder.

Wraps either an in-memory buffer or a binary stream with a read-ahead
buffer. The decoder needs two things the raw transport cannot promise:
looking at bytes without consuming them (so a value can be handed to
msgpack and only the bytes it used are consumed) and rewinding the code
byte it just read.
"""

from __future__ import annotations

from typing import BinaryIO, Union

from msgpack_intern.errors import TruncatedInput

DEFAULT_READ_SIZE = 16 * 1024

SourceInput = Union[bytes, bytearray, memoryview, BinaryIO]


class ByteSource:
    """Read-ahead buffer with peek, consume and one-byte rewind.

    Attributes:
        read_size: Minimum number of bytes requested from the stream per
            read.

    Example:
        >>> src = ByteSource(b"\\x01\\x02")
        >>> src.read_byte()
        1
        >>> src.unread_byte()
        >>> src.read(2)
        b'\\x01\\x02'
    """

    def __init__(
        self, data: SourceInput, read_size: int = DEFAULT_READ_SIZE
    ) -> None:
        """Initialise ByteSource.

        Args:
            data: Bytes-like object, or a binary stream with a read()
                method.
            read_size: Chunk size for stream reads.
        """
        if read_size <= 0:
            raise ValueError(f"read_size must be positive, got {read_size}")
        self.read_size = read_size
        self._stream: BinaryIO | None
        if isinstance(data, (bytes, bytearray, memoryview)):
            self._buf = bytearray(data)
            self._stream = None
        else:
            self._buf = bytearray()
            self._stream = data
        self._pos = 0
        # Absolute stream offset of self._buf[0]
        self._base = 0
        self._can_unread = False

    @property
    def position(self) -> int:
        """Number of bytes consumed so far."""
        return self._base + self._pos

    def _available(self) -> int:
        return len(self._buf) - self._pos

    def _fill(self, need: int) -> bool:
        """Make at least `need` unconsumed bytes available.

        Args:
            need: Number of unconsumed bytes required.

        Returns:
            True if the bytes are available, False if input ran out.
        """
        if self._available() >= need:
            return True
        if self._stream is None:
            return False

        # Drop consumed bytes, keeping the last one for unread_byte()
        if self._pos > 1:
            drop = self._pos - 1
            del self._buf[:drop]
            self._base += drop
            self._pos -= drop

        while self._available() < need:
            chunk = self._stream.read(
                max(self.read_size, need - self._available())
            )
            if not chunk:
                return False
            self._buf.extend(chunk)
        return True

    def read(self, n: int) -> bytes:
        """Consume exactly n bytes.

        Raises:
            TruncatedInput: If fewer than n bytes remain.
        """
        if not self._fill(n):
            raise TruncatedInput(
                f"msgpack: unexpected end of input reading {n} byte(s) "
                f"at offset {self.position}"
            )
        data = bytes(self._buf[self._pos : self._pos + n])
        self._pos += n
        self._can_unread = n > 0
        return data

    def read_byte(self) -> int:
        """Consume a single byte and return it as an int."""
        if not self._fill(1):
            raise TruncatedInput(
                f"msgpack: unexpected end of input at offset {self.position}"
            )
        b = self._buf[self._pos]
        self._pos += 1
        self._can_unread = True
        return b

    def peek_byte(self) -> int:
        """Return the next byte without consuming it."""
        if not self._fill(1):
            raise TruncatedInput(
                f"msgpack: unexpected end of input at offset {self.position}"
            )
        return self._buf[self._pos]

    def peek(self, offset: int, size: int) -> bytes:
        """Return up to `size` unconsumed bytes starting at `offset`.

        Fewer bytes are returned only when the input is exhausted.
        """
        self._fill(offset + size)
        start = self._pos + offset
        return bytes(self._buf[start : start + size])

    def skip(self, n: int) -> None:
        """Consume n bytes without copying them out."""
        if not self._fill(n):
            raise TruncatedInput(
                f"msgpack: cannot skip {n} byte(s) at offset {self.position}"
            )
        self._pos += n
        self._can_unread = n > 0

    def unread_byte(self) -> None:
        """Rewind exactly one byte.

        Only valid directly after a consuming call, and only once.

        Raises:
            RuntimeError: If there is no byte to rewind.
        """
        if not self._can_unread:
            raise RuntimeError("msgpack: no byte available to unread")
        self._pos -= 1
        self._can_unread = False

    def at_eof(self) -> bool:
        """Check if all input has been consumed."""
        return not self._fill(1)
