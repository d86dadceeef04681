"""
Error types raised by the interning codec.

All decode/encode failures derive from CodecError, which is a ValueError
so callers treating corrupt data as a value problem keep working.
"""

from __future__ import annotations


class CodecError(ValueError):
    """Base class for interning codec errors."""


class MalformedIndexWidth(CodecError):
    """Reference payload length is not 1, 2 or 4 bytes."""

    def __init__(self, length: int) -> None:
        super().__init__(
            f"msgpack: unsupported intern string index length={length}"
        )
        self.length = length


class IndexOutOfRange(CodecError):
    """Reference points past the end of the decode dictionary."""

    def __init__(self, index: int) -> None:
        super().__init__(
            f"msgpack: intern string with index={index} does not exist"
        )
        self.index = index


class ExtensionTypeMismatch(CodecError):
    """Extension envelope carries a type id other than the reserved one."""

    def __init__(self, type_id: int, expected: int) -> None:
        super().__init__(
            f"msgpack: got ext type={type_id}, wanted {expected}"
        )
        self.type_id = type_id
        self.expected = expected


class IndexOverflow(CodecError):
    """Dictionary index does not fit the widest reference payload."""

    def __init__(self, index: int) -> None:
        super().__init__(
            f"msgpack: intern string index={index} is too large"
        )
        self.index = index


class UnexpectedCode(CodecError):
    """Wire code is neither nil, a literal, nor a reserved reference.

    The possibly-string decode entry point uses this as a routing signal
    to hand the value over to the generic decoder.
    """

    def __init__(self, code: int) -> None:
        super().__init__(f"msgpack: unexpected code=0x{code:02x}")
        self.code = code


class InvalidStringCode(CodecError):
    """A string-only field met a code that cannot produce a string."""

    def __init__(self, code: int) -> None:
        super().__init__(
            f"msgpack: invalid code=0x{code:02x} decoding interned string"
        )
        self.code = code


class TruncatedInput(CodecError, EOFError):
    """Input ended in the middle of a value."""


class ExtraData(CodecError):
    """Bytes remain after the single value that was expected."""

    def __init__(self, value: object, remaining: int) -> None:
        super().__init__(
            f"msgpack: {remaining} unexpected trailing byte(s) after value"
        )
        self.value = value
        self.remaining = remaining


class ReservedExtensionType(CodecError):
    """An application tried to register the reserved extension type id."""


class DecoderStateError(CodecError):
    """Decoder was used again after a failed decode call."""
