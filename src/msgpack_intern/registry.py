"""
Extension type registry.

Maps extension type ids to codecs. A registry is built once, passed to
encoders and decoders through CodecOptions, and never consulted through
module-level state, so independently configured codecs can coexist.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Optional

import msgpack

from msgpack_intern.errors import CodecError, ReservedExtensionType
from msgpack_intern.reference import (
    INTERNED_STRING_EXT_ID,
    decode_index,
    index_payload,
)

if TYPE_CHECKING:  # pragma: no cover
    from msgpack_intern.decoder import Decoder
    from msgpack_intern.encoder import Encoder


class ExtensionCodec(ABC):
    """Abstract base class for extension type codecs.

    Codecs handle:
    - Encoding instances of python_type to an extension payload
    - Decoding an extension payload back to a Python value

    Example:
        >>> class PointCodec(ExtensionCodec):
        ...     type_id = 1
        ...     python_type = Point
        ...     def encode(self, encoder, value):
        ...         return struct.pack(">ii", value.x, value.y)
        ...     def decode(self, decoder, data):
        ...         return Point(*struct.unpack(">ii", data))
    """

    type_id: int
    # Python type written with this codec by the generic encoder, if any
    python_type: Optional[type] = None

    @abstractmethod
    def encode(self, encoder: Encoder, value: Any) -> bytes:
        """Encode a value to an extension payload.

        Args:
            encoder: Encoder writing the value.
            value: Instance of python_type.

        Returns:
            Extension payload bytes (without envelope).
        """
        ...

    @abstractmethod
    def decode(self, decoder: Decoder, data: bytes) -> Any:
        """Decode an extension payload.

        Args:
            decoder: Decoder reading the value.
            data: Extension payload bytes (without envelope).

        Returns:
            Decoded value.
        """
        ...


class InternedStringCodec(ExtensionCodec):
    """Resolves references met by the generic decoder.

    python_type is left unset: the generic encoder interns str values
    through its own dispatch, and encode() only builds the payload for
    a string the encoder has already interned.
    """

    type_id = INTERNED_STRING_EXT_ID

    def encode(self, encoder: Encoder, value: Any) -> bytes:
        """Build the reference payload for an interned string.

        Raises:
            CodecError: If value is not in the encoder's dictionary.
        """
        idx = encoder.interned_index(value) if isinstance(value, str) else None
        if idx is None:
            raise CodecError(f"msgpack: {value!r} is not an interned string")
        return index_payload(idx)

    def decode(self, decoder: Decoder, data: bytes) -> Any:
        return decoder.interned_string_at(decode_index(data))


class ExtensionRegistry:
    """Extension type id to codec table.

    Example:
        >>> registry = ExtensionRegistry()
        >>> register_interned_strings(registry)
        >>> registry.register(PointCodec())
    """

    def __init__(self) -> None:
        self._by_id: dict[int, ExtensionCodec] = {}

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def register(self, codec: ExtensionCodec) -> None:
        """Register an application extension codec.

        Args:
            codec: Codec with a type_id in 0-127 (negative ids are
                reserved by MessagePack).

        Raises:
            ReservedExtensionType: If codec uses the reserved type id.
            ValueError: If type_id is out of range or already registered.
        """
        if codec.type_id == INTERNED_STRING_EXT_ID:
            raise ReservedExtensionType(
                f"Extension type {INTERNED_STRING_EXT_ID} is reserved "
                "for interned strings"
            )
        if not 0 <= codec.type_id <= 127:
            raise ValueError(
                f"Extension type id must be in [0, 127], got {codec.type_id}"
            )
        self._add(codec)

    def _add(self, codec: ExtensionCodec) -> None:
        if codec.type_id in self._by_id:
            raise ValueError(
                f"Extension type {codec.type_id} is already registered"
            )
        self._by_id[codec.type_id] = codec

    def codec_for_type_id(self, type_id: int) -> Optional[ExtensionCodec]:
        """Get the codec registered for type_id, or None."""
        return self._by_id.get(type_id)

    def codec_for_value(self, value: Any) -> Optional[ExtensionCodec]:
        """Get the codec whose python_type matches value, or None."""
        for codec in self._by_id.values():
            if codec.python_type is not None and isinstance(
                value, codec.python_type
            ):
                return codec
        return None

    def ext_hook(self, decoder: Decoder) -> Callable[[int, bytes], Any]:
        """Build the ext_hook callable msgpack.Unpacker expects.

        Args:
            decoder: Decoder the decoded extension values belong to.

        Returns:
            Callable mapping (type_id, payload) to a value. Unregistered
            application ids come back as msgpack.ExtType.
        """

        def hook(type_id: int, data: bytes) -> Any:
            codec = self._by_id.get(type_id)
            if codec is None:
                if type_id < 0:
                    raise CodecError(
                        f"msgpack: unknown extension type={type_id}"
                    )
                return msgpack.ExtType(type_id, data)
            return codec.decode(decoder, data)

        return hook


def register_interned_strings(registry: ExtensionRegistry) -> None:
    """Install the reserved-id codec resolving interned string references.

    Args:
        registry: Registry to install the codec in.
    """
    registry._add(InternedStringCodec())


def default_registry() -> ExtensionRegistry:
    """Create a registry with interned strings registered."""
    registry = ExtensionRegistry()
    register_interned_strings(registry)
    return registry
