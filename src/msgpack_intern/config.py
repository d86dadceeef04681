"""Codec configuration shared by encoders and decoders.

This module provides the Pydantic model validating codec options, so an
encoder and decoder pair can be built from the same settings.
"""

from __future__ import annotations

import codecs

from pydantic import BaseModel, Field, field_validator

from msgpack_intern.registry import ExtensionRegistry, default_registry
from msgpack_intern.source import DEFAULT_READ_SIZE


class CodecOptions(BaseModel):
    """Options for Encoder and Decoder.

    Attributes:
        use_interned_strings: Intern every string written or read by the
            generic value codec, not just values sent through the
            interned entry points.
        unicode_errors: Error handler for decoding string literals.
        read_size: Chunk size for reads from a stream.
        registry: Extension registry, with interned strings registered.

    Example:
        >>> options = CodecOptions(use_interned_strings=True)
        >>> encoder = Encoder(options=options)
    """

    use_interned_strings: bool = Field(
        default=False,
        description="Intern all strings handled by the generic codec",
    )
    unicode_errors: str = Field(
        default="strict",
        description="Error handler for decoding string literals",
    )
    read_size: int = Field(
        default=DEFAULT_READ_SIZE,
        gt=0,
        description="Chunk size for stream reads",
    )
    registry: ExtensionRegistry = Field(
        default_factory=default_registry,
        description="Extension type registry",
    )

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @field_validator("unicode_errors")
    @classmethod
    def validate_unicode_errors(cls, v: str) -> str:
        """Validate that the error handler is known to codecs."""
        try:
            codecs.lookup_error(v)
        except LookupError:
            raise ValueError(f"Unknown unicode error handler: {v}")
        return v
