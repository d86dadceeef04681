"""
Per-stream string dictionaries for the write and read sides.

Both sides assign indices purely from the order in which eligible
literals pass through them, so after the same stream prefix the two
dictionaries hold the same strings at the same indices. Nothing checks
this at runtime: the wire format depends on both sides applying the
same rules.
"""

from __future__ import annotations

import logging
from typing import Optional

from msgpack_intern.errors import IndexOutOfRange

logger = logging.getLogger(__name__)

# A reference costs at least 3 bytes, so shorter strings never pay off
MIN_INTERNED_STRING_LEN = 3

MAX_DICT_LEN = 0xFFFF


def is_internable(s: str) -> bool:
    """Check if a string is long enough to be interned.

    Length is measured in UTF-8 bytes, which is what the decoder sees on
    the wire.
    """
    if len(s) >= MIN_INTERNED_STRING_LEN:
        return True
    return len(s.encode("utf-8", "surrogatepass")) >= MIN_INTERNED_STRING_LEN


class EncodeDictionary:
    """Write-side mapping from string to the index it first occupied.

    Example:
        >>> d = EncodeDictionary()
        >>> d.add("abcdef")
        0
        >>> d.index_of("abcdef")
        0
    """

    def __init__(self) -> None:
        self._index: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, s: object) -> bool:
        return s in self._index

    @property
    def is_full(self) -> bool:
        """Check if the dictionary has reached capacity."""
        return len(self._index) >= MAX_DICT_LEN

    def index_of(self, s: str) -> Optional[int]:
        """Get the index of an interned string, or None."""
        return self._index.get(s)

    def add(self, s: str) -> Optional[int]:
        """Intern a new string.

        Args:
            s: String not yet present in the dictionary.

        Returns:
            The assigned index, or None if the dictionary is full.
        """
        if s in self._index:
            return self._index[s]
        if self.is_full:
            return None
        idx = len(self._index)
        self._index[s] = idx
        if idx == MAX_DICT_LEN - 1:
            logger.debug(
                f"Encode dictionary reached capacity ({MAX_DICT_LEN})"
            )
        return idx

    def clear(self) -> None:
        self._index.clear()


class DecodeDictionary:
    """Read-side append-only list of interned strings.

    The Nth eligible literal appended occupies position N, mirroring the
    index the encoder assigned to it.
    """

    def __init__(self) -> None:
        self._strings: list[str] = []

    def __len__(self) -> int:
        return len(self._strings)

    @property
    def is_full(self) -> bool:
        """Check if the dictionary has reached capacity."""
        return len(self._strings) >= MAX_DICT_LEN

    @property
    def strings(self) -> tuple[str, ...]:
        """Snapshot of the interned strings in index order."""
        return tuple(self._strings)

    def append(self, s: str) -> Optional[int]:
        """Record a decoded literal.

        Returns:
            The index assigned, or None if the dictionary is full.
        """
        if self.is_full:
            return None
        self._strings.append(s)
        idx = len(self._strings) - 1
        if idx == MAX_DICT_LEN - 1:
            logger.debug(
                f"Decode dictionary reached capacity ({MAX_DICT_LEN})"
            )
        return idx

    def lookup(self, idx: int) -> str:
        """Get the string stored at idx.

        Raises:
            IndexOutOfRange: If idx is not a valid position.
        """
        if idx < 0 or idx >= len(self._strings):
            raise IndexOutOfRange(idx)
        return self._strings[idx]

    def clear(self) -> None:
        self._strings.clear()
