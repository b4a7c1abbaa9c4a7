"""Hierarchical part numbers identifying message parts (IMAP style)."""

from __future__ import annotations

from collections.abc import Iterator

__all__ = ["ContentIndex"]

_UINT_MAX = 0xFFFFFFFF


def _parse_part(token: str) -> int | None:
    if not token or not token.isascii() or not token.isdigit():
        return None
    value = int(token)
    return value if value <= _UINT_MAX else None


class ContentIndex:
    """A dotted part index such as ``1.2.3``; empty means invalid."""

    __slots__ = ("_parts",)

    def __init__(self, index: str = "") -> None:
        parts: list[int] = []
        if index:
            for token in index.split("."):
                value = _parse_part(token)
                if value is None:
                    parts = []
                    break
                parts.append(value)
        self._parts = parts

    def is_valid(self) -> bool:
        """True if the index is not empty."""
        return bool(self._parts)

    def __bool__(self) -> bool:
        return self.is_valid()

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> Iterator[int]:
        return iter(self._parts)

    def pop(self) -> int:
        """Remove and return the top-most part number."""
        if not self._parts:
            raise IndexError("pop from an empty content index")
        return self._parts.pop(0)

    def push(self, index: int) -> None:
        """Add ``index`` as the new top-most part number."""
        if not 0 <= index <= _UINT_MAX:
            raise ValueError(f"part number out of range: {index}")
        self._parts.insert(0, index)

    def up(self) -> int:
        """Remove and return the bottom-most part number."""
        if not self._parts:
            raise IndexError("up from an empty content index")
        return self._parts.pop()

    def __str__(self) -> str:
        return ".".join(str(part) for part in self._parts)

    def __repr__(self) -> str:
        return f"ContentIndex({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentIndex):
            return NotImplemented
        return self._parts == other._parts

    def __hash__(self) -> int:
        return hash(str(self))