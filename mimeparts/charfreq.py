"""Character frequency analysis used to pick a suitable transfer encoding."""

from __future__ import annotations

import enum
import struct

__all__ = ["DataType", "CharFreq"]

_NUL = 0x00
_TAB = 0x09
_LF = 0x0A
_CR = 0x0D
_SPACE = 0x20
_TILDE = 0x7E
_DEL = 0x7F
_UPPER_F = 0x46
_WHITESPACE = (_TAB, _SPACE)

# Lines longer than this cannot be sent as 7bit or 8bit text.
_MAX_TEXT_LINE = 988
_MAX_CONTROL_RATIO = 0.2


def _float32(value: float) -> float:
    """Round ``value`` to single precision, as the ratios are computed in it."""
    return struct.unpack("f", struct.pack("f", value))[0]


def _ratio(part: int, total: int) -> float:
    if not total:
        return 0.0
    return _float32(_float32(part) / _float32(total))


class DataType(enum.Enum):
    """Classification of a chunk of data."""

    EIGHT_BIT_DATA = "8bit-data"
    BINARY = "binary"
    SEVEN_BIT_DATA = "7bit-data"
    EIGHT_BIT_TEXT = "8bit-text"
    SEVEN_BIT_TEXT = "7bit-text"


class CharFreq:
    """Counts character classes in a byte string and classifies it."""

    def __init__(self, data: bytes = b"") -> None:
        data = bytes(data)
        self.nul = 0
        self.ctl = 0
        self.cr = 0
        self.lf = 0
        self.crlf = 0
        self.printable = 0
        self.eight_bit = 0
        self.total = 0
        self.line_min = 0xFFFFFFFF
        self.line_max = 0
        self._trailing_ws = False
        self._leading_from = False
        if data:
            self._count(data)

    def _count(self, data: bytes) -> None:
        line_length = 0
        # Start as if a line had just ended so "From " on the first line is found.
        prev = _LF
        prev_prev = 0

        for pos, ch in enumerate(data):
            line_length += 1
            if ch == _NUL:
                self.nul += 1
            elif ch == _CR:
                self.cr += 1
            elif ch == _LF:
                self.lf += 1
                if prev == _CR:
                    line_length -= 1
                    self.crlf += 1
                if line_length >= self.line_max:
                    self.line_max = line_length - 1
                if line_length <= self.line_min:
                    self.line_min = line_length - 1
                if not self._trailing_ws and (
                    prev in _WHITESPACE or (prev == _CR and prev_prev in _WHITESPACE)
                ):
                    self._trailing_ws = True
                line_length = 0
            elif ch == _UPPER_F:
                if (
                    not self._leading_from
                    and prev == _LF
                    and data.startswith(b"From ", pos)
                ):
                    self._leading_from = True
                self.printable += 1
            elif ch == _TAB or _SPACE <= ch <= _TILDE:
                self.printable += 1
            elif ch == _DEL or ch < _SPACE:
                self.ctl += 1
            else:
                self.eight_bit += 1
            prev_prev, prev = prev, ch

        if line_length >= self.line_max:
            self.line_max = line_length
        if line_length <= self.line_min:
            self.line_min = line_length

        if prev in _WHITESPACE:
            self._trailing_ws = True

        self.total = len(data)

    def _has_bad_line_structure(self) -> bool:
        return (
            (self.lf != self.crlf and self.crlf > 0)
            or self.cr != self.crlf
            or self.control_codes_ratio() > _MAX_CONTROL_RATIO
        )

    def type(self) -> DataType:
        """Return the classification of the analysed data."""
        if self.nul:
            return DataType.BINARY
        if self.eight_bit:
            if self.line_max > _MAX_TEXT_LINE or self._has_bad_line_structure():
                return DataType.EIGHT_BIT_DATA
            return DataType.EIGHT_BIT_TEXT
        if self.line_max > _MAX_TEXT_LINE or self._has_bad_line_structure():
            return DataType.SEVEN_BIT_DATA
        return DataType.SEVEN_BIT_TEXT

    def is_eight_bit_data(self) -> bool:
        return self.type() is DataType.EIGHT_BIT_DATA

    def is_eight_bit_text(self) -> bool:
        return self.type() is DataType.EIGHT_BIT_TEXT

    def is_seven_bit_data(self) -> bool:
        return self.type() is DataType.SEVEN_BIT_DATA

    def is_seven_bit_text(self) -> bool:
        return self.type() is DataType.SEVEN_BIT_TEXT

    def has_trailing_whitespace(self) -> bool:
        """True if some line ends with a space or tab."""
        return self._trailing_ws

    def has_leading_from(self) -> bool:
        """True if some line starts with ``From ``."""
        return self._leading_from

    def printable_ratio(self) -> float:
        """Share of printable characters, 0 for empty data."""
        return _ratio(self.printable, self.total)

    def control_codes_ratio(self) -> float:
        """Share of control characters, 0 for empty data."""
        return _ratio(self.ctl, self.total)