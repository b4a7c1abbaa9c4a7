"""Parsing of MIME header parameter lists, with RFC 2231 and RFC 2047 values."""

from __future__ import annotations

import codecs
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Union

from .lexical import (
    ParseError,
    Scanner,
    decode_rfc2047_string,
    eat_cfws,
    parse_generic_quoted_string,
    parse_token,
)

__all__ = ["ParameterList", "parse_parameter_list"]

_SEMICOLON = ord(";")
_EQUALS = ord("=")
_QUOTE = ord('"')
_PERCENT = ord("%")
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")

# A raw value is a quoted string (str), a token (bytes) or absent (None).
_RawValue = Union[str, bytes, None]


@dataclass(eq=False)
class ParameterList(Mapping):
    """Decoded parameters by lower-case name, plus the last charset seen."""

    values: dict[str, str] = field(default_factory=dict)
    charset: bytes = b""

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ParameterList):
            return self.values == other.values and self.charset == other.charset
        if isinstance(other, Mapping):
            return self.values == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]


class _BrokenValue(Exception):
    """A parameter whose value could not be parsed; the list may go on."""


def _parse_parameter(scanner: Scanner, is_crlf: bool) -> tuple[bytes, _RawValue]:
    data = scanner.data
    eat_cfws(scanner, is_crlf)
    if scanner.at_end():
        raise ParseError("expected a parameter")

    attribute = parse_token(scanner)

    eat_cfws(scanner, is_crlf)
    if scanner.at_end() or data[scanner.pos] != _EQUALS:
        raise ParseError("expected '=' after parameter name")
    scanner.pos += 1

    eat_cfws(scanner, is_crlf)
    if scanner.at_end():
        # "attribute=" with the value omitted.
        if attribute.endswith(b"*"):
            attribute = attribute[:-1]
        return attribute.lower(), None

    start = scanner.pos
    if data[scanner.pos] == _QUOTE:
        scanner.pos += 1
        # Extended parameters cannot have quoted-string values.
        if attribute.endswith(b"*"):
            attribute = attribute[:-1]
        try:
            value: _RawValue = parse_generic_quoted_string(scanner, is_crlf)
        except ParseError:
            scanner.pos = start
            raise _BrokenValue from None
    else:
        try:
            value = parse_token(scanner, relaxed=True)
        except ParseError:
            scanner.pos = start
            raise _BrokenValue from None

    return attribute.lower(), value


def _parse_raw_parameters(scanner: Scanner, is_crlf: bool) -> dict[bytes, _RawValue]:
    data = scanner.data
    raw: dict[bytes, _RawValue] = {}
    while not scanner.at_end():
        eat_cfws(scanner, is_crlf)
        if scanner.at_end():
            return raw
        if data[scanner.pos] == _SEMICOLON:
            scanner.pos += 1
            continue

        try:
            attribute, value = _parse_parameter(scanner, is_crlf)
        except _BrokenValue:
            # Skip the broken value up to the next separator.
            semicolon = data.find(b";", scanner.pos)
            if semicolon < 0:
                scanner.pos = len(data)
                return raw
            scanner.pos = semicolon + 1
            continue
        raw[attribute] = value

        eat_cfws(scanner, is_crlf)
        if scanner.at_end():
            return raw
        if data[scanner.pos] == _SEMICOLON:
            scanner.pos += 1
    return raw


def _lookup_codec(charset: bytes) -> str | None:
    if not charset:
        return None
    name = charset.decode("latin-1")
    try:
        codecs.lookup(name)
    except LookupError:
        return None
    return name


def _percent_decode(text: bytes) -> bytes:
    out = bytearray()
    pos = 0
    while pos < len(text):
        byte = text[pos]
        if (
            byte == _PERCENT
            and pos + 2 < len(text) + 0 + 1
            and pos + 2 <= len(text) - 1
            and text[pos + 1] in _HEX_DIGITS
            and text[pos + 2] in _HEX_DIGITS
        ):
            out.append(int(text[pos + 1 : pos + 3], 16))
            pos += 3
            continue
        out.append(byte)
        pos += 1
    return bytes(out)


class _Rfc2231Decoder:
    """Decodes extended values; keeps the text codec across continuations."""

    def __init__(self) -> None:
        self.codec: str | None = None
        self.charset = b""

    def decode(self, source: bytes, is_continuation: bool) -> str:
        rest = source
        if not is_continuation:
            first = source.find(b"'")
            if first < 0:
                # No charset at all: take the value as latin-1.
                return source.decode("latin-1")
            self.charset = source[:first]
            second = source.find(b"'", first + 1)
            rest = source[first + 1 :] if second < 0 else source[second + 1 :]
            self.codec = _lookup_codec(self.charset)

        if self.codec is None:
            return rest.decode("latin-1")
        return _percent_decode(rest).decode(self.codec, errors="replace")


def _plain(value: _RawValue) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return value or ""


def parse_parameter_list(scanner: Scanner, is_crlf: bool = False) -> ParameterList:
    """Parse ``; name=value`` pairs, joining RFC 2231 continuations.

    Sections are joined in byte order of their names, so lists of more
    than ten sections are put together out of order.
    """
    raw = _parse_raw_parameters(scanner, is_crlf)
    result = ParameterList()
    if not raw:
        return result

    decoder = _Rfc2231Decoder()
    attribute: bytes | None = None
    value = ""

    for key in sorted(raw):
        raw_value = raw[key]
        if attribute is None or not key.startswith(attribute):
            if attribute is not None:
                result.values[attribute.decode("latin-1")] = value
            value = ""
            attribute = key
            encoded_2231 = encoded_2047 = continued = False

            if attribute.endswith(b"*"):
                attribute = attribute[:-1]
                encoded_2231 = True
            if isinstance(raw_value, str) and "=?" in raw_value:
                encoded_2047 = True
                encoded_2231 = False
            if attribute.endswith(b"*0"):
                attribute = attribute[:-2]
                continued = True

            if encoded_2231:
                source = raw_value if isinstance(raw_value, bytes) else b""
                value += decoder.decode(source, is_continuation=False)
                result.charset = decoder.charset
            elif encoded_2047:
                assert isinstance(raw_value, str)
                text, used = decode_rfc2047_string(
                    raw_value.encode("latin-1", errors="replace")
                )
                value += text
                if used:
                    result.charset = used
                    decoder.charset = used
            else:
                value += _plain(raw_value)

            if not continued:
                result.values[attribute.decode("latin-1")] = value
                attribute = None
        elif key.endswith(b"*"):
            source = raw_value if isinstance(raw_value, bytes) else b""
            value += decoder.decode(source, is_continuation=True)
        else:
            value += _plain(raw_value)

    if attribute is not None:
        result.values[attribute.decode("latin-1")] = value
    return result