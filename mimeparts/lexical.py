"""Low-level lexical parsing of RFC 2822 / RFC 2047 header text."""

from __future__ import annotations

import base64
import binascii
import codecs
import enum
import re
from dataclasses import dataclass

__all__ = [
    "ParseError",
    "Scanner",
    "EncodedWord",
    "parse_encoded_word",
    "eat_whitespace",
    "parse_atom",
    "parse_token",
    "parse_generic_quoted_string",
    "parse_comment",
    "parse_phrase",
    "parse_dot_atom",
    "eat_cfws",
    "parse_digits",
    "decode_rfc2047_string",
    "extract_header_and_body",
]

_TAB = 0x09
_LF = 0x0A
_CR = 0x0D
_SPACE = 0x20
_QUOTE = 0x22
_LPAREN = 0x28
_DOT = 0x2E
_SLASH = 0x2F
_EQUALS = 0x3D
_QUESTION = 0x3F
_STAR = 0x2A
_BACKSLASH = 0x5C

_WHITESPACE = frozenset((_SPACE, _LF, _TAB, _CR))
_BLANK = frozenset((_SPACE, _TAB))

_ATEXT = frozenset(
    b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
    b"!#$%&'*+-/=?^_`{|}~"
)
_TSPECIALS = frozenset(b'()<>@,;:\\"/[]?=')
_TTEXT = frozenset(b for b in range(0x21, 0x7F) if b not in _TSPECIALS)

_BASE64_ALPHABET = re.compile(rb"[^A-Za-z0-9+/]")
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")


class ParseError(ValueError):
    """Raised when the input does not match the expected syntax.

    ``partial`` holds the text collected before the failure, where that
    is meaningful (unterminated quoted strings, for instance).
    """

    def __init__(self, message: str, partial: str = "") -> None:
        super().__init__(message)
        self.partial = partial


class Scanner:
    """A cursor over a byte string."""

    __slots__ = ("data", "pos")

    def __init__(self, data: bytes, pos: int = 0) -> None:
        self.data = bytes(data)
        self.pos = pos

    def at_end(self) -> bool:
        """True if no input is left."""
        return self.pos >= len(self.data)

    def peek(self) -> int | None:
        """The byte under the cursor, or None at the end."""
        if self.at_end():
            return None
        return self.data[self.pos]

    def __repr__(self) -> str:
        return f"Scanner({self.data!r}, pos={self.pos})"


@dataclass(frozen=True)
class EncodedWord:
    """The decoded content of an RFC 2047 encoded-word."""

    text: str
    language: bytes
    charset: bytes
    declared_charset: bytes


def _lookup_codec(charset: bytes) -> str | None:
    if not charset:
        return None
    name = charset.decode("latin-1")
    try:
        codecs.lookup(name)
    except LookupError:
        return None
    return name


def _decode_b(text: bytes) -> bytes:
    text = text.split(b"=", 1)[0]
    text = _BASE64_ALPHABET.sub(b"", text)
    if len(text) % 4 == 1:
        text = text[:-1]
    text += b"=" * (-len(text) % 4)
    try:
        return base64.b64decode(text)
    except binascii.Error:
        return b""


def _decode_q(text: bytes) -> bytes:
    out = bytearray()
    pos = 0
    while pos < len(text):
        byte = text[pos]
        if byte == 0x5F:
            out.append(_SPACE)
        elif (
            byte == _EQUALS
            and pos + 2 < len(text) + 0
            and text[pos + 1] in _HEX_DIGITS
            and text[pos + 2] in _HEX_DIGITS
        ):
            out.append(int(text[pos + 1 : pos + 3], 16))
            pos += 2
        else:
            out.append(byte)
        pos += 1
    return bytes(out)


_TRANSFER_DECODERS = {b"b": _decode_b, b"q": _decode_q}


def parse_encoded_word(scanner: Scanner, default_charset: bytes = b"") -> EncodedWord:
    """Parse an encoded-word; the cursor must be just after the initial '='."""
    data = scanner.data
    if scanner.at_end() or data[scanner.pos] != _QUESTION:
        scanner.pos += 1
        raise ParseError("encoded-word must start with '=?'")

    pos = scanner.pos + 1
    charset_start = pos
    language_start = None
    while pos < len(data):
        if data[pos] == _QUESTION:
            break
        if data[pos] == _STAR and language_start is None:
            language_start = pos + 1
        pos += 1
    if pos >= len(data):
        scanner.pos = pos
        raise ParseError("premature end of encoded-word")

    language = data[language_start:pos] if language_start is not None else b""
    charset_end = language_start - 1 if language_start is not None else pos
    declared = data[charset_start:charset_end]

    encoding_start = pos + 1
    encoding_end = data.find(b"?", encoding_start)
    if encoding_end < 0:
        scanner.pos = len(data)
        raise ParseError("premature end of encoded-word")
    encoding = data[encoding_start:encoding_end]

    text_start = encoding_end + 1
    text_end = data.find(b"?=", text_start)
    if text_end < 0:
        scanner.pos = len(data)
        raise ParseError("premature end of encoded-word")
    scanner.pos = text_end + 2

    decoder = _TRANSFER_DECODERS.get(encoding.lower())
    if decoder is None:
        raise ParseError(f"unknown encoding {encoding!r}")

    if not declared:
        codec = _lookup_codec(default_charset) or "latin-1"
        used = default_charset
    else:
        codec = _lookup_codec(declared)
        if codec is not None:
            used = default_charset
        else:
            codec = "latin-1"
            used = declared

    raw = decoder(data[text_start:text_end])
    return EncodedWord(
        text=raw.decode(codec, errors="replace"),
        language=language,
        charset=used,
        declared_charset=declared,
    )


def eat_whitespace(scanner: Scanner) -> None:
    """Skip spaces, tabs, CRs and LFs."""
    while not scanner.at_end() and scanner.data[scanner.pos] in _WHITESPACE:
        scanner.pos += 1


def parse_atom(scanner: Scanner, allow_8bit: bool = False) -> bytes:
    """Parse a run of atext characters."""
    data = scanner.data
    start = scanner.pos
    while scanner.pos < len(data):
        byte = data[scanner.pos]
        if byte in _ATEXT or (allow_8bit and byte >= 0x80):
            scanner.pos += 1
        else:
            break
    if scanner.pos == start:
        raise ParseError("expected an atom")
    return data[start : scanner.pos]


def parse_token(scanner: Scanner, allow_8bit: bool = False, relaxed: bool = False) -> bytes:
    """Parse an RFC 2045 token; ``relaxed`` also accepts '/'."""
    data = scanner.data
    start = scanner.pos
    while scanner.pos < len(data):
        byte = data[scanner.pos]
        if (
            byte in _TTEXT
            or (allow_8bit and byte >= 0x80)
            or (relaxed and byte == _SLASH)
        ):
            scanner.pos += 1
        else:
            break
    if scanner.pos == start:
        raise ParseError("expected a token")
    return data[start : scanner.pos]


def _read(scanner: Scanner, collected: list[str]) -> int:
    if scanner.at_end():
        raise ParseError("premature end of quoted string", "".join(collected))
    byte = scanner.data[scanner.pos]
    scanner.pos += 1
    return byte


def _skip_after_encoded_word(scanner: Scanner) -> None:
    # Some clients put a space between consecutive encoded-words in a
    # quoted string; drop it.
    data = scanner.data
    if scanner.at_end():
        return
    byte = data[scanner.pos]
    scanner.pos += 1
    if byte != _SPACE:
        scanner.pos -= 1
        return
    if scanner.at_end():
        scanner.pos -= 1
        return
    byte = data[scanner.pos]
    scanner.pos += 1
    if byte != _EQUALS:
        scanner.pos -= 2
        return
    if scanner.at_end():
        scanner.pos -= 2
        return
    byte = data[scanner.pos]
    scanner.pos += 1
    if byte == _QUESTION:
        scanner.pos -= 2


def parse_generic_quoted_string(
    scanner: Scanner,
    is_crlf: bool = False,
    open_char: str = '"',
    close_char: str = '"',
) -> str:
    """Parse up to the next unescaped ``open_char`` or ``close_char``.

    The cursor must be just after the opening character.  Folding is
    undone and quoted-pairs are resolved.  Returns the collected text;
    the terminating character is the byte just before the cursor.
    """
    open_byte = ord(open_char)
    close_byte = ord(close_char)
    data = scanner.data
    out: list[str] = []

    while not scanner.at_end():
        ch = data[scanner.pos]
        scanner.pos += 1

        if ch in (close_byte, open_byte):
            return "".join(out)

        if ch == _BACKSLASH:
            out.append(chr(_read(scanner, out)))
        elif ch == _CR:
            ch = _read(scanner, out)
            if ch != _LF:
                out.append("\r")
                scanner.pos -= 1
            else:
                ch = _read(scanner, out)
                if ch in _BLANK:
                    out.append(chr(ch))
                else:
                    out.append("\r\n")
                    scanner.pos -= 1
        elif ch == _LF:
            ch = _read(scanner, out)
            if not is_crlf and ch in _BLANK:
                out.append(chr(ch))
            else:
                out.append("\n")
                scanner.pos -= 1
        elif ch == _EQUALS:
            if scanner.at_end():
                continue
            old = scanner.pos
            if data[scanner.pos] == _QUESTION:
                try:
                    word = parse_encoded_word(scanner)
                except ParseError:
                    scanner.pos = old
                else:
                    out.append(word.text)
                    _skip_after_encoded_word(scanner)
                    continue
            out.append("=")
        else:
            out.append(chr(ch))

    raise ParseError("premature end of quoted string", "".join(out))


def parse_comment(scanner: Scanner, is_crlf: bool = False, really_save: bool = True) -> str:
    """Parse a possibly nested comment; the cursor must be just after '('.

    On an unterminated comment the cursor is left after the last closing
    parenthesis seen, or where it started, and ParseError is raised.
    """
    depth = 1
    after_last_close = None
    start = scanner.pos
    result: list[str] = []
    maybe: list[str] = []

    while depth:
        try:
            part = parse_generic_quoted_string(scanner, is_crlf, "(", ")")
        except ParseError as exc:
            scanner.pos = after_last_close if after_last_close is not None else start
            raise ParseError("unterminated comment", "".join(result)) from exc
        if scanner.data[scanner.pos - 1] == ord(")"):
            if really_save:
                result.extend(maybe)
                result.append(part)
                if depth > 1:
                    result.append(")")
                maybe.clear()
            after_last_close = scanner.pos
            depth -= 1
        else:
            if really_save:
                maybe.append(part)
                maybe.append("(")
            depth += 1

    return "".join(result)


class _Found(enum.Enum):
    NONE = enum.auto()
    PHRASE = enum.auto()
    ATOM = enum.auto()
    ENCODED_WORD = enum.auto()
    QUOTED_STRING = enum.auto()


def parse_phrase(scanner: Scanner, is_crlf: bool = False) -> str:
    """Parse a phrase of atoms, quoted strings and encoded-words."""
    data = scanner.data
    found = _Found.NONE
    result: list[str] = []
    parsed_to = scanner.pos
    last_was_encoded_word = False

    while not scanner.at_end():
        ch = data[scanner.pos]
        scanner.pos += 1

        if ch == _DOT:
            if found is _Found.NONE:
                scanner.pos -= 1
                raise ParseError("phrase cannot start with '.'")
            if not scanner.at_end() and data[scanner.pos] in _BLANK:
                result.append(". ")
            else:
                result.append(".")
            parsed_to = scanner.pos
        elif ch == _QUOTE:
            try:
                text = parse_generic_quoted_string(scanner, is_crlf, '"', '"')
            except ParseError as exc:
                if found is _Found.NONE:
                    raise
                result.append(" ")
                result.append(exc.partial)
                return "".join(result)
            parsed_to = scanner.pos
            if found is _Found.NONE:
                found = _Found.QUOTED_STRING
            else:
                found = _Found.PHRASE
                result.append(" ")
            last_was_encoded_word = False
            result.append(text)
        elif ch == _LPAREN:
            try:
                parse_comment(scanner, is_crlf, False)
            except ParseError:
                if found is _Found.NONE:
                    raise
                scanner.pos = parsed_to
                return "".join(result)
            parsed_to = scanner.pos
            last_was_encoded_word = False
        else:
            word = None
            if ch == _EQUALS:
                old = scanner.pos
                try:
                    word = parse_encoded_word(scanner)
                except ParseError:
                    scanner.pos = old
            if word is not None:
                parsed_to = scanner.pos
                if found is _Found.NONE:
                    found = _Found.ENCODED_WORD
                else:
                    if not last_was_encoded_word:
                        result.append(" ")
                    found = _Found.PHRASE
                last_was_encoded_word = True
                result.append(word.text)
            else:
                scanner.pos -= 1
                try:
                    atom = parse_atom(scanner, allow_8bit=True)
                except ParseError:
                    if found is _Found.NONE:
                        raise
                    scanner.pos = parsed_to
                    return "".join(result)
                parsed_to = scanner.pos
                if found is _Found.NONE:
                    found = _Found.ATOM
                else:
                    found = _Found.PHRASE
                    result.append(" ")
                last_was_encoded_word = False
                result.append(atom.decode("latin-1"))
        eat_whitespace(scanner)

    if found is _Found.NONE:
        raise ParseError("expected a phrase")
    return "".join(result)


def parse_dot_atom(scanner: Scanner, is_crlf: bool = False) -> bytes:
    """Parse atoms separated by single dots."""
    eat_cfws(scanner, is_crlf)
    data = scanner.data
    result = parse_atom(scanner, allow_8bit=False)
    parsed_to = scanner.pos

    while not scanner.at_end():
        if data[scanner.pos] != _DOT:
            return result
        scanner.pos += 1
        if scanner.at_end() or data[scanner.pos] not in _ATEXT:
            scanner.pos = parsed_to
            return result
        result += b"." + parse_atom(scanner, allow_8bit=False)
        parsed_to = scanner.pos

    scanner.pos = parsed_to
    return result


def eat_cfws(scanner: Scanner, is_crlf: bool = False) -> None:
    """Skip whitespace, folding and comments.

    An unbalanced comment leaves the cursor on its opening '('.
    """
    data = scanner.data
    while not scanner.at_end():
        old = scanner.pos
        ch = data[scanner.pos]
        scanner.pos += 1
        if ch in _WHITESPACE:
            continue
        if ch == _LPAREN:
            try:
                parse_comment(scanner, is_crlf, False)
            except ParseError:
                scanner.pos = old
                return
            continue
        scanner.pos = old
        return


def parse_digits(scanner: Scanner) -> tuple[int, int]:
    """Parse decimal digits; return the value and the number of digits."""
    data = scanner.data
    value = 0
    count = 0
    while not scanner.at_end() and 0x30 <= data[scanner.pos] <= 0x39:
        value = value * 10 + data[scanner.pos] - 0x30
        scanner.pos += 1
        count += 1
    return value, count


def _decode_plain(chunk: bytes) -> str:
    try:
        return chunk.decode("utf-8")
    except UnicodeDecodeError:
        return chunk.decode("latin-1")


def decode_rfc2047_string(data: bytes) -> tuple[str, bytes]:
    """Decode all encoded-words in ``data``.

    Whitespace between adjacent encoded-words is dropped.  Returns the
    text and the charset named by the last encoded-word (empty if none).
    """
    data = bytes(data)
    parts: list[str] = []
    charset = b""
    pos = 0
    last_was_encoded_word = False

    while pos < len(data):
        start = data.find(b"=?", pos)
        if start < 0:
            parts.append(_decode_plain(data[pos:]))
            break
        chunk = data[pos:start]
        scanner = Scanner(data, start + 1)
        try:
            word = parse_encoded_word(scanner)
        except ParseError:
            parts.append(_decode_plain(chunk + b"=?"))
            pos = start + 2
            last_was_encoded_word = False
            continue
        if not (last_was_encoded_word and not chunk.strip(b" \t\r\n")):
            parts.append(_decode_plain(chunk))
        parts.append(word.text)
        charset = word.declared_charset
        last_was_encoded_word = True
        pos = scanner.pos

    return "".join(parts), charset


def extract_header_and_body(content: bytes) -> tuple[bytes, bytes]:
    """Split raw content at the first empty line into head and body."""
    content = bytes(content)
    if content.startswith(b"\n"):
        return b"", content[1:]
    pos = content.find(b"\n\n")
    if pos < 0:
        return content, b""
    head = content[: pos + 1]
    body = content[pos + 2 :]
    if body.startswith(b"\n"):
        body = b"\n" + body
    return head, body