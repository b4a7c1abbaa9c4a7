"""Encoding of header text as RFC 2047 encoded-words and RFC 2231 values."""

from __future__ import annotations

import base64

__all__ = [
    "encode_rfc2047_string",
    "encode_rfc2047_sentence",
    "encode_rfc2231_string",
]

# Charset used when the requested one is unknown.
_SYSTEM_CODEC = "utf-8"
_SYSTEM_NAME = "UTF-8"

_ESCAPE = 0x1B
_SPACE = 0x20
# The terminating NUL of the reserved set also counts as reserved.
_RESERVED_BYTES = frozenset(b'"()<>@,.;:\\[]=\0')
_RESERVED_CHARS = frozenset('"()<>@,.;:\\[]=\0')
_RFC2231_ESPECIALS = frozenset(b'()<>@,;:"/[]?.= \x1b')


def _is_known_charset(charset: str) -> bool:
    try:
        "".encode(charset)
    except LookupError:
        return False
    return True


def _charset_bytes(charset: str) -> bytes:
    return charset.encode("latin-1", errors="replace")


def _needs_encoding(byte: int, address_header: bool) -> bool:
    return (
        byte >= 0x80
        or byte == _ESCAPE
        or (address_header and byte in _RESERVED_BYTES)
    )


def _word_end(data: bytes, pos: int) -> int:
    space = data.find(b" ", pos)
    return len(data) if space < 0 else space


def _q_encode(chunk: bytes) -> bytes:
    out = bytearray()
    for byte in chunk:
        if byte == _SPACE:
            out += b"_"
        elif bytes((byte,)).isalnum():
            out.append(byte)
        else:
            out += b"=%02X" % byte
    return bytes(out)


def encode_rfc2047_string(src: str, charset: str, address_header: bool = False) -> bytes:
    """Encode the words of ``src`` that need it as RFC 2047 encoded-words.

    ISO-8859 charsets use the "Q" encoding, all others "B".  Unknown charsets
    fall back to UTF-8; text the charset cannot represent is encoded as utf-8.
    """
    if charset and _is_known_charset(charset):
        codec, used_charset = charset, charset
    else:
        codec, used_charset = _SYSTEM_CODEC, _SYSTEM_NAME

    try:
        encoded = src.encode(codec)
    except UnicodeEncodeError:
        used_charset = "utf-8"
        encoded = src.encode("utf-8", errors="replace")

    use_q_encoding = "8859-" in used_charset

    start = 0
    for pos, byte in enumerate(encoded):
        if byte == _SPACE:
            start = pos + 1
        if _needs_encoding(byte, address_header):
            break
    else:
        return encoded

    end = _word_end(encoded, start)
    for pos in range(end, len(encoded)):
        if _needs_encoding(encoded[pos], address_header):
            end = _word_end(encoded, pos)

    chunk = encoded[start:end]
    if use_q_encoding:
        payload = b"?Q?" + _q_encode(chunk)
    else:
        payload = b"?B?" + base64.b64encode(chunk)

    return (
        encoded[:start]
        + b"=?"
        + _charset_bytes(used_charset)
        + payload
        + b"?="
        + encoded[end:]
    )


def encode_rfc2047_sentence(src: str, charset: str) -> bytes:
    """Encode ``src`` word by word, keeping reserved ASCII characters literal."""
    result = bytearray()
    word_start = 0
    for pos, ch in enumerate(src):
        if ord(ch) < 127 and ch in _RESERVED_CHARS:
            if pos > word_start:
                result += encode_rfc2047_string(src[word_start:pos], charset)
            result.append(ord(ch))
            word_start = pos + 1
    if len(src) > word_start:
        result += encode_rfc2047_string(src[word_start:], charset)
    return bytes(result)


def encode_rfc2231_string(src: str, charset: str) -> bytes:
    """Encode ``src`` as an RFC 2231 extended parameter value if needed.

    Values without control or 8-bit characters are returned unchanged.
    """
    if not src:
        return b""

    if charset == "us-ascii":
        raw = src.encode("latin-1", errors="replace")
    elif charset and _is_known_charset(charset):
        raw = src.encode(charset, errors="replace")
    else:
        raw = src.encode(_SYSTEM_CODEC, errors="replace")

    # Only the part before the first NUL is considered.
    text = raw.split(b"\0", 1)[0]
    if not any(byte < 0x20 or byte & 0x80 for byte in text):
        return raw

    result = bytearray(_charset_bytes(charset) + b"''")
    for byte in text:
        if byte & 0x80 or byte == 0x25 or byte in _RFC2231_ESPECIALS:
            result += b"%%%02X" % byte
        else:
            result.append(byte)
    return bytes(result)