import base64

import pytest

from mimeparts.codecs import (
    encode_rfc2047_sentence,
    encode_rfc2047_string,
    encode_rfc2231_string,
)


def _b_payload(encoded: bytes, prefix: bytes) -> bytes:
    assert encoded.startswith(prefix)
    assert encoded.endswith(b"?=")
    return base64.b64decode(encoded[len(prefix):-2])


def test_ascii_is_unchanged():
    assert encode_rfc2047_string("hello world", "utf-8") == b"hello world"


def test_b_encoding_for_utf8():
    assert encode_rfc2047_string("héllo", "utf-8") == b"=?utf-8?B?aMOpbGxv?="


def test_q_encoding_for_iso8859():
    result = encode_rfc2047_string("Grüße aus", "iso-8859-1")
    assert result == b"=?iso-8859-1?Q?Gr=FC=DFe?= aus"


def test_only_affected_words_are_encoded():
    result = encode_rfc2047_string("hello wörld foo", "utf-8")
    assert result.startswith(b"hello =?utf-8?B?")
    assert result.endswith(b"?= foo")
    middle = result[len(b"hello "):-len(b" foo")]
    assert _b_payload(middle, b"=?utf-8?B?") == "wörld".encode("utf-8")


def test_span_covers_all_non_ascii_words():
    result = encode_rfc2047_string("a ö b ü c", "utf-8")
    assert result.startswith(b"a ")
    assert result.endswith(b" c")
    middle = result[2:-2]
    assert _b_payload(middle, b"=?utf-8?B?") == "ö b ü".encode("utf-8")


def test_q_encoding_turns_spaces_into_underscores():
    result = encode_rfc2047_string("ä ö", "iso-8859-15")
    assert b"_" in result
    assert b" " not in result
    assert result.startswith(b"=?iso-8859-15?Q?")


def test_address_header_reserved_characters():
    assert encode_rfc2047_string("a.b", "utf-8", False) == b"a.b"
    result = encode_rfc2047_string("a.b", "utf-8", True)
    assert _b_payload(result, b"=?utf-8?B?") == b"a.b"


def test_escape_character_is_encoded():
    result = encode_rfc2047_string("x\x1by", "us-ascii")
    assert _b_payload(result, b"=?us-ascii?B?") == b"x\x1by"


def test_unknown_charset_falls_back():
    result = encode_rfc2047_string("ü", "no-such-charset")
    assert _b_payload(result, b"=?UTF-8?B?") == "ü".encode("utf-8")


def test_unencodable_text_falls_back_to_utf8():
    result = encode_rfc2047_string("€", "iso-8859-1")
    assert _b_payload(result, b"=?utf-8?B?") == "€".encode("utf-8")


def test_sentence_splits_on_reserved_characters():
    result = encode_rfc2047_sentence("Müller, Hans", "utf-8")
    assert result == encode_rfc2047_string("Müller", "utf-8") + b", Hans"


def test_sentence_ascii_unchanged():
    assert encode_rfc2047_sentence("a<b>", "utf-8") == b"a<b>"
    assert encode_rfc2047_sentence("", "utf-8") == b""


def test_sentence_trailing_word_encoded():
    result = encode_rfc2047_sentence("x:ö", "utf-8")
    assert result == b"x:" + encode_rfc2047_string("ö", "utf-8")


def test_rfc2231_empty():
    assert encode_rfc2231_string("", "utf-8") == b""


def test_rfc2231_plain_value_unchanged():
    assert encode_rfc2231_string("file.txt", "utf-8") == b"file.txt"


def test_rfc2231_encodes_non_ascii():
    assert encode_rfc2231_string("über.txt", "utf-8") == b"utf-8''%C3%BCber%2Etxt"


def test_rfc2231_us_ascii_replaces_unrepresentable():
    assert encode_rfc2231_string("a€", "us-ascii") == b"a?"


@pytest.mark.parametrize("special", list("()<>@,;:\"/[]?.= %"))
def test_rfc2231_quotes_especials(special):
    result = encode_rfc2231_string("ü" + special, "utf-8")
    assert result.startswith(b"utf-8''")
    assert result.endswith(b"%%%02X" % ord(special))