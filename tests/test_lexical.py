import pytest

from mimeparts.lexical import (
    ParseError,
    Scanner,
    decode_rfc2047_string,
    eat_cfws,
    eat_whitespace,
    extract_header_and_body,
    parse_atom,
    parse_comment,
    parse_digits,
    parse_dot_atom,
    parse_encoded_word,
    parse_generic_quoted_string,
    parse_phrase,
    parse_token,
)


def test_scanner_peek_and_end():
    s = Scanner(b"ab", 1)
    assert s.peek() == ord("b")
    s.pos = 2
    assert s.at_end()
    assert s.peek() is None


def test_parse_atom_stops_at_special():
    s = Scanner(b"foo bar")
    assert parse_atom(s) == b"foo"
    assert s.pos == 3


def test_parse_atom_empty_raises():
    with pytest.raises(ParseError):
        parse_atom(Scanner(b"<x>"))


def test_parse_atom_8bit():
    data = "caf\u00e9".encode("latin-1")
    assert parse_atom(Scanner(data), allow_8bit=True) == data
    assert parse_atom(Scanner(data)) == b"caf"


def test_parse_token_relaxed_slash():
    assert parse_token(Scanner(b"text/plain"), relaxed=True) == b"text/plain"
    assert parse_token(Scanner(b"text/plain")) == b"text"


def test_quoted_string_with_quoted_pair():
    s = Scanner(b'"hello \\"x\\"" rest', 1)
    assert parse_generic_quoted_string(s) == 'hello "x"'
    assert s.data[s.pos:] == b" rest"


def test_quoted_string_unfolds():
    s = Scanner(b'"a\r\n b"', 1)
    assert parse_generic_quoted_string(s) == "a b"


def test_quoted_string_unterminated_keeps_partial():
    with pytest.raises(ParseError) as info:
        parse_generic_quoted_string(Scanner(b'"abc', 1))
    assert info.value.partial == "abc"


def test_quoted_string_with_encoded_words():
    s = Scanner(b'"=?utf-8?Q?x?= =?utf-8?Q?y?="', 1)
    assert parse_generic_quoted_string(s) == "xy"


def test_parse_comment_nested():
    s = Scanner(b"(a (b) c) x", 1)
    assert parse_comment(s) == "a (b) c"
    assert s.data[s.pos:] == b" x"


def test_parse_comment_unterminated_resets():
    s = Scanner(b"(abc", 1)
    with pytest.raises(ParseError):
        parse_comment(s)
    assert s.pos == 1


def test_eat_cfws_skips_comments():
    s = Scanner(b"  (c) \t x")
    eat_cfws(s)
    assert s.peek() == ord("x")


def test_eat_cfws_unbalanced_comment_stays_on_paren():
    s = Scanner(b" (open")
    eat_cfws(s)
    assert s.peek() == ord("(")


def test_eat_whitespace():
    s = Scanner(b" \r\n\tz")
    eat_whitespace(s)
    assert s.peek() == ord("z")


def test_encoded_word_base64():
    s = Scanner(b"=?utf-8?B?SGVsbG8=?= tail", 1)
    word = parse_encoded_word(s)
    assert word.text == "Hello"
    assert word.declared_charset == b"utf-8"
    assert s.data[s.pos:] == b" tail"


def test_encoded_word_q_latin1():
    word = parse_encoded_word(Scanner(b"=?iso-8859-1?Q?caf=E9?=", 1))
    assert word.text == "caf\u00e9"


def test_encoded_word_unknown_charset_and_language():
    word = parse_encoded_word(Scanner(b"=?x-unknown*en?Q?a_b?=", 1))
    assert word.charset == b"x-unknown"
    assert word.language == b"en"
    assert word.text == "a b"


def test_encoded_word_unknown_encoding():
    with pytest.raises(ParseError):
        parse_encoded_word(Scanner(b"=?utf-8?Z?abc?=", 1))


def test_encoded_word_unterminated():
    with pytest.raises(ParseError):
        parse_encoded_word(Scanner(b"=?utf-8?Q?abc", 1))


def test_phrase_with_quoted_string():
    assert parse_phrase(Scanner(b'John "Q." Public')) == "John Q. Public"


def test_phrase_stops_before_angle():
    s = Scanner(b"John Doe <x>")
    assert parse_phrase(s) == "John Doe"
    assert s.data[s.pos:] == b" <x>"


def test_phrase_adjacent_encoded_words_joined():
    result = parse_phrase(Scanner(b"=?utf-8?Q?a?= =?utf-8?Q?b?="))
    assert result == "ab"


def test_phrase_leading_dot_fails():
    with pytest.raises(ParseError):
        parse_phrase(Scanner(b".foo"))


def test_dot_atom():
    s = Scanner(b"a.b.c d")
    assert parse_dot_atom(s) == b"a.b.c"
    s = Scanner(b"a.b.")
    assert parse_dot_atom(s) == b"a.b"
    assert s.pos == 3


def test_parse_digits():
    s = Scanner(b"123x")
    assert parse_digits(s) == (123, 3)
    assert parse_digits(Scanner(b"x")) == (0, 0)


def test_decode_rfc2047_string():
    text, charset = decode_rfc2047_string(b"pre =?utf-8?B?SGVsbG8=?= post")
    assert text == "pre Hello post"
    assert charset == b"utf-8"


def test_decode_rfc2047_string_plain():
    assert decode_rfc2047_string(b"plain text") == ("plain text", b"")


def test_extract_header_and_body():
    content = b"A: 1\nB: 2\n\nbody"
    assert extract_header_and_body(content) == (b"A: 1\nB: 2\n", b"body")


def test_extract_header_and_body_edge_cases():
    assert extract_header_and_body(b"\nbody") == (b"", b"body")
    assert extract_header_and_body(b"A: 1") == (b"A: 1", b"")
    assert extract_header_and_body(b"A: 1\n\n\nbody") == (b"A: 1\n", b"\n\nbody")