import pytest

from mimeparts.charfreq import CharFreq, DataType


def test_plain_ascii_text_is_seven_bit_text():
    freq = CharFreq(b"hello world\n")
    assert freq.type() is DataType.SEVEN_BIT_TEXT
    assert freq.is_seven_bit_text()
    assert not freq.is_seven_bit_data()


def test_nul_makes_binary():
    freq = CharFreq(b"abc\0def\xff")
    assert freq.type() is DataType.BINARY
    assert not freq.is_eight_bit_data()
    assert not freq.is_seven_bit_text()


def test_eight_bit_text():
    freq = CharFreq(b"caf\xe9\n")
    assert freq.is_eight_bit_text()
    assert freq.type() is DataType.EIGHT_BIT_TEXT


def test_eight_bit_with_lone_cr_is_data():
    freq = CharFreq(b"caf\xe9\rmore\n")
    assert freq.is_eight_bit_data()


@pytest.mark.parametrize(
    "length, expected",
    [(988, DataType.SEVEN_BIT_TEXT), (989, DataType.SEVEN_BIT_DATA)],
)
def test_line_length_limit(length, expected):
    assert CharFreq(b"a" * length).type() is expected


def test_long_line_before_newline():
    assert CharFreq(b"a" * 989 + b"\nshort\n").is_seven_bit_data()
    assert CharFreq(b"a" * 988 + b"\nshort\n").is_seven_bit_text()


def test_long_eight_bit_line_is_data():
    assert CharFreq(b"\xe9" * 989).is_eight_bit_data()


def test_mixed_line_endings_are_data():
    assert CharFreq(b"a\r\nb\n").is_seven_bit_data()


def test_consistent_crlf_is_text():
    assert CharFreq(b"a\r\nb\r\n").is_seven_bit_text()


def test_lone_cr_is_data():
    assert CharFreq(b"a\rb").is_seven_bit_data()


def test_many_control_codes_are_data():
    assert CharFreq(b"\x01\x01abc").is_seven_bit_data()


def test_control_ratio_compared_in_single_precision():
    # One control code in five characters is just above the limit.
    assert CharFreq(b"\x01abcd").is_seven_bit_data()
    assert CharFreq(b"\x01abcdef").is_seven_bit_text()


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"foo \nbar", True),
        (b"foo\t\r\nbar", True),
        (b"foo\nbar ", True),
        (b"foo\nbar", False),
        (b"", False),
    ],
)
def test_trailing_whitespace(data, expected):
    assert CharFreq(data).has_trailing_whitespace() is expected


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"From me\n", True),
        (b"x\nFrom y", True),
        (b"xFrom y", False),
        (b"\nFrom", False),
        (b"from me", False),
    ],
)
def test_leading_from(data, expected):
    assert CharFreq(data).has_leading_from() is expected


def test_empty_ratios_are_zero():
    freq = CharFreq(b"")
    assert freq.printable_ratio() == 0
    assert freq.control_codes_ratio() == 0
    assert freq.total == 0


def test_printable_ratio():
    freq = CharFreq(b"ab\x01\x02")
    assert freq.printable_ratio() == pytest.approx(0.5)
    assert freq.printable_ratio() + freq.control_codes_ratio() == pytest.approx(1.0)


def test_counts_are_consistent():
    data = b"From x\r\nline\twith tab\n\xe9\x7f"
    freq = CharFreq(data)
    assert freq.total == len(data)
    assert (
        freq.nul + freq.ctl + freq.cr + freq.lf + freq.printable + freq.eight_bit
        == freq.total
    )
    assert freq.crlf <= freq.lf
    assert freq.line_min <= freq.line_max