"""Parsing of RFC 2822 date-time values and the related time fields."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .lexical import ParseError, Scanner, eat_cfws, parse_digits, parse_token

__all__ = ["TimeOfDay", "parse_time", "parse_date_time", "parse_qdatetime"]

_COLON = ord(":")
_COMMA = ord(",")
_PLUS = ord("+")
_MINUS = ord("-")
_QUOTE = ord('"')
_DIGITS = frozenset(b"0123456789")

_DAY_NAMES = (b"sun", b"mon", b"tue", b"wed", b"thu", b"fri", b"sat")
_MONTH_NAMES = (
    b"jan", b"feb", b"mar", b"apr", b"may", b"jun",
    b"jul", b"aug", b"sep", b"oct", b"nov", b"dec",
)

# Seconds east of GMT.  The first entry of a name wins, so "MST" is -5h.
_TIME_ZONE_TABLE = (
    # RFC 822 zones
    ("GMT", 0), ("UT", 0),
    ("EDT", -4 * 3600), ("EST", -5 * 3600),
    ("MST", -5 * 3600), ("CST", -6 * 3600),
    ("MDT", -6 * 3600), ("MST", -7 * 3600),
    ("PDT", -7 * 3600), ("PST", -8 * 3600),
    # common, non-RFC 822 zones
    ("CET", 1 * 3600), ("MET", 1 * 3600), ("UTC", 0),
    ("CEST", 2 * 3600), ("BST", 1 * 3600),
    # RFC 822 military zones ("J" is not used)
    ("Z", 0),
    ("A", -1 * 3600), ("B", -2 * 3600), ("C", -3 * 3600),
    ("D", -4 * 3600), ("E", -5 * 3600), ("F", -6 * 3600),
    ("G", -7 * 3600), ("H", -8 * 3600), ("I", -9 * 3600),
    ("K", -10 * 3600), ("L", -11 * 3600), ("M", -12 * 3600),
    ("N", 1 * 3600), ("O", 2 * 3600), ("P", 3 * 3600),
    ("Q", 4 * 3600), ("R", 5 * 3600), ("S", 6 * 3600),
    ("T", 7 * 3600), ("U", 8 * 3600), ("V", 9 * 3600),
    ("W", 10 * 3600), ("X", 11 * 3600), ("Y", 12 * 3600),
)
_TIME_ZONES: dict[bytes, int] = {}
for _name, _offset in _TIME_ZONE_TABLE:
    _TIME_ZONES.setdefault(_name.lower().encode("ascii"), _offset)

_MAX_UTC_OFFSET = 16 * 3600

_QDATETIME = re.compile(rb"(\d\d)/(\d\d)/(\d\d) (\d\d):(\d\d):(\d\d)")
_QDATETIME_LENGTH = 17


@dataclass(frozen=True)
class TimeOfDay:
    """A parsed time with its zone offset in seconds east of UTC."""

    hour: int
    minute: int
    second: int
    utc_offset: int = 0
    tz_known: bool = False


def _is_digit_at(scanner: Scanner) -> bool:
    return not scanner.at_end() and scanner.data[scanner.pos] in _DIGITS


def _require_digits(scanner: Scanner, what: str) -> int:
    value, count = parse_digits(scanner)
    if not count:
        raise ParseError(f"expected digits for {what}")
    return value


def _parse_time_of_day(scanner: Scanner, is_crlf: bool) -> tuple[int, int, int]:
    hour = _require_digits(scanner, "hour")

    eat_cfws(scanner, is_crlf)
    if scanner.at_end() or scanner.data[scanner.pos] != _COLON:
        raise ParseError("expected ':' after hour")
    scanner.pos += 1

    eat_cfws(scanner, is_crlf)
    if scanner.at_end():
        raise ParseError("premature end of time")
    minute = _require_digits(scanner, "minute")

    eat_cfws(scanner, is_crlf)
    if scanner.at_end():
        return hour, minute, 0

    second = 0
    if scanner.data[scanner.pos] == _COLON:
        scanner.pos += 1
        eat_cfws(scanner, is_crlf)
        if scanner.at_end():
            raise ParseError("premature end of time")
        second = _require_digits(scanner, "second")
    return hour, minute, second


def _parse_alphanumeric_zone(scanner: Scanner) -> tuple[int, bool]:
    # The zone may be wrapped in quotes.
    if not scanner.at_end() and scanner.data[scanner.pos] == _QUOTE:
        scanner.pos += 1
        if scanner.at_end():
            raise ParseError("premature end of time zone")

    name = parse_token(scanner)
    offset = _TIME_ZONES.get(name.lower())
    if offset is None:
        # An unknown zone is tolerated and taken as UTC.
        return 0, False
    if not scanner.at_end() and scanner.data[scanner.pos] == _QUOTE:
        scanner.pos += 1
    return offset, True


def _parse_numeric_zone(scanner: Scanner) -> tuple[int, bool]:
    sign = scanner.data[scanner.pos]
    scanner.pos += 1
    value, count = parse_digits(scanner)
    if count != 4:
        # Also accept the "02:00" form.
        if count == 2 and not scanner.at_end() and scanner.data[scanner.pos] == _COLON:
            scanner.pos += 1
            minutes, minute_count = parse_digits(scanner)
            if minute_count != 2:
                raise ParseError("malformed numeric time zone")
            value = value * 100 + minutes
        else:
            raise ParseError("malformed numeric time zone")

    offset = 60 * (value // 100 * 60 + value % 100)
    known = True
    if sign == _MINUS:
        offset = -offset
        if offset == 0:
            # "-0000" means the zone is undetermined.
            known = False
    return offset, known


def parse_time(scanner: Scanner, is_crlf: bool = False) -> TimeOfDay:
    """Parse ``HH:MM[:SS] [zone]``.

    A missing zone, or a digit where the zone would be, gives an
    unknown zone with offset 0.
    """
    eat_cfws(scanner, is_crlf)
    if scanner.at_end():
        raise ParseError("expected a time")

    hour, minute, second = _parse_time_of_day(scanner, is_crlf)

    eat_cfws(scanner, is_crlf)
    if scanner.at_end() or _is_digit_at(scanner):
        return TimeOfDay(hour, minute, second, 0, False)

    if scanner.data[scanner.pos] in (_PLUS, _MINUS):
        offset, known = _parse_numeric_zone(scanner)
    else:
        offset, known = _parse_alphanumeric_zone(scanner)
    return TimeOfDay(hour, minute, second, offset, known)


def _parse_name(scanner: Scanner, names: tuple[bytes, ...]) -> int | None:
    if len(scanner.data) - scanner.pos < 3:
        return None
    candidate = scanner.data[scanner.pos : scanner.pos + 3].lower()
    try:
        found = names.index(candidate)
    except ValueError:
        return None
    scanner.pos += 3
    return found


def _build(year: int, month: int, day: int, time: TimeOfDay) -> datetime:
    if abs(time.utc_offset) > _MAX_UTC_OFFSET:
        raise ParseError("time zone offset out of range")
    try:
        return datetime(
            year, month, day, time.hour, time.minute, time.second,
            tzinfo=timezone(timedelta(seconds=time.utc_offset)),
        )
    except ValueError as exc:
        raise ParseError(f"invalid date or time: {exc}") from None


def parse_date_time(scanner: Scanner, is_crlf: bool = False) -> datetime:
    """Parse an RFC 2822 date-time; asctime() order is accepted too.

    Two-digit years below 50 are taken as 20xx, other years below 1000
    as 19xx; years before 1900 are rejected.  The result is aware.
    """
    data = scanner.data
    eat_cfws(scanner, is_crlf)
    if scanner.at_end():
        raise ParseError("expected a date")

    if _parse_name(scanner, _DAY_NAMES) is not None:
        eat_cfws(scanner, is_crlf)
        if scanner.at_end():
            raise ParseError("premature end of date")
        if data[scanner.pos] == _COMMA:
            scanner.pos += 1
            eat_cfws(scanner, is_crlf)

    month: int | None = None
    asctime_format = False
    if not _is_digit_at(scanner):
        month = _parse_name(scanner, _MONTH_NAMES)
        if month is not None:
            asctime_format = True
            eat_cfws(scanner, is_crlf)

    day = _require_digits(scanner, "day")

    eat_cfws(scanner, is_crlf)
    if scanner.at_end():
        raise ParseError("premature end of date")
    if data[scanner.pos] == _COMMA:
        scanner.pos += 1

    if not asctime_format:
        month = _parse_name(scanner, _MONTH_NAMES)
        if month is None:
            raise ParseError("expected a month name")
    if scanner.at_end():
        raise ParseError("premature end of date")
    assert month is not None
    month += 1

    eat_cfws(scanner, is_crlf)
    if scanner.at_end():
        raise ParseError("premature end of date")

    remaining = len(data) - scanner.pos
    time_after_year = not (
        remaining > 3
        and (data[scanner.pos + 1] == _COLON or data[scanner.pos + 2] == _COLON)
    )

    year = 0
    if time_after_year:
        year = _require_digits(scanner, "year")

    eat_cfws(scanner, is_crlf)
    if scanner.at_end():
        return _build(year, month, day, TimeOfDay(0, 0, 0))

    time = parse_time(scanner, is_crlf)

    if not time_after_year:
        eat_cfws(scanner, is_crlf)
        if scanner.at_end():
            raise ParseError("premature end of date")
        year = _require_digits(scanner, "year")

    if year < 50:
        year += 2000
    elif year < 1000:
        year += 1900
    if year < 1900:
        raise ParseError("year before 1900")

    return _build(year, month, day, time)


def parse_qdatetime(scanner: Scanner, is_crlf: bool = False) -> datetime:
    """Parse ``dd/MM/yy HH:mm:ss`` with years in the 2000s.

    The day is checked against the 1900s first, so 29/02/00 is rejected.
    Only leading CFWS is consumed; the cursor stays before the value.
    The result is naive.
    """
    eat_cfws(scanner, is_crlf)
    if len(scanner.data) - scanner.pos < _QDATETIME_LENGTH:
        raise ParseError("date-time too short")
    text = scanner.data[scanner.pos : scanner.pos + _QDATETIME_LENGTH]
    match = _QDATETIME.fullmatch(text)
    if match is None:
        raise ParseError("malformed date-time")
    day, month, year, hour, minute, second = (int(group) for group in match.groups())
    try:
        first = datetime(1900 + year, month, day, hour, minute, second)
        return first.replace(year=2000 + year)
    except ValueError as exc:
        raise ParseError(f"invalid date or time: {exc}") from None