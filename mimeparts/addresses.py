"""Parsing of RFC 2822 addresses: addr-specs, mailboxes, groups and lists."""

from __future__ import annotations

from dataclasses import dataclass, field

from .lexical import (
    ParseError,
    Scanner,
    eat_cfws,
    eat_whitespace,
    parse_atom,
    parse_comment,
    parse_dot_atom,
    parse_generic_quoted_string,
    parse_phrase,
)

__all__ = [
    "AddrSpec",
    "Mailbox",
    "Address",
    "parse_domain",
    "parse_obs_route",
    "parse_addr_spec",
    "parse_angle_addr",
    "parse_mailbox",
    "parse_group",
    "parse_address",
    "parse_address_list",
]

_DOT = ord(".")
_AT = ord("@")
_COMMA = ord(",")
_COLON = ord(":")
_SEMICOLON = ord(";")
_QUOTE = ord('"')
_LPAREN = ord("(")
_LBRACKET = ord("[")
_RBRACKET = ord("]")
_LANGLE = ord("<")
_RANGLE = ord(">")


@dataclass
class AddrSpec:
    """The ``local-part@domain`` part of an address."""

    local_part: str = ""
    domain: str = ""


@dataclass
class Mailbox:
    """A single mailbox with an optional display name."""

    name: str = ""
    addr_spec: AddrSpec = field(default_factory=AddrSpec)


@dataclass
class Address:
    """Either a single mailbox (empty display name) or a named group."""

    display_name: str = ""
    mailbox_list: list[Mailbox] = field(default_factory=list)


def _expect_more(scanner: Scanner, what: str) -> None:
    if scanner.at_end():
        raise ParseError(f"premature end of {what}")


def parse_domain(scanner: Scanner, is_crlf: bool = False) -> str:
    """Parse a dot-atom or a domain-literal; a trailing '.' is kept."""
    eat_cfws(scanner, is_crlf)
    _expect_more(scanner, "domain")
    data = scanner.data

    if data[scanner.pos] == _LBRACKET:
        scanner.pos += 1
        literal: list[str] = []
        while True:
            literal.append(parse_generic_quoted_string(scanner, is_crlf, "[", "]"))
            last = data[scanner.pos - 1]
            if scanner.at_end():
                if last == _RBRACKET:
                    return "".join(literal)
                raise ParseError("unterminated domain-literal")
            if last == _LBRACKET:
                literal.append("[")
                continue
            return "".join(literal)

    domain = parse_dot_atom(scanner, is_crlf)
    if not scanner.at_end() and data[scanner.pos] == _DOT:
        domain += b"."
        scanner.pos += 1
    return domain.decode("latin-1")


def parse_obs_route(scanner: Scanner, is_crlf: bool = False, save: bool = True) -> list[str]:
    """Parse an obsolete source route such as ``@a,@b:``."""
    data = scanner.data
    route: list[str] = []
    while not scanner.at_end():
        eat_cfws(scanner, is_crlf)
        _expect_more(scanner, "route")
        ch = data[scanner.pos]

        if ch == _COMMA:
            scanner.pos += 1
            if save:
                route.append("")
            continue
        if ch == _COLON:
            scanner.pos += 1
            if save:
                route.append("")
            return route
        if ch != _AT:
            raise ParseError("route entry must begin with '@'")
        scanner.pos += 1

        domain = parse_domain(scanner, is_crlf)
        if save:
            route.append(domain)

        eat_cfws(scanner, is_crlf)
        _expect_more(scanner, "route")
        ch = data[scanner.pos]
        if ch == _COLON:
            scanner.pos += 1
            return route
        if ch == _COMMA:
            scanner.pos += 1

    raise ParseError("premature end of route")


def parse_addr_spec(scanner: Scanner, is_crlf: bool = False) -> AddrSpec:
    """Parse ``local-part@domain``."""
    data = scanner.data
    local: list[str] = []

    while not scanner.at_end():
        eat_cfws(scanner, is_crlf)
        if scanner.at_end():
            break
        ch = data[scanner.pos]
        scanner.pos += 1
        if ch == _DOT:
            local.append(".")
        elif ch == _AT:
            domain = parse_domain(scanner, is_crlf)
            return AddrSpec("".join(local), domain)
        elif ch == _QUOTE:
            local.append(parse_generic_quoted_string(scanner, is_crlf, '"', '"'))
        else:
            scanner.pos -= 1
            local.append(parse_atom(scanner, allow_8bit=False).decode("latin-1"))

    raise ParseError("addr-spec without '@'")


def parse_angle_addr(scanner: Scanner, is_crlf: bool = False) -> AddrSpec:
    """Parse ``<addr-spec>``, ignoring an obsolete source route."""
    data = scanner.data
    eat_cfws(scanner, is_crlf)
    if scanner.at_end() or data[scanner.pos] != _LANGLE:
        raise ParseError("expected '<'")
    scanner.pos += 1

    eat_cfws(scanner, is_crlf)
    _expect_more(scanner, "angle-addr")

    if data[scanner.pos] in (_AT, _COMMA):
        parse_obs_route(scanner, is_crlf, save=False)
        _expect_more(scanner, "angle-addr")

    addr_spec = parse_addr_spec(scanner, is_crlf)

    eat_cfws(scanner, is_crlf)
    if scanner.at_end() or data[scanner.pos] != _RANGLE:
        raise ParseError("expected '>'")
    scanner.pos += 1
    return addr_spec


def _strip_quotes(text: str) -> str:
    if text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def _trailing_comment(scanner: Scanner, is_crlf: bool) -> str | None:
    eat_whitespace(scanner)
    if not scanner.at_end() and scanner.data[scanner.pos] == _LPAREN:
        scanner.pos += 1
        return parse_comment(scanner, is_crlf, True)
    return None


def parse_mailbox(scanner: Scanner, is_crlf: bool = False) -> Mailbox:
    """Parse a mailbox.

    Accepts ``addr-spec``, ``addr-spec (name)``, ``[name] <addr-spec>``
    and ``<addr-spec> (name)``.
    """
    eat_cfws(scanner, is_crlf)
    _expect_more(scanner, "mailbox")

    start = scanner.pos
    try:
        addr_spec = parse_addr_spec(scanner, is_crlf)
    except ParseError:
        scanner.pos = start
    else:
        name = _trailing_comment(scanner, is_crlf) or ""
        return Mailbox(_strip_quotes(name), addr_spec)

    display_name: str | None
    try:
        display_name = parse_phrase(scanner, is_crlf)
    except ParseError:
        display_name = None
        scanner.pos = start
    else:
        eat_cfws(scanner, is_crlf)
        _expect_more(scanner, "mailbox")

    addr_spec = parse_angle_addr(scanner, is_crlf)

    if display_name is None:
        display_name = _trailing_comment(scanner, is_crlf)

    return Mailbox(_strip_quotes(display_name or ""), addr_spec)


def parse_group(scanner: Scanner, is_crlf: bool = False) -> Address:
    """Parse ``display-name: [mailbox-list];``."""
    data = scanner.data
    eat_cfws(scanner, is_crlf)
    _expect_more(scanner, "group")

    display_name = parse_phrase(scanner, is_crlf)

    eat_cfws(scanner, is_crlf)
    if scanner.at_end() or data[scanner.pos] != _COLON:
        raise ParseError("expected ':' after group name")

    group = Address(display_name)
    scanner.pos += 1
    while not scanner.at_end():
        eat_cfws(scanner, is_crlf)
        _expect_more(scanner, "group")
        ch = data[scanner.pos]
        if ch == _COMMA:
            scanner.pos += 1
            continue
        if ch == _SEMICOLON:
            scanner.pos += 1
            return group

        group.mailbox_list.append(parse_mailbox(scanner, is_crlf))

        eat_cfws(scanner, is_crlf)
        _expect_more(scanner, "group")
        ch = data[scanner.pos]
        if ch == _SEMICOLON:
            scanner.pos += 1
            return group
        if ch == _COMMA:
            scanner.pos += 1

    raise ParseError("premature end of group")


def parse_address(scanner: Scanner, is_crlf: bool = False) -> Address:
    """Parse a single mailbox or a group."""
    eat_cfws(scanner, is_crlf)
    _expect_more(scanner, "address")

    start = scanner.pos
    try:
        mailbox = parse_mailbox(scanner, is_crlf)
    except ParseError:
        scanner.pos = start
    else:
        return Address("", [mailbox])

    return parse_group(scanner, is_crlf)


def parse_address_list(scanner: Scanner, is_crlf: bool = False) -> list[Address]:
    """Parse a list of addresses separated by ',' (or ';')."""
    data = scanner.data
    result: list[Address] = []
    while not scanner.at_end():
        eat_cfws(scanner, is_crlf)
        if scanner.at_end():
            return result
        if data[scanner.pos] in (_COMMA, _SEMICOLON):
            scanner.pos += 1
            continue

        result.append(parse_address(scanner, is_crlf))

        eat_cfws(scanner, is_crlf)
        if scanner.at_end():
            return result
        if data[scanner.pos] == _COMMA:
            scanner.pos += 1
    return result