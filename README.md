# mimeparts

Pure-Python building blocks for reading and writing the headers and bodies of
MIME e-mail. It has no runtime dependencies.

## What is in it

- **Content analysis** (`mimeparts.charfreq`). `CharFreq(data)` counts the
  character classes in a byte string. `type()` then returns a `DataType`:
  `SEVEN_BIT_TEXT`, `SEVEN_BIT_DATA`, `EIGHT_BIT_TEXT`, `EIGHT_BIT_DATA` or
  `BINARY`. Any NUL byte makes the data binary. The data counts as "data"
  rather than "text" in three cases: a line is longer than 988 characters, the
  line endings are mixed, or more than 20 % of the characters are control
  codes. Further methods:
  - `has_trailing_whitespace()` and `has_leading_from()`, which report lines
    ending in blanks and lines starting with `From `;
  - `printable_ratio()` and `control_codes_ratio()`;
  - the shortcut tests `is_seven_bit_text()`, `is_seven_bit_data()`,
    `is_eight_bit_text()` and `is_eight_bit_data()`.
- **Header encoding** (`mimeparts.codecs`).
  - `encode_rfc2047_string(src, charset, address_header=False)` encodes, as a
    single encoded word, the stretch of words from the first word that needs
    encoding to the last such word. ISO-8859 charsets get the `Q` encoding and
    all other charsets `B`. An unknown charset falls back to UTF-8.
  - `encode_rfc2047_sentence(src, charset)` encodes word by word and keeps
    reserved ASCII punctuation literal.
  - `encode_rfc2231_string(src, charset)` returns a `charset''%XX` extended
    value. It returns the value unchanged if that value contains no control or
    8-bit bytes.
- **Part addressing** (`mimeparts.contentindex`). `ContentIndex("2.1.3")` is an
  IMAP-style dotted part number. It provides:
  - `pop()`, which removes the top-most number;
  - `up()`, which removes the bottom-most number;
  - `push(n)` and `is_valid()`;
  - `str()`, equality and hashing.

  An index that cannot be parsed is empty (not valid).
- **Header lexing** (`mimeparts.lexical`). A `Scanner` is a cursor over header
  bytes. The module has parsers for atoms, tokens, quoted strings, nested
  comments, phrases, dot-atoms, digits and RFC 2047 encoded words
  (`parse_encoded_word`, which returns an `EncodedWord`). It also has
  `eat_whitespace` and `eat_cfws`, plus two helpers:
  - `decode_rfc2047_string(data)` returns the text and the last charset named;
  - `extract_header_and_body(content)` splits at the first empty line.
- **Addresses** (`mimeparts.addresses`). The types are `AddrSpec`, `Mailbox`
  and `Address`. The parsers are `parse_domain`, `parse_obs_route`,
  `parse_addr_spec`, `parse_angle_addr`, `parse_mailbox`, `parse_group`,
  `parse_address` and `parse_address_list`. A display name may also be given
  in the old form, as a trailing comment.
- **Parameters** (`mimeparts.parameters`). `parse_parameter_list(scanner)`
  reads `; name=value` pairs and joins RFC 2231 continuations. It decodes
  RFC 2231 and RFC 2047 values. The result is a `ParameterList`: a read-only
  mapping from lower-case names to values, which also keeps the last charset
  seen in `charset`.
- **Dates** (`mimeparts.dates`).
  - `parse_date_time` reads RFC 2822 and asctime-style dates into an aware
    `datetime`.
  - `parse_time` returns a `TimeOfDay` with its UTC offset.
  - `parse_qdatetime` reads `dd/MM/yy HH:mm:ss` into a naive `datetime` in the
    2000s.

When input cannot be parsed, the parsers raise `mimeparts.lexical.ParseError`,
a `ValueError`. On success they leave the scanner after what they consumed.
The one exception is `parse_qdatetime`, which only skips leading whitespace
and comments.

## Installation

```
pip install .
```

## Examples

```python
from mimeparts.charfreq import CharFreq, DataType

freq = CharFreq(b"Hello,\nworld\n")
assert freq.type() is DataType.SEVEN_BIT_TEXT
assert not freq.has_trailing_whitespace()
```

```python
from mimeparts.codecs import encode_rfc2047_string

encode_rfc2047_string("Grüße aus Köln", "iso-8859-1", False)
# b'=?iso-8859-1?Q?Gr=FC=DFe_aus_K=F6ln?='
```

```python
from mimeparts.lexical import Scanner
from mimeparts.addresses import parse_address_list

addresses = parse_address_list(
    Scanner(b'"Jane Doe" <jane@example.com>, bob@example.com', 0), False
)
for address in addresses:
    for mailbox in address.mailbox_list:
        print(mailbox.name, mailbox.addr_spec.local_part, mailbox.addr_spec.domain)
```

```python
from mimeparts.lexical import Scanner
from mimeparts.dates import parse_date_time

when = parse_date_time(Scanner(b"Tue, 1 Jul 2003 10:52:37 +0200", 0), False)
```

```python
from mimeparts.contentindex import ContentIndex

index = ContentIndex("2.1.3")
index.pop()   # 2
str(index)    # "1.3"
```

## What it does not do

The package works on separate pieces of a message. It does not provide:

- a message or MIME part tree;
- header objects, or any parsing of a whole head into such objects;
- multipart, uuencode or yEnc splitting;
- base64 or quoted-printable encoding of bodies;
- assembly of a complete message.

It has no command-line interface.

## Running the tests

```
pip install .[test]
pytest
```