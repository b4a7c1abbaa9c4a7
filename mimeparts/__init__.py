"""Building blocks for MIME e-mail: content analysis, header encoding, part
indices, and lexing plus address, parameter and date parsing of headers."""

__version__ = "0.1.0"

__all__ = ["addresses", "charfreq", "codecs", "contentindex", "dates", "lexical", "parameters"]