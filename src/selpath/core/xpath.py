"""Small builders for XPath 1.0 expression fragments."""


def literal(value: str) -> str:
    """Quote ``value`` as an XPath 1.0 string literal.

    XPath 1.0 has no escape sequences, so a value holding both quote kinds is
    spelled as a ``concat()`` of separately quoted pieces.
    """
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    pieces = value.split('"')
    quoted = ", '\"', ".join(f'"{piece}"' for piece in pieces)
    return f'concat({quoted})'


def has_word(attribute: str, word: str) -> str:
    """Whitespace-separated word test against an attribute, e.g. a class name."""
    return f'contains(concat(" ",normalize-space(@{attribute})," "),{literal(f" {word} ")})'


def ends_with(haystack: str, needle: str) -> str:
    """``ends-with`` for XPath 1.0, which only has ``starts-with``."""
    quoted = literal(needle)
    return f'substring({haystack},string-length({haystack})-string-length({quoted})+1)={quoted}'
