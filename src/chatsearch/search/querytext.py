"""Escaping of caller text against the engine's query grammar."""

import re

# Grammar characters not allowed in free text. '*', '"', '-', '+' and
# whitespace stay usable for wildcards, phrases, negation/must and OR.
_TEXT_RESERVED = re.compile(r"([\\!():^\[\]{}~|&?;/])")

# Every grammar character plus whitespace, for literal term values.
_TERM_RESERVED = re.compile(r"([\\+\-!():^\[\]\"{}~*?|&;/\s])")


def sanitize(text: str | None) -> str | None:
    """Escape query-syntax characters in free search text.

    Args:
        text: Raw ``text`` parameter, possibly None.

    Returns:
        Text with every reserved character backslash-escaped, or None.
    """
    if text is None:
        return None
    return _TEXT_RESERVED.sub(r"\\\1", text)


def escape_query_chars(value: str) -> str:
    """Escape a value so the engine reads it as one literal term.

    Args:
        value: Raw term value.

    Returns:
        Value with all grammar characters and whitespace escaped.
    """
    return _TERM_RESERVED.sub(r"\\\1", value)
