"""Glob pattern translation.

Converts the wildcard patterns used in ${var/pattern/replacement} into
Python regular expressions. Supported: * (any run of characters), ? (one
character), [...] bracket classes with ! or ^ negation, ranges and POSIX
named classes, and backslash escapes.

The translated regex is not anchored itself; callers match it at a scan
position with Pattern.match(text, pos), which anchors it there.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

from ..types import ParseLimits
from .errors import GlobError, RegexError

# POSIX character class mappings
POSIX_CLASSES = {
    "[:alpha:]": "a-zA-Z",
    "[:digit:]": "0-9",
    "[:alnum:]": "a-zA-Z0-9",
    "[:upper:]": "A-Z",
    "[:lower:]": "a-z",
    "[:space:]": " \\t\\n\\r\\f\\v",
    "[:blank:]": " \\t",
    "[:punct:]": r"!\"#$%&'()*+,\-./:;<=>?@\[\\\]^_`{|}~",
    "[:graph:]": "!-~",
    "[:print:]": " -~",
    "[:cntrl:]": "\\x00-\\x1f\\x7f",
    "[:xdigit:]": "0-9a-fA-F",
}


def glob_to_regex(pattern: str) -> str:
    """Convert a glob pattern to a regex pattern.

    Raises:
        GlobError: If a bracket expression is unterminated or names an
            unknown POSIX class.
    """
    result: list[str] = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "*":
            # Runs of '*' are equivalent to one
            if not result or result[-1] != ".*":
                result.append(".*")
        elif c == "?":
            result.append(".")
        elif c == "[":
            bracket, i = _translate_bracket(pattern, i)
            result.append(bracket)
            continue
        elif c == "\\":
            # Backslash escape in glob pattern - next char is literal
            if i + 1 < len(pattern):
                i += 1
                result.append(re.escape(pattern[i]))
            else:
                result.append("\\\\")
        else:
            result.append(re.escape(c))
        i += 1
    return "".join(result)


def _translate_bracket(pattern: str, start: int) -> tuple[str, int]:
    """Translate the bracket expression at pattern[start].

    Returns the regex class and the index just past the closing ']'.
    """
    j = start + 1
    negate = False
    if j < len(pattern) and pattern[j] in ("!", "^"):
        negate = True
        j += 1

    members: list[str] = []
    first = True
    while True:
        if j >= len(pattern):
            raise GlobError(f"Unterminated bracket expression in pattern '{pattern}'.")
        c = pattern[j]
        # ']' right after the opening is a member, not the end
        if c == "]" and not first:
            break
        first = False

        if c == "[" and pattern.startswith("[:", j):
            end = pattern.find(":]", j + 2)
            if end != -1:
                name = pattern[j:end + 2]
                if name not in POSIX_CLASSES:
                    raise GlobError(f"Unknown character class '{name}' in pattern '{pattern}'.")
                members.append(POSIX_CLASSES[name])
                j = end + 2
                continue

        if c == "\\" and j + 1 < len(pattern):
            members.append(re.escape(pattern[j + 1]))
            j += 2
            continue

        if c in "\\[]^":
            members.append("\\" + c)
        else:
            members.append(c)
        j += 1

    return ("[^" if negate else "[") + "".join(members) + "]", j + 1


def compile_glob(pattern: str, limits: Optional[ParseLimits] = None) -> re.Pattern[str]:
    """Translate and compile a glob pattern.

    Raises:
        GlobError: If the pattern is malformed.
        RegexError: If the translated regex does not compile or is too big.
    """
    limits = limits or ParseLimits()
    regex = glob_to_regex(pattern)
    if len(regex) > limits.max_pattern_length:
        raise RegexError("Compiled syntax too big.")
    return _compile(regex)


@lru_cache(maxsize=256)
def _compile(regex: str) -> re.Pattern[str]:
    try:
        return re.compile(regex, re.DOTALL)
    except re.error as e:
        raise RegexError(f"Syntax error: {e}") from e
    except (OverflowError, RecursionError) as e:
        raise RegexError("Compiled syntax too big.") from e
