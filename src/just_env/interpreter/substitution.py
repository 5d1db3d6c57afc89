"""Parameter substitution operators.

Implements ${var/pattern/replacement}, ${var//pattern/replacement} and
${var:offset:length} over an already expanded origin string and raw spec.

Spec syntax:
- Replace specs split at the first '/' not escaped by a backslash. The
  left side is a glob pattern (backslash escapes stay active there); the
  right side is the replacement, inserted literally after removing
  backslash escapes.
- Substring specs split at the first unescaped ':' into an offset and an
  optional length, each an optionally signed decimal integer.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from ..types import ParseLimits
from .errors import SubstitutionError
from .glob import compile_glob

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")


def split_spec(spec: str, separator: str) -> Optional[tuple[str, str]]:
    """Split spec at the first separator not preceded by a backslash escape.

    Returns None if there is no such separator.
    """
    i = 0
    while i < len(spec):
        c = spec[i]
        if c == "\\":
            i += 2
            continue
        if c == separator:
            return spec[:i], spec[i + 1:]
        i += 1
    return None


def unescape(text: str) -> str:
    """Remove backslash escapes. A trailing lone backslash is kept."""
    result = []
    i = 0
    while i < len(text):
        if text[i] == "\\" and i + 1 < len(text):
            result.append(text[i + 1])
            i += 2
        else:
            result.append(text[i])
            i += 1
    return "".join(result)


def get_replace(
    origin: str, spec: str, replace_all: bool, limits: Optional[ParseLimits] = None
) -> str:
    """Apply ${var/spec} (replace_all=False) or ${var//spec} to origin.

    The pattern is matched anchored at each scan position, leftmost first;
    greedy wildcards take the longest match there. Matches never overlap
    and empty matches are not replaced. If nothing matches, origin is
    returned unchanged.

    Raises:
        SubstitutionError: If spec has no unescaped '/'.
        GlobError: If the pattern is malformed.
        RegexError: If the pattern does not compile.
    """
    parts = split_spec(spec, "/")
    if parts is None:
        raise SubstitutionError(f"Missing '/' separator in replace spec '{spec}'.")
    pattern, replacement = parts
    replacement = unescape(replacement)

    # Empty pattern: return value unchanged
    if not pattern:
        return origin

    regex = compile_glob(pattern, limits)
    result = []
    last = 0
    pos = 0
    while pos < len(origin):
        m = regex.match(origin, pos)
        if m is not None and m.end() > pos:
            result.append(origin[last:pos])
            result.append(replacement)
            last = pos = m.end()
            if not replace_all:
                break
        else:
            pos += 1
    result.append(origin[last:])

    value = "".join(result)
    logger.debug(f"Replace {'all' if replace_all else 'first'} {pattern!r} -> {replacement!r}: {origin!r} -> {value!r}")
    return value


def get_substring(origin: str, spec: str) -> str:
    """Apply ${var:spec} to origin.

    A negative offset counts back from the end. An offset at or past the
    end, or before the start, gives an empty string. A missing, negative
    or too large length is clamped to the rest of the string.

    Raises:
        SubstitutionError: If the offset or length is not an integer.
    """
    parts = split_spec(spec, ":")
    if parts is None:
        offset_text, length_text = spec, None
    else:
        offset_text, length_text = parts

    offset = _parse_int(offset_text, "offset")
    length = _parse_int(length_text, "length") if length_text is not None else None

    # Handle negative offset
    if offset < 0:
        offset += len(origin)
    if offset < 0 or offset >= len(origin):
        return ""

    remaining = len(origin) - offset
    if length is None or length < 0 or length > remaining:
        length = remaining
    return origin[offset:offset + length]


def _parse_int(text: str, what: str) -> int:
    stripped = text.strip()
    if not _INT_RE.fullmatch(stripped):
        raise SubstitutionError(f"Invalid substring {what} '{text}'.")
    return int(stripped)
