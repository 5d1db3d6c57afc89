"""Shared types for just-env."""

from __future__ import annotations

from dataclasses import dataclass

Context = dict[str, str]
"""Ordered mapping from variable name to its current string value."""


@dataclass(frozen=True)
class ParseLimits:
    """Resource limits for a single parse call.

    These guard against pathological input; the defaults are generous
    enough for any realistic configuration script.
    """

    max_input_size: int = 1_000_000
    """Maximum script length in characters."""

    max_tokens: int = 100_000
    """Maximum number of tokens the lexer may produce."""

    max_parse_iterations: int = 1_000_000
    """Maximum number of parser loop iterations."""

    max_nesting_depth: int = 64
    """Maximum nesting of ${...} and quotes inside one word."""

    max_pattern_length: int = 10_000
    """Maximum length of a translated substitution pattern."""


@dataclass(frozen=True)
class Position:
    """A 1-based line/column location in the script."""

    line: int
    col: int
