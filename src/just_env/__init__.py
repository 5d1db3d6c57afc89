"""just-env - shell-style variable assignments without a shell.

Evaluates scripts of NAME=value assignments, with $VAR references and
the ${VAR/pat/rep}, ${VAR//pat/rep} and ${VAR:offset:length} operators,
into an ordered dict. Nothing is ever executed.
"""

from .env import ShellEnv, parse
from .interpreter import (
    ContextError,
    EvaluationError,
    GlobError,
    InvalidSyntax,
    ParseError,
    RegexError,
    SubstitutionError,
)
from .types import Context, ParseLimits

__version__ = "0.1.0"

__all__ = [
    "parse",
    "ShellEnv",
    "Context",
    "ParseLimits",
    "ParseError",
    "EvaluationError",
    "InvalidSyntax",
    "ContextError",
    "SubstitutionError",
    "GlobError",
    "RegexError",
]
