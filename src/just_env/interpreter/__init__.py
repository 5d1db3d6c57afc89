"""Interpreter module for just-env."""

from .errors import (
    ContextError,
    EvaluationError,
    GlobError,
    InvalidSyntax,
    ParseError,
    RegexError,
    SubstitutionError,
)
from .expansion import expand_parameter, expand_word, get_variable
from .glob import compile_glob, glob_to_regex
from .substitution import get_replace, get_substring
from .types import InterpreterContext
from .validator import execute_statement

__all__ = [
    "ContextError",
    "EvaluationError",
    "GlobError",
    "InvalidSyntax",
    "ParseError",
    "RegexError",
    "SubstitutionError",
    "InterpreterContext",
    "compile_glob",
    "execute_statement",
    "expand_parameter",
    "expand_word",
    "get_replace",
    "get_substring",
    "get_variable",
    "glob_to_regex",
]
