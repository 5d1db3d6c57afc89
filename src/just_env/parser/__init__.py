"""Parser module for just-env."""

from .errors import ParseException
from .lexer import (
    Lexer,
    Token,
    TokenType,
    tokenize,
    is_valid_name,
    RESERVED_WORDS,
)
from .parser import (
    Parser,
    parse,
    MAX_INPUT_SIZE,
    MAX_TOKENS,
    MAX_PARSE_ITERATIONS,
)

__all__ = [
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    "is_valid_name",
    "RESERVED_WORDS",
    # Parser
    "Parser",
    "ParseException",
    "parse",
    "MAX_INPUT_SIZE",
    "MAX_TOKENS",
    "MAX_PARSE_ITERATIONS",
]
