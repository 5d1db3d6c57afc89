"""Lexer for just-env scripts.

Splits script text into operator and word tokens. Word tokens are parsed
into WordNode parts while they are read, since quoting decides both where
a word ends and what its parts mean.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from ..ast.types import (
    ArithmeticExpansionPart,
    ColonPart,
    CommandSubstitutionPart,
    DoubleQuotedPart,
    EscapedPart,
    GlobPart,
    LiteralPart,
    ParameterExpansionPart,
    ParameterPart,
    ReplaceString,
    ReplaceStringAll,
    SingleQuotedPart,
    SpecialParameter,
    Substring,
    TildeExpansionPart,
    UnsupportedOperation,
    VarParameter,
    WordNode,
    WordPart,
)
from ..types import ParseLimits
from .errors import ParseException


class TokenType(Enum):
    WORD = auto()
    IO_NUMBER = auto()
    NEWLINE = auto()
    SEMI = auto()
    AMP = auto()
    AND_AND = auto()
    OR_OR = auto()
    PIPE = auto()
    BANG = auto()
    LPAREN = auto()
    RPAREN = auto()
    LESS = auto()
    GREAT = auto()
    DGREAT = auto()
    DLESS = auto()
    DLESSDASH = auto()
    LESSAND = auto()
    GREATAND = auto()
    LESSGREAT = auto()
    CLOBBER = auto()
    AND_GREAT = auto()
    DSEMI = auto()
    EOF = auto()


# Longest operators first so that "&&" wins over "&".
OPERATORS: list[tuple[str, TokenType]] = [
    ("<<-", TokenType.DLESSDASH),
    ("&&", TokenType.AND_AND),
    ("||", TokenType.OR_OR),
    (";;", TokenType.DSEMI),
    ("<<", TokenType.DLESS),
    (">>", TokenType.DGREAT),
    ("<&", TokenType.LESSAND),
    (">&", TokenType.GREATAND),
    ("<>", TokenType.LESSGREAT),
    (">|", TokenType.CLOBBER),
    ("&>", TokenType.AND_GREAT),
    ("|", TokenType.PIPE),
    ("&", TokenType.AMP),
    (";", TokenType.SEMI),
    ("<", TokenType.LESS),
    (">", TokenType.GREAT),
    ("(", TokenType.LPAREN),
    (")", TokenType.RPAREN),
]

REDIRECT_TOKENS = frozenset({
    TokenType.LESS,
    TokenType.GREAT,
    TokenType.DGREAT,
    TokenType.DLESS,
    TokenType.DLESSDASH,
    TokenType.LESSAND,
    TokenType.GREATAND,
    TokenType.LESSGREAT,
    TokenType.CLOBBER,
    TokenType.AND_GREAT,
})

RESERVED_WORDS = frozenset({
    "if", "then", "else", "elif", "fi",
    "do", "done", "case", "esac",
    "while", "until", "for", "select", "in",
    "function", "{", "}", "!", "[[", "]]",
})

SPECIAL_PARAMETERS = "@*#?-$!"

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_IO_NUMBER_RE = re.compile(r"[0-9]+(?=[<>])")
_DIGITS_RE = re.compile(r"[0-9]+")
_WORD_BREAK = " \t\n|&;<>()"


def is_valid_name(name: str) -> bool:
    """Check if a string is a valid variable name."""
    return _NAME_RE.fullmatch(name) is not None


@dataclass
class Token:
    """A lexical token.

    line/col locate the first character; end_line/end_col locate the
    position right after the last character. word is set for WORD tokens.
    """

    type: TokenType
    value: str
    line: int
    col: int
    end_line: int
    end_col: int
    word: Optional[WordNode] = None


class _PartBuilder:
    """Collects word parts, merging adjacent literal text."""

    def __init__(self) -> None:
        self.parts: list[WordPart] = []
        self._text: list[str] = []

    def add_text(self, text: str) -> None:
        self._text.append(text)

    def add_part(self, part: WordPart) -> None:
        self._flush()
        self.parts.append(part)

    def is_empty(self) -> bool:
        return not self.parts and not self._text

    def build(self) -> tuple[WordPart, ...]:
        self._flush()
        return tuple(self.parts)

    def _flush(self) -> None:
        if self._text:
            self.parts.append(LiteralPart("".join(self._text)))
            self._text = []


class Lexer:
    """Tokenizer for the restricted shell grammar."""

    def __init__(self, text: str, limits: Optional[ParseLimits] = None):
        self.text = text
        self.limits = limits or ParseLimits()
        self.pos = 0
        self.line = 1
        self.col = 1
        self._depth = 0
        self._count = 0

    # -------------------------------------------------------------------------
    # Cursor helpers
    # -------------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.text):
            return self.text[idx]
        return ""

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _advance(self) -> str:
        c = self.text[self.pos]
        self.pos += 1
        if c == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return c

    def _error(self, message: str) -> ParseException:
        return ParseException(message, self.line, self.col)

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > self.limits.max_nesting_depth:
            raise self._error("Maximum nesting depth exceeded")

    def _leave(self) -> None:
        self._depth -= 1

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------

    def tokenize(self) -> list[Token]:
        """Tokenize the whole input. The last token is always EOF."""
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.type == TokenType.EOF:
                return tokens

    def next_token(self) -> Token:
        """Read the next token. Returns EOF repeatedly at end of input."""
        if len(self.text) > self.limits.max_input_size:
            raise ParseException(
                f"Input too large ({len(self.text)} > {self.limits.max_input_size} characters)",
                1, 1,
            )
        self._skip_blanks()
        line, col = self.line, self.col
        if self._at_end():
            return Token(TokenType.EOF, "", line, col, line, col)
        self._count += 1
        if self._count > self.limits.max_tokens:
            raise ParseException(f"Too many tokens (limit {self.limits.max_tokens})", line, col)
        return self._next_token(line, col)

    def _skip_blanks(self) -> None:
        while not self._at_end():
            c = self._peek()
            if c in " \t\r":
                self._advance()
            elif c == "\\" and self._peek(1) == "\n":
                # Line continuation between tokens
                self._advance()
                self._advance()
            elif c == "#":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
            else:
                return

    def _next_token(self, line: int, col: int) -> Token:
        start = self.pos
        c = self._peek()

        if c == "\n":
            self._advance()
            return Token(TokenType.NEWLINE, "\n", line, col, self.line, self.col)

        for op, type_ in OPERATORS:
            if self.text.startswith(op, self.pos):
                for _ in op:
                    self._advance()
                return Token(type_, op, line, col, self.line, self.col)

        if c == "!" and self._peek(1) in ("", " ", "\t", "\n"):
            self._advance()
            return Token(TokenType.BANG, "!", line, col, self.line, self.col)

        io_match = _IO_NUMBER_RE.match(self.text, self.pos)
        if io_match:
            for _ in io_match.group(0):
                self._advance()
            return Token(TokenType.IO_NUMBER, io_match.group(0), line, col, self.line, self.col)

        word = self._read_word()
        return Token(
            TokenType.WORD, self.text[start:self.pos], line, col, self.line, self.col, word
        )

    # -------------------------------------------------------------------------
    # Words
    # -------------------------------------------------------------------------

    def _read_word(self) -> WordNode:
        """Read an unquoted word up to the next blank or operator."""
        builder = _PartBuilder()
        prev = ""  # previous unquoted character, for tilde detection
        while not self._at_end():
            c = self._peek()
            if c in _WORD_BREAK:
                break
            if c == "\\":
                self._advance()
                if self._at_end():
                    builder.add_text("\\")
                else:
                    builder.add_part(EscapedPart(self._advance()))
                prev = ""
                continue
            if c == "'":
                builder.add_part(self._read_single_quoted())
            elif c == '"':
                builder.add_part(self._read_double_quoted())
            elif c == "$":
                part = self._read_dollar()
                if part is None:
                    builder.add_text("$")
                else:
                    builder.add_part(part)
            elif c == "`":
                builder.add_part(self._read_backquote())
            elif c in "*?[]":
                self._advance()
                builder.add_part(GlobPart(c))
            elif c == ":":
                self._advance()
                builder.add_part(ColonPart())
                prev = c
                continue
            elif c == "~" and (builder.is_empty() or prev in ("=", ":")):
                builder.add_part(self._read_tilde())
            else:
                builder.add_text(self._advance())
                prev = c
                continue
            prev = ""
        return WordNode(builder.build())

    def _read_tilde(self) -> TildeExpansionPart:
        self._advance()  # ~
        user = []
        while not self._at_end() and (self._peek().isalnum() or self._peek() in "_.+-"):
            user.append(self._advance())
        return TildeExpansionPart("".join(user) or None)

    def _read_single_quoted(self) -> SingleQuotedPart:
        line, col = self.line, self.col
        self._advance()  # '
        chars = []
        while not self._at_end() and self._peek() != "'":
            chars.append(self._advance())
        if self._at_end():
            raise ParseException("Unterminated single quote", line, col)
        self._advance()
        return SingleQuotedPart("".join(chars))

    def _read_double_quoted(self) -> DoubleQuotedPart:
        line, col = self.line, self.col
        self._enter()
        self._advance()  # "
        builder = _PartBuilder()
        while not self._at_end() and self._peek() != '"':
            c = self._peek()
            if c == "\\":
                if self._peek(1) in ("$", "`", '"', "\\", "\n"):
                    self._advance()
                    builder.add_part(EscapedPart(self._advance()))
                else:
                    builder.add_text(self._advance())
            elif c == "$":
                part = self._read_dollar()
                if part is None:
                    builder.add_text("$")
                else:
                    builder.add_part(part)
            elif c == "`":
                builder.add_part(self._read_backquote())
            else:
                builder.add_text(self._advance())
        if self._at_end():
            raise ParseException("Unterminated double quote", line, col)
        self._advance()
        self._leave()
        return DoubleQuotedPart(builder.build())

    def _read_backquote(self) -> CommandSubstitutionPart:
        line, col = self.line, self.col
        self._advance()  # `
        chars = []
        while not self._at_end() and self._peek() != "`":
            if self._peek() == "\\" and self._peek(1):
                chars.append(self._advance())
            chars.append(self._advance())
        if self._at_end():
            raise ParseException("Unterminated backquote", line, col)
        self._advance()
        return CommandSubstitutionPart("".join(chars), backquoted=True)

    # -------------------------------------------------------------------------
    # Dollar forms
    # -------------------------------------------------------------------------

    def _read_dollar(self) -> Optional[WordPart]:
        """Read a $-introduced part. Returns None for a literal '$'."""
        nxt = self._peek(1)
        if nxt == "{":
            return self._read_braced_parameter()
        if nxt == "(":
            if self._peek(2) == "(":
                return self._read_arithmetic()
            return self._read_command_substitution()
        name_match = _NAME_RE.match(self.text, self.pos + 1)
        if name_match:
            self._advance()  # $
            name = name_match.group(0)
            for _ in name:
                self._advance()
            return ParameterPart(VarParameter(name))
        if nxt and nxt in "0123456789" + SPECIAL_PARAMETERS:
            self._advance()
            return ParameterPart(SpecialParameter(self._advance()))
        self._advance()
        return None

    def _read_arithmetic(self) -> ArithmeticExpansionPart:
        line, col = self.line, self.col
        for _ in "$((":
            self._advance()
        depth = 2
        chars = []
        while not self._at_end():
            c = self._advance()
            if c == "(":
                depth += 1
            elif c == ")":
                depth -= 1
                if depth == 0:
                    # The expression ends one character earlier, at the first ')'
                    return ArithmeticExpansionPart("".join(chars[:-1]))
            chars.append(c)
        raise ParseException("Unterminated arithmetic expansion", line, col)

    def _read_command_substitution(self) -> CommandSubstitutionPart:
        line, col = self.line, self.col
        self._advance()  # $
        self._advance()  # (
        depth = 1
        chars = []
        quote = ""
        while not self._at_end():
            c = self._advance()
            if quote:
                if c == "\\" and quote == '"' and not self._at_end():
                    chars.append(c)
                    c = self._advance()
                elif c == quote:
                    quote = ""
            elif c in ("'", '"'):
                quote = c
            elif c == "\\" and not self._at_end():
                chars.append(c)
                c = self._advance()
            elif c == "(":
                depth += 1
            elif c == ")":
                depth -= 1
                if depth == 0:
                    return CommandSubstitutionPart("".join(chars))
            chars.append(c)
        raise ParseException("Unterminated command substitution", line, col)

    def _read_braced_parameter(self) -> WordPart:
        """Read ${...}."""
        line, col = self.line, self.col
        self._enter()
        self._advance()  # $
        self._advance()  # {

        # ${#NAME} and ${!NAME}; a lone ${#} or ${!} is a special parameter
        if self._peek() in ("#", "!") and self._peek(1) != "}":
            operator = self._advance()
            parameter = self._read_parameter_name(line, col)
            self._read_operand(line, col)
            self._leave()
            return ParameterExpansionPart(parameter, UnsupportedOperation(operator))

        parameter = self._read_parameter_name(line, col)
        c = self._peek()
        if c == "}":
            self._advance()
            self._leave()
            return ParameterPart(parameter)

        if c == "/":
            self._advance()
            if self._peek() == "/":
                self._advance()
                operation = ReplaceStringAll(self._read_operand(line, col))
            else:
                operation = ReplaceString(self._read_operand(line, col))
        elif c == ":" and self._peek(1) not in ("-", "=", "?", "+"):
            self._advance()
            operation = Substring(self._read_operand(line, col))
        elif not c:
            raise ParseException("Unterminated parameter expansion", line, col)
        elif c == ":" or c in "-=?+#%^,@[":
            operator = self._advance()
            if operator == ":" or (operator in "#%^," and self._peek() == operator):
                operator += self._advance()
            self._read_operand(line, col)
            operation = UnsupportedOperation(operator)
        else:
            raise self._error(f"Bad substitution: unexpected '{c}'")

        self._leave()
        return ParameterExpansionPart(parameter, operation)

    def _read_parameter_name(self, line: int, col: int):
        if self._at_end():
            raise ParseException("Unterminated parameter expansion", line, col)
        name_match = _NAME_RE.match(self.text, self.pos)
        if name_match:
            name = name_match.group(0)
            for _ in name:
                self._advance()
            return VarParameter(name)
        digits_match = _DIGITS_RE.match(self.text, self.pos)
        if digits_match:
            digits = digits_match.group(0)
            for _ in digits:
                self._advance()
            return SpecialParameter(digits)
        if self._peek() in SPECIAL_PARAMETERS:
            return SpecialParameter(self._advance())
        raise self._error("Bad substitution: missing parameter name")

    def _read_operand(self, line: int, col: int) -> Optional[WordNode]:
        """Read the word after a parameter operator, consuming the closing '}'.

        Wildcards and ':' are plain text here. Returns None when the
        operand is empty.
        """
        builder = _PartBuilder()
        while not self._at_end() and self._peek() != "}":
            c = self._peek()
            if c == "\\":
                self._advance()
                if self._at_end():
                    break
                builder.add_part(EscapedPart(self._advance()))
            elif c == "'":
                builder.add_part(self._read_single_quoted())
            elif c == '"':
                builder.add_part(self._read_double_quoted())
            elif c == "$":
                part = self._read_dollar()
                if part is None:
                    builder.add_text("$")
                else:
                    builder.add_part(part)
            elif c == "`":
                builder.add_part(self._read_backquote())
            else:
                builder.add_text(self._advance())
        if self._at_end():
            raise ParseException("Unterminated parameter expansion", line, col)
        self._advance()  # }
        if builder.is_empty():
            return None
        return WordNode(builder.build())


def tokenize(text: str, limits: Optional[ParseLimits] = None) -> list[Token]:
    """Tokenize script text."""
    return Lexer(text, limits).tokenize()
