"""Parser for just-env scripts.

Recursive descent over the lexer's token stream. The parser hands out one
top-level command at a time so that the evaluator can commit earlier
statements before later ones are even read.

Grammar:
    complete_command := and_or (';' | '&' | NEWLINE | EOF)
    and_or           := pipeline (('&&' | '||') NEWLINE* pipeline)*
    pipeline         := '!'? command ('|' NEWLINE* command)*
    command          := function_def | compound | simple
    simple           := (assignment | redirect)* (word | redirect)*
"""

from __future__ import annotations

import re
from typing import Optional, Union

from ..ast.types import (
    AssignmentNode,
    CompoundCommandNode,
    FunctionDefNode,
    LiteralPart,
    PipelineNode,
    RedirectionNode,
    ScriptNode,
    SimpleCommandNode,
    StatementNode,
    WordNode,
)
from ..types import ParseLimits, Position
from .errors import ParseException
from .lexer import REDIRECT_TOKENS, Lexer, Token, TokenType

MAX_INPUT_SIZE = ParseLimits.max_input_size
MAX_TOKENS = ParseLimits.max_tokens
MAX_PARSE_ITERATIONS = ParseLimits.max_parse_iterations

_ASSIGNMENT_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)=")

# Separators do not move the error-reporting cursor.
_SEPARATORS = frozenset({TokenType.NEWLINE, TokenType.SEMI, TokenType.AMP, TokenType.EOF})

# Reserved words that open a compound command, with their closing word.
_COMPOUND_OPENERS = {
    "{": ("brace-group", "}"),
    "if": ("if", "fi"),
    "while": ("while", "done"),
    "until": ("until", "done"),
    "for": ("for", "done"),
    "select": ("select", "done"),
    "case": ("case", "esac"),
    "[[": ("conditional", "]]"),
}

# Tokens after which the next word is in command position.
_COMMAND_START_TOKENS = frozenset({
    TokenType.NEWLINE,
    TokenType.SEMI,
    TokenType.AMP,
    TokenType.AND_AND,
    TokenType.OR_OR,
    TokenType.PIPE,
    TokenType.LPAREN,
    TokenType.BANG,
    TokenType.DSEMI,
})
_COMMAND_START_WORDS = frozenset({"then", "do", "else", "elif", "{", "if", "while", "until", "!"})


class Parser:
    """Recursive descent parser producing one StatementNode at a time."""

    def __init__(self, text: str, limits: Optional[ParseLimits] = None):
        self.limits = limits or ParseLimits()
        self.lexer = Lexer(text, self.limits)
        self._lookahead: list[Token] = []
        self._last = Position(1, 1)
        self._iterations = 0

    # -------------------------------------------------------------------------
    # Token helpers
    # -------------------------------------------------------------------------

    def peek(self, offset: int = 0) -> Token:
        """Look at token at current position + offset."""
        while len(self._lookahead) <= offset:
            self._lookahead.append(self.lexer.next_token())
        return self._lookahead[offset]

    def advance(self) -> Token:
        """Advance and return current token."""
        tok = self.peek()
        self._lookahead.pop(0)
        if tok.type not in _SEPARATORS:
            self._last = Position(tok.end_line, tok.end_col)
        return tok

    def check(self, type_: TokenType) -> bool:
        """Check if current token is of given type."""
        return self.peek().type == type_

    def match(self, *types: TokenType) -> Optional[Token]:
        """If current token matches any type, advance and return it."""
        for t in types:
            if self.check(t):
                return self.advance()
        return None

    def pos(self) -> Position:
        """Position right after the last consumed non-separator token."""
        return self._last

    def _error(self, message: str, tok: Optional[Token] = None) -> ParseException:
        tok = tok or self.peek()
        return ParseException(message, tok.line, tok.col)

    def _unexpected(self, tok: Optional[Token] = None) -> ParseException:
        tok = tok or self.peek()
        if tok.type == TokenType.EOF:
            return self._error("Unexpected end of input", tok)
        if tok.type == TokenType.NEWLINE:
            return self._error("Unexpected newline", tok)
        return self._error(f"Unexpected token '{tok.value}'", tok)

    def _tick(self) -> None:
        self._iterations += 1
        if self._iterations > self.limits.max_parse_iterations:
            raise self._error(
                f"Maximum parse iterations exceeded ({self.limits.max_parse_iterations})"
            )

    def _skip_newlines(self) -> None:
        while self.match(TokenType.NEWLINE):
            self._tick()

    # -------------------------------------------------------------------------
    # Top level
    # -------------------------------------------------------------------------

    def complete_command(self) -> Optional[StatementNode]:
        """Parse the next top-level command. Returns None at end of input."""
        self._skip_newlines()
        if self.check(TokenType.EOF):
            return None

        statement = self.parse_and_or()

        if self.match(TokenType.AMP):
            return StatementNode(statement.pipelines, statement.operators, background=True)
        if self.match(TokenType.SEMI, TokenType.NEWLINE) or self.check(TokenType.EOF):
            return statement
        raise self._unexpected()

    def parse_script(self) -> ScriptNode:
        """Parse every remaining top-level command."""
        statements = []
        while True:
            statement = self.complete_command()
            if statement is None:
                return ScriptNode(tuple(statements))
            statements.append(statement)

    def parse_and_or(self) -> StatementNode:
        pipelines = [self.parse_pipeline()]
        operators = []
        while True:
            tok = self.match(TokenType.AND_AND, TokenType.OR_OR)
            if tok is None:
                break
            self._skip_newlines()
            operators.append(tok.value)
            pipelines.append(self.parse_pipeline())
        return StatementNode(tuple(pipelines), tuple(operators))

    def parse_pipeline(self) -> PipelineNode:
        negated = self.match(TokenType.BANG) is not None
        commands = [self.parse_command()]
        while self.match(TokenType.PIPE):
            self._skip_newlines()
            commands.append(self.parse_command())
        return PipelineNode(tuple(commands), negated)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def parse_command(self) -> Union[SimpleCommandNode, CompoundCommandNode, FunctionDefNode]:
        self._tick()
        tok = self.peek()
        if tok.type == TokenType.LPAREN:
            return self.parse_compound()
        if tok.type == TokenType.WORD:
            if tok.value in _COMPOUND_OPENERS:
                return self.parse_compound()
            if tok.value == "function":
                return self.parse_function_def()
            if (
                self.peek(1).type == TokenType.LPAREN
                and self.peek(2).type == TokenType.RPAREN
                and not _ASSIGNMENT_RE.match(tok.value)
            ):
                return self.parse_function_def()
        if tok.type == TokenType.WORD or tok.type == TokenType.IO_NUMBER or tok.type in REDIRECT_TOKENS:
            return self.parse_simple_command()
        raise self._unexpected()

    def parse_function_def(self) -> FunctionDefNode:
        """Parse 'name () compound' or 'function name [()] compound'."""
        if self.peek().value == "function":
            self.advance()
            if not self.check(TokenType.WORD):
                raise self._error("Expected function name")
            name = self.advance().value
            if self.match(TokenType.LPAREN):
                if not self.match(TokenType.RPAREN):
                    raise self._error("Expected ')' in function definition")
        else:
            name = self.advance().value
            self.advance()  # (
            self.advance()  # )
        self._skip_newlines()
        tok = self.peek()
        if not (tok.type == TokenType.LPAREN or (tok.type == TokenType.WORD and tok.value in _COMPOUND_OPENERS)):
            raise self._error(f"Expected function body for '{name}'")
        return FunctionDefNode(name, self.parse_compound())

    def parse_compound(self) -> CompoundCommandNode:
        """Consume a compound command up to its balancing terminator.

        The body is never evaluated, so only its extent is tracked.
        """
        opener = self.advance()
        if opener.type == TokenType.LPAREN:
            if self.check(TokenType.LPAREN):
                kind = "arithmetic"
            else:
                kind = "subshell"
            closers = [")"]
        else:
            kind, closer = _COMPOUND_OPENERS[opener.value]
            closers = [closer]

        command_start = True
        while closers:
            self._tick()
            tok = self.advance()
            if tok.type == TokenType.EOF:
                raise self._error(f"Unexpected end of input in {kind} command", tok)

            if tok.type == TokenType.LPAREN:
                if closers[-1] != "esac":
                    closers.append(")")
            elif tok.type == TokenType.RPAREN:
                if closers[-1] == ")":
                    closers.pop()
            elif tok.type == TokenType.WORD:
                if tok.value == closers[-1] and (command_start or tok.value == "]]"):
                    closers.pop()
                elif command_start and tok.value in _COMPOUND_OPENERS:
                    closers.append(_COMPOUND_OPENERS[tok.value][1])

            if tok.type == TokenType.WORD:
                command_start = tok.value in _COMMAND_START_WORDS
            else:
                command_start = tok.type in _COMMAND_START_TOKENS
        return CompoundCommandNode(kind)

    def parse_simple_command(self) -> SimpleCommandNode:
        prefix: list[Union[AssignmentNode, RedirectionNode]] = []
        words: list[Union[WordNode, RedirectionNode]] = []
        while True:
            self._tick()
            tok = self.peek()
            if tok.type == TokenType.IO_NUMBER or tok.type in REDIRECT_TOKENS:
                redirection = self.parse_redirection()
                if words:
                    words.append(redirection)
                else:
                    prefix.append(redirection)
            elif tok.type == TokenType.WORD:
                self.advance()
                assignment = None if words else _as_assignment(tok)
                if assignment is None:
                    words.append(tok.word)
                    continue
                nxt = self.peek()
                if (
                    assignment.value is None
                    and nxt.type == TokenType.LPAREN
                    and (nxt.line, nxt.col) == (tok.end_line, tok.end_col)
                ):
                    raise self._error("Array assignment not allowed.", nxt)
                prefix.append(assignment)
            else:
                break
        if self.check(TokenType.LPAREN):
            raise self._unexpected()
        return SimpleCommandNode(tuple(prefix), tuple(words))

    def parse_redirection(self) -> RedirectionNode:
        fd = None
        io_number = self.match(TokenType.IO_NUMBER)
        if io_number is not None:
            fd = int(io_number.value)
        op = self.advance()
        if op.type not in REDIRECT_TOKENS:
            raise self._unexpected(op)
        if not self.check(TokenType.WORD):
            raise self._error(f"Expected redirection target after '{op.value}'")
        target = self.advance().word
        return RedirectionNode(op.value, target, fd)


def _as_assignment(tok: Token) -> Optional[AssignmentNode]:
    """Interpret a word token as NAME=value, if it is one."""
    word = tok.word
    if word is None or not word.parts or not isinstance(word.parts[0], LiteralPart):
        return None
    m = _ASSIGNMENT_RE.match(word.parts[0].value)
    if m is None:
        return None
    rest = word.parts[0].value[m.end():]
    parts = ((LiteralPart(rest),) if rest else ()) + word.parts[1:]
    return AssignmentNode(m.group(1), WordNode(parts) if parts else None)


def parse(text: str, limits: Optional[ParseLimits] = None) -> ScriptNode:
    """Parse a whole script into a ScriptNode."""
    return Parser(text, limits).parse_script()
