"""Syntax tree node types.

The tree only describes the shapes the evaluator understands or must
reject: AND/OR lists of pipelines, simple commands carrying assignments,
and the word parts that make up assignment values. Constructs the
evaluator never runs (compound commands, function bodies) are recorded
by kind only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


# =============================================================================
# Parameters
# =============================================================================


@dataclass(frozen=True)
class VarParameter:
    """A plain named variable: $NAME or ${NAME}."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class SpecialParameter:
    """A special or positional parameter: $@, $?, $1, ${10} ..."""

    symbol: str

    def __str__(self) -> str:
        return self.symbol


Parameter = Union[VarParameter, SpecialParameter]


# =============================================================================
# Parameter operations
# =============================================================================


@dataclass(frozen=True)
class ReplaceString:
    """${var/pattern/replacement} - replace the first match."""

    raw: Optional["WordNode"]


@dataclass(frozen=True)
class ReplaceStringAll:
    """${var//pattern/replacement} - replace every match."""

    raw: Optional["WordNode"]


@dataclass(frozen=True)
class Substring:
    """${var:offset:length}"""

    raw: Optional["WordNode"]


@dataclass(frozen=True)
class UnsupportedOperation:
    """Any other parameter operator (${var:-x}, ${#var}, ${var%x} ...)."""

    operator: str


ParameterOperation = Union[ReplaceString, ReplaceStringAll, Substring, UnsupportedOperation]


# =============================================================================
# Word parts
# =============================================================================


@dataclass(frozen=True)
class LiteralPart:
    value: str


@dataclass(frozen=True)
class EscapedPart:
    """A backslash-escaped character; value is the character itself."""

    value: str


@dataclass(frozen=True)
class ColonPart:
    """An unquoted ':'."""


@dataclass(frozen=True)
class ParameterPart:
    parameter: Parameter


@dataclass(frozen=True)
class ParameterExpansionPart:
    parameter: Parameter
    operation: ParameterOperation


@dataclass(frozen=True)
class GlobPart:
    """An unquoted wildcard character (*, ?, [ or ])."""

    pattern: str


@dataclass(frozen=True)
class TildeExpansionPart:
    user: Optional[str] = None


@dataclass(frozen=True)
class CommandSubstitutionPart:
    command: str
    backquoted: bool = False


@dataclass(frozen=True)
class ArithmeticExpansionPart:
    expression: str


SimpleWordPart = Union[
    LiteralPart,
    EscapedPart,
    ColonPart,
    ParameterPart,
    ParameterExpansionPart,
    GlobPart,
    TildeExpansionPart,
    CommandSubstitutionPart,
    ArithmeticExpansionPart,
]


@dataclass(frozen=True)
class SingleQuotedPart:
    value: str


@dataclass(frozen=True)
class DoubleQuotedPart:
    parts: tuple[SimpleWordPart, ...] = ()


WordPart = Union[SimpleWordPart, SingleQuotedPart, DoubleQuotedPart]


@dataclass(frozen=True)
class WordNode:
    """A word; more than one part means a concatenation."""

    parts: tuple[WordPart, ...] = ()


# =============================================================================
# Commands
# =============================================================================


@dataclass(frozen=True)
class AssignmentNode:
    """NAME=value. value is None when nothing follows the '='."""

    name: str
    value: Optional[WordNode]


@dataclass(frozen=True)
class RedirectionNode:
    operator: str
    target: Optional[WordNode] = None
    fd: Optional[int] = None


@dataclass(frozen=True)
class SimpleCommandNode:
    """A simple command.

    prefix holds the redirect-or-env-var entries that precede the command
    name; words holds the command name, its arguments and any redirects
    that follow them.
    """

    prefix: tuple[Union[AssignmentNode, RedirectionNode], ...] = ()
    words: tuple[Union[WordNode, RedirectionNode], ...] = ()


@dataclass(frozen=True)
class CompoundCommandNode:
    """A compound command; only its kind is recorded."""

    kind: str


@dataclass(frozen=True)
class FunctionDefNode:
    name: str
    body: CompoundCommandNode


CommandNode = Union[SimpleCommandNode, CompoundCommandNode, FunctionDefNode]


@dataclass(frozen=True)
class PipelineNode:
    commands: tuple[CommandNode, ...]
    negated: bool = False

    @property
    def is_pipe(self) -> bool:
        return self.negated or len(self.commands) != 1


@dataclass(frozen=True)
class StatementNode:
    """One top-level command: pipelines joined by && / ||.

    operators[i] joins pipelines[i] and pipelines[i + 1]. background is
    True when the list was terminated by '&'.
    """

    pipelines: tuple[PipelineNode, ...]
    operators: tuple[str, ...] = ()
    background: bool = False


@dataclass(frozen=True)
class ScriptNode:
    statements: tuple[StatementNode, ...] = field(default_factory=tuple)
