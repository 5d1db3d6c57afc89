"""Word Expansion.

Reduces words to strings against the current context:
- Literal, escaped and quoted text
- Variable references ($VAR, ${VAR})
- Parameter substitutions (${VAR/pat/rep}, ${VAR//pat/rep}, ${VAR:off:len})

Everything else a shell would expand (globs, tilde, command substitution,
arithmetic) is rejected with InvalidSyntax.
"""

from typing import TYPE_CHECKING

from ..ast.types import (
    ArithmeticExpansionPart,
    ColonPart,
    CommandSubstitutionPart,
    DoubleQuotedPart,
    EscapedPart,
    GlobPart,
    LiteralPart,
    Parameter,
    ParameterExpansionPart,
    ParameterPart,
    ReplaceString,
    ReplaceStringAll,
    SingleQuotedPart,
    Substring,
    TildeExpansionPart,
    UnsupportedOperation,
    VarParameter,
    WordNode,
    WordPart,
)
from .errors import ContextError, InvalidSyntax
from .substitution import get_replace, get_substring

if TYPE_CHECKING:
    from .types import InterpreterContext

# Characters with a meaning inside a substitution spec
_SPEC_SPECIAL_CHARS = "\\/:*?[]"


def get_variable(ctx: "InterpreterContext", parameter: Parameter) -> str:
    """Get a variable value from the context.

    Raises:
        ContextError: If the variable is not set.
        InvalidSyntax: For special and positional parameters.
    """
    if not isinstance(parameter, VarParameter):
        raise InvalidSyntax("Unsupported parameter.")
    try:
        return ctx.env[parameter.name]
    except KeyError:
        raise ContextError(f"Param variable {parameter.name} not found.") from None


def expand_word(ctx: "InterpreterContext", word: WordNode) -> str:
    """Expand a word; a concatenation joins the expanded parts."""
    parts = []
    for part in word.parts:
        parts.append(expand_part(ctx, part))
    return "".join(parts)


def expand_part(ctx: "InterpreterContext", part: WordPart) -> str:
    """Expand a single word part."""
    if isinstance(part, LiteralPart):
        return part.value
    elif isinstance(part, SingleQuotedPart):
        return part.value
    elif isinstance(part, EscapedPart):
        # Escaped newline is a line continuation
        if part.value == "\n":
            return ""
        return part.value
    elif isinstance(part, ColonPart):
        return ":"
    elif isinstance(part, DoubleQuotedPart):
        # Recursively expand parts inside double quotes
        result = []
        for p in part.parts:
            result.append(expand_part(ctx, p))
        return "".join(result)
    elif isinstance(part, ParameterPart):
        return get_variable(ctx, part.parameter)
    elif isinstance(part, ParameterExpansionPart):
        return expand_parameter(ctx, part)
    elif isinstance(part, GlobPart):
        raise InvalidSyntax(f"Unquoted wildcard '{part.pattern}' not allowed.")
    elif isinstance(part, TildeExpansionPart):
        raise InvalidSyntax("Tilde expansion not allowed.")
    elif isinstance(part, CommandSubstitutionPart):
        raise InvalidSyntax("Command substitution not allowed.")
    elif isinstance(part, ArithmeticExpansionPart):
        raise InvalidSyntax("Arithmetic expansion not allowed.")
    raise InvalidSyntax(f"Unsupported word part: {type(part).__name__}.")


def _escape_spec_chars(s: str) -> str:
    """Backslash-escape characters that are special in a substitution spec."""
    return "".join("\\" + c if c in _SPEC_SPECIAL_CHARS else c for c in s)


def expand_spec_word(ctx: "InterpreterContext", word: WordNode) -> str:
    """Expand the raw spec of a parameter substitution.

    Like expand_word, but escaped characters keep their backslash and
    quoted text is escaped, so the substitution engine treats separators
    and wildcards from those sources literally. Unquoted variable values
    stay active.
    """
    parts = []
    for part in word.parts:
        parts.append(_expand_spec_part(ctx, part))
    return "".join(parts)


def _expand_spec_part(ctx: "InterpreterContext", part: WordPart, quoted: bool = False) -> str:
    if isinstance(part, LiteralPart):
        return _escape_spec_chars(part.value) if quoted else part.value
    elif isinstance(part, SingleQuotedPart):
        return _escape_spec_chars(part.value)
    elif isinstance(part, EscapedPart):
        if part.value == "\n":
            return ""
        return "\\" + part.value
    elif isinstance(part, DoubleQuotedPart):
        result = []
        for p in part.parts:
            result.append(_expand_spec_part(ctx, p, quoted=True))
        return "".join(result)
    elif isinstance(part, (ParameterPart, ParameterExpansionPart)):
        value = expand_part(ctx, part)
        return _escape_spec_chars(value) if quoted else value
    # All other parts: delegate to normal expansion
    return expand_part(ctx, part)


def expand_parameter(ctx: "InterpreterContext", part: ParameterExpansionPart) -> str:
    """Expand a parameter substitution.

    The origin is resolved first, then the raw spec, then the operator is
    applied.
    """
    operation = part.operation
    if isinstance(operation, UnsupportedOperation):
        raise InvalidSyntax(f"Unsupported parameter substitution: {operation.operator}.")

    if not isinstance(part.parameter, VarParameter):
        raise InvalidSyntax("Unsupported parameter.")
    if part.parameter.name not in ctx.env:
        raise ContextError(f"Param {part.parameter} not found.")
    origin = ctx.env[part.parameter.name]

    if operation.raw is None:
        raise InvalidSyntax("No substitution spec provided.")
    spec = expand_spec_word(ctx, operation.raw)

    if isinstance(operation, ReplaceString):
        return get_replace(origin, spec, False, ctx.limits)
    elif isinstance(operation, ReplaceStringAll):
        return get_replace(origin, spec, True, ctx.limits)
    elif isinstance(operation, Substring):
        return get_substring(origin, spec)
    raise InvalidSyntax(f"Unsupported parameter substitution: {type(operation).__name__}.")
