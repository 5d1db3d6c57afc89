"""Statement validation and execution.

Walks one top-level command, rejecting every construct outside the
supported subset and committing each assignment to the context as soon as
its value is evaluated.
"""

import logging
from typing import TYPE_CHECKING

from ..ast.types import (
    AssignmentNode,
    CommandNode,
    CompoundCommandNode,
    FunctionDefNode,
    PipelineNode,
    RedirectionNode,
    SimpleCommandNode,
    StatementNode,
)
from .errors import InvalidSyntax
from .expansion import expand_word

if TYPE_CHECKING:
    from .types import InterpreterContext

logger = logging.getLogger(__name__)


def execute_statement(ctx: "InterpreterContext", node: StatementNode) -> None:
    """Validate and evaluate a top-level command.

    Every pipeline of an && / || list is evaluated in order; assignments
    cannot fail, so there is nothing to short-circuit on.
    """
    if node.background:
        raise InvalidSyntax("Job not allowed.")
    for pipeline in node.pipelines:
        execute_pipeline(ctx, pipeline)


def execute_pipeline(ctx: "InterpreterContext", node: PipelineNode) -> None:
    if node.is_pipe:
        raise InvalidSyntax("Pipe not allowed.")
    execute_command(ctx, node.commands[0])


def execute_command(ctx: "InterpreterContext", node: CommandNode) -> None:
    if isinstance(node, SimpleCommandNode):
        execute_simple_command(ctx, node)
    elif isinstance(node, CompoundCommandNode):
        raise InvalidSyntax("Compound command not allowed.")
    elif isinstance(node, FunctionDefNode):
        raise InvalidSyntax("Function definition not allowed.")
    else:
        raise InvalidSyntax(f"Unsupported command: {type(node).__name__}.")


def execute_simple_command(ctx: "InterpreterContext", node: SimpleCommandNode) -> None:
    """Evaluate the assignments of a simple command in declaration order."""
    if node.words:
        raise InvalidSyntax("Commands not allowed.")

    # Find redirects. If found, nothing of this command is evaluated.
    if any(isinstance(entry, RedirectionNode) for entry in node.prefix):
        raise InvalidSyntax("Redirects not allowed.")

    for entry in node.prefix:
        execute_assignment(ctx, entry)


def execute_assignment(ctx: "InterpreterContext", node: AssignmentNode) -> None:
    if node.value is None:
        raise InvalidSyntax(f"Variable {node.name} without value.")
    value = expand_word(ctx, node.value)
    ctx.env[node.name] = value
    logger.debug(f"Assigned {node.name}={value!r}")
