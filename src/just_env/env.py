"""Main entry points - parse() and the ShellEnv class.

Example usage:
    from just_env import parse, ShellEnv

    context = parse("A=hello\\nB=${A//l/L}")
    print(context)  # {'A': 'hello', 'B': 'heLLo'}

    # Keep a context across several scripts
    env = ShellEnv(env={"PREFIX": "/usr"})
    env.run("BIN=${PREFIX}/bin")
    env.run("LIB=${BIN/bin/lib}")
    print(env.env["LIB"])  # "/usr/lib"
"""

import logging
from typing import Optional

from .interpreter import (
    EvaluationError,
    InterpreterContext,
    InvalidSyntax,
    ParseError,
    execute_statement,
)
from .parser import ParseException, Parser
from .types import Context, ParseLimits

logger = logging.getLogger(__name__)


def parse(
    script: str,
    context: Optional[Context] = None,
    *,
    limits: Optional[ParseLimits] = None,
) -> Context:
    """Evaluate a script of assignments into a context.

    Args:
        script: The script text.
        context: Context to evaluate into. It is mutated in place, so after
            a failure it still holds every assignment committed before it.
            A new dict is used if not given.
        limits: Resource limits. Defaults to ParseLimits().

    Returns:
        The context.

    Raises:
        ParseError: On the first invalid construct, unset variable or
            failed substitution.
    """
    if context is None:
        context = {}
    ctx = InterpreterContext(env=context, limits=limits or ParseLimits())
    parser = Parser(script, ctx.limits)

    while True:
        try:
            statement = parser.complete_command()
        except ParseException as e:
            raise ParseError(e.line, e.col, InvalidSyntax(e.message), context) from e
        if statement is None:
            return context

        logger.debug(f"Parsed statement: {statement}")
        try:
            execute_statement(ctx, statement)
        except EvaluationError as e:
            pos = parser.pos()
            raise ParseError(pos.line, pos.col, e, context) from e


class ShellEnv:
    """A context that accumulates across scripts.

    Each run() evaluates into the same context, so later scripts see the
    variables assigned by earlier ones.
    """

    def __init__(
        self,
        *,
        env: Optional[dict[str, str]] = None,
        limits: Optional[ParseLimits] = None,
    ):
        """Initialize the environment.

        Args:
            env: Initial variables.
            limits: Resource limits applied to every run.
        """
        self._initial_env = dict(env or {})
        self._env: Context = dict(self._initial_env)
        self._limits = limits or ParseLimits()

    @property
    def env(self) -> Context:
        """Get the current variables."""
        return self._env

    @property
    def limits(self) -> ParseLimits:
        """Get the resource limits applied to every run."""
        return self._limits

    def run(self, script: str) -> Context:
        """Evaluate a script into this environment.

        Returns:
            The updated context.

        Raises:
            ParseError: If evaluation fails. Assignments committed before
                the failure are kept.
        """
        return parse(script, self._env, limits=self._limits)

    def reset(self) -> None:
        """Reset the variables to their initial values."""
        self._env = dict(self._initial_env)
