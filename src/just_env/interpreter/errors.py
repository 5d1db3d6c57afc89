"""Evaluation errors.

Every failure during evaluation is one of five categories. They are raised
where the problem is found and propagate unchanged to the driver, which
wraps the first one in a positioned ParseError.
"""

from __future__ import annotations

from typing import Optional


class EvaluationError(Exception):
    """Base class for the evaluation error categories."""

    label = "Evaluation error"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidSyntax(EvaluationError):
    """A construct outside the supported subset, or malformed input."""

    label = "Invalid syntax"


class ContextError(EvaluationError):
    """Reference to a variable that has not been assigned."""

    label = "Context error"


class SubstitutionError(EvaluationError):
    """A malformed substitution spec."""

    label = "Substitution error"


class GlobError(EvaluationError):
    """A malformed wildcard pattern."""

    label = "Glob translation error"


class RegexError(EvaluationError):
    """A pattern that compiled to an invalid or oversized regex."""

    label = "Regex error"


class ParseError(Exception):
    """A positioned evaluation failure.

    Attributes:
        line: 1-based line of the parser cursor at the failure.
        col: 1-based column of the parser cursor at the failure.
        error: The category error (InvalidSyntax, ContextError, ...).
        context: The context as it was when evaluation stopped, holding
            every assignment committed before the failure.
    """

    def __init__(
        self,
        line: int,
        col: int,
        error: EvaluationError,
        context: Optional[dict[str, str]] = None,
    ):
        self.line = line
        self.col = col
        self.error = error
        self.context = context if context is not None else {}
        super().__init__(str(self))

    @property
    def reason(self) -> str:
        return self.error.reason

    def __str__(self) -> str:
        return (
            f"{self.error.label} at line {self.line}, col {self.col}. "
            f"Reason: {self.error.reason}"
        )
