"""Interpreter types for just-env."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..types import Context, ParseLimits


@dataclass
class InterpreterContext:
    """Context provided to the validator and word evaluator."""

    env: Context
    """Variables assigned so far; mutated as each assignment completes."""

    limits: ParseLimits = field(default_factory=ParseLimits)
    """Resource limits for this evaluation."""
