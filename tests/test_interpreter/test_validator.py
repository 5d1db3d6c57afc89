"""Tests for statement validation."""

import logging

import pytest
from just_env.ast.types import (
    AssignmentNode,
    CompoundCommandNode,
    FunctionDefNode,
    LiteralPart,
    ParameterPart,
    PipelineNode,
    RedirectionNode,
    SimpleCommandNode,
    StatementNode,
    VarParameter,
    WordNode,
)
from just_env.interpreter import InterpreterContext
from just_env.interpreter.errors import ContextError, InvalidSyntax
from just_env.interpreter.validator import (
    execute_assignment,
    execute_command,
    execute_pipeline,
    execute_statement,
)


def _literal(text):
    return WordNode((LiteralPart(text),))


def _assign(name, text):
    return AssignmentNode(name, _literal(text))


def _statement(*commands, **kwargs):
    pipelines = tuple(PipelineNode((c,)) for c in commands)
    return StatementNode(pipelines, ("&&",) * (len(pipelines) - 1), **kwargs)


@pytest.fixture
def ctx():
    return InterpreterContext(env={})


class TestExecuteStatement:
    """Test execute_statement."""

    def test_assignments_in_order(self, ctx):
        execute_statement(ctx, _statement(
            SimpleCommandNode(prefix=(_assign("A", "1"),)),
            SimpleCommandNode(prefix=(_assign("B", "2"),)),
        ))
        assert list(ctx.env.items()) == [("A", "1"), ("B", "2")]

    def test_background(self, ctx):
        statement = _statement(SimpleCommandNode(prefix=(_assign("A", "1"),)), background=True)
        with pytest.raises(InvalidSyntax, match="Job not allowed"):
            execute_statement(ctx, statement)
        assert ctx.env == {}

    def test_later_pipeline_error_keeps_earlier(self, ctx):
        with pytest.raises(InvalidSyntax):
            execute_statement(ctx, _statement(
                SimpleCommandNode(prefix=(_assign("A", "1"),)),
                SimpleCommandNode(words=(_literal("ls"),)),
            ))
        assert ctx.env == {"A": "1"}


class TestExecutePipeline:
    """Test execute_pipeline."""

    def test_pipe(self, ctx):
        pipeline = PipelineNode((SimpleCommandNode(), SimpleCommandNode()))
        with pytest.raises(InvalidSyntax, match="Pipe not allowed"):
            execute_pipeline(ctx, pipeline)

    def test_negated(self, ctx):
        pipeline = PipelineNode((SimpleCommandNode(prefix=(_assign("A", "1"),)),), negated=True)
        with pytest.raises(InvalidSyntax, match="Pipe not allowed"):
            execute_pipeline(ctx, pipeline)


class TestExecuteCommand:
    """Test execute_command."""

    def test_compound(self, ctx):
        with pytest.raises(InvalidSyntax, match="Compound command not allowed"):
            execute_command(ctx, CompoundCommandNode("subshell"))

    def test_function(self, ctx):
        node = FunctionDefNode("f", CompoundCommandNode("brace-group"))
        with pytest.raises(InvalidSyntax, match="Function definition not allowed"):
            execute_command(ctx, node)

    def test_commands(self, ctx):
        node = SimpleCommandNode(prefix=(_assign("A", "1"),), words=(_literal("env"),))
        with pytest.raises(InvalidSyntax, match="Commands not allowed"):
            execute_command(ctx, node)
        assert ctx.env == {}

    def test_redirect_rejected_before_assignments(self, ctx):
        node = SimpleCommandNode(prefix=(
            _assign("A", "1"),
            RedirectionNode(">", _literal("out")),
        ))
        with pytest.raises(InvalidSyntax, match="Redirects not allowed"):
            execute_command(ctx, node)
        assert ctx.env == {}

    def test_empty_command(self, ctx):
        execute_command(ctx, SimpleCommandNode())
        assert ctx.env == {}


class TestExecuteAssignment:
    """Test execute_assignment."""

    def test_assigns(self, ctx):
        execute_assignment(ctx, _assign("A", "x"))
        assert ctx.env == {"A": "x"}

    def test_without_value(self, ctx):
        with pytest.raises(InvalidSyntax) as exc_info:
            execute_assignment(ctx, AssignmentNode("A", None))
        assert exc_info.value.reason == "Variable A without value."

    def test_failed_expansion_does_not_assign(self, ctx):
        node = AssignmentNode("A", WordNode((ParameterPart(VarParameter("X")),)))
        with pytest.raises(ContextError):
            execute_assignment(ctx, node)
        assert "A" not in ctx.env

    def test_logs_assignment(self, ctx, caplog):
        with caplog.at_level(logging.DEBUG, logger="just_env.interpreter.validator"):
            execute_assignment(ctx, _assign("A", "x"))
        assert "Assigned A='x'" in caplog.text
