"""
wamp test configuration.

Shared fixtures and helpers for the transpiler test suite.
"""

import pytest

from wamp.transpiler import Context, emit_node, evaluate, read_form


@pytest.fixture
def ctx() -> Context:
    """A fresh Context for each test."""
    return Context()


@pytest.fixture
def expand(ctx):
    """
    Evaluate one form against the test's Context and render the result.

    Usage:
        assert expand("($f)") == "(call $f)"
    """
    def _expand(source: str) -> str:
        return emit_node(evaluate(read_form(source), ctx))
    return _expand
