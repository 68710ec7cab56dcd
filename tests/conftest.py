"""
Pytest fixtures and configuration for tests.
"""

from typing import Callable, Optional, Sequence

import pytest

from workflow_builder.config import Settings, get_settings
from workflow_builder.core import (
    ErrorHandler,
    Node,
    ShellAction,
    ShellActionBuilder,
    Workflow,
    WorkflowBuilder,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Keep environment changes from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        debug=True,
        log_level="DEBUG",
    )


@pytest.fixture
def make_action() -> Callable[..., ShellAction]:
    """
    Factory for shell actions.

    Conditional parents are given as (parent, label) pairs; a label of None
    registers the parent with the new node as its default branch.
    """

    def _make(
        name: str,
        parents: Sequence[Node] = (),
        conditional: Sequence[tuple[Node, Optional[str]]] = (),
        error_handler: Optional[Node] = None,
    ) -> ShellAction:
        builder = ShellActionBuilder.create().with_name(name).with_executable(f"{name}.sh")

        for parent in parents:
            builder.with_parent(parent)

        for parent, label in conditional:
            if label is None:
                builder.with_parent_default_conditional(parent)
            else:
                builder.with_parent_with_condition(parent, label)

        if error_handler is not None:
            builder.with_error_handler(ErrorHandler.build_error_handler(error_handler))

        return builder.build()

    return _make


@pytest.fixture
def make_workflow() -> Callable[..., Workflow]:
    """Factory building a named workflow around the given entry nodes."""

    def _make(name: str, *nodes: Node) -> Workflow:
        builder = WorkflowBuilder().with_name(name)
        for node in nodes:
            builder.with_dag_containing_node(node)
        return builder.build()

    return _make


@pytest.fixture
def linear_workflow(make_action, make_workflow) -> Workflow:
    """Linear workflow: A -> B -> C."""
    a = make_action("A")
    b = make_action("B", parents=[a])
    make_action("C", parents=[b])
    return make_workflow("linear", a)


@pytest.fixture
def fork_workflow(make_action, make_workflow) -> Workflow:
    """Fan-out/fan-in workflow: A -> (B, C) -> D."""
    a = make_action("A")
    b = make_action("B", parents=[a])
    c = make_action("C", parents=[a])
    make_action("D", parents=[b, c])
    return make_workflow("fork", a)


@pytest.fixture
def decision_workflow(make_action, make_workflow) -> Workflow:
    """Decision workflow: A -x-> B, A -default-> C."""
    a = make_action("A")
    make_action("B", conditional=[(a, "x")])
    make_action("C", conditional=[(a, None)])
    return make_workflow("decision", a)
