"""Shared test fixtures for deadwood tests."""

import logging

import pytest

from deadwood.graph.models import CallEdge, CallType, FunctionInfo


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def chain_functions():
    """entry -> a -> b, plus an orphan and a dead pair (dead1 -> dead2)."""
    return [
        FunctionInfo("entry", "run", "src/app/service.py", 1, 5, is_exported=True),
        FunctionInfo("a", "step_a", "src/app/service.py", 7, 12),
        FunctionInfo("b", "step_b", "src/app/service.py", 14, 20),
        FunctionInfo("orphan", "orphan", "src/app/extra.py", 1, 4),
        FunctionInfo("dead1", "dead_one", "src/app/extra.py", 6, 10),
        FunctionInfo("dead2", "dead_two", "src/app/extra.py", 12, 15),
    ]


@pytest.fixture
def chain_edges():
    return [
        CallEdge("entry", "a", "step_a"),
        CallEdge("a", "b", "step_b"),
        CallEdge("b", None, "print", call_type=CallType.EXTERNAL),
        CallEdge("dead1", "dead2", "dead_two"),
    ]


@pytest.fixture(autouse=True)
def _reset_deadwood_log_level():
    """CLI tests configure logging; keep levels from leaking between tests."""
    root_level = logging.getLogger().level
    yield
    logging.getLogger().setLevel(root_level)
    logging.getLogger("deadwood").setLevel(logging.NOTSET)
