"""
Shared pytest fixtures and configuration for slicestore tests.
"""

import pytest

from slicestore import StateHolder, StoreContext, _reset_config


@pytest.fixture(autouse=True)
def reset_config():
    """Reset the process-wide config before each test to prevent state leakage."""
    _reset_config()
    yield
    _reset_config()


@pytest.fixture
def holder():
    """A holder over the two-counter state used across the tests."""
    return StateHolder({"a": 1, "b": 1})


@pytest.fixture
def store(holder):
    return holder.store


@pytest.fixture
def context():
    """A fresh, empty store context."""
    context = StoreContext("test")
    yield context
    context._reset_state()


class Recorder:
    """Callable listener counting its calls."""

    def __init__(self, name="listener"):
        self.__qualname__ = name
        self.calls = 0

    def __call__(self):
        self.calls += 1


@pytest.fixture
def recorder():
    return Recorder
