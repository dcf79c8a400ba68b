"""
Pytest configuration and shared fixtures for ibwire tests.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest


# =============================================================================
# Consumers
# =============================================================================


class Recorder:
    """
    Consumer that records every operation invoked on it.

    Hooks run after the call is recorded, so a hook may raise or issue
    requests without losing the record.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.hooks: dict[str, Callable[..., Any]] = {}

    def __getattr__(self, name: str) -> Callable[..., None]:
        if name.startswith("_"):
            raise AttributeError(name)

        def record(*args: Any) -> None:
            self.calls.append((name, args))
            hook = self.hooks.get(name)
            if hook is not None:
                hook(*args)

        return record

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def of(self, name: str) -> list[tuple[Any, ...]]:
        return [args for n, args in self.calls if n == name]


@pytest.fixture
def recorder() -> Recorder:
    """Fresh recording consumer."""
    return Recorder()


# =============================================================================
# Markers
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks integration tests")
