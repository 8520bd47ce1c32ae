"""Test configuration."""

import textwrap

import pytest

from ctest_tracing import config


@pytest.fixture
def ctest_log():
    """Factory turning an indented CTest console excerpt into a list of lines."""

    def _make(text: str) -> list[str]:
        return textwrap.dedent(text).splitlines(keepends=True)

    return _make


@pytest.fixture(autouse=True)
def _default_config():
    """Make sure no test leaks configuration changes into another."""
    backup = dict(config)
    yield
    for k, v in backup.items():
        config[k] = v
