"""Global pytest configuration.

Conditionally registers the fixture plugin `tests.graph.sample_networks`.
Avoid importing the plugin directly to let pytest apply assertion rewriting.
"""

from __future__ import annotations

from importlib.util import find_spec

import pytest

from teamflow.logging import reset_logging, setup_root_logger

pytest_plugins: list[str] = []
if find_spec("tests.graph.sample_networks") is not None:
    pytest_plugins = ["tests.graph.sample_networks"]


@pytest.fixture(autouse=True)
def _fresh_logging():
    """Give every test the default logging configuration."""
    reset_logging()
    setup_root_logger()
    yield
    reset_logging()
    setup_root_logger()
