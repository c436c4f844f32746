import logging
import os
import sys

import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from nestedtree.core.config import TreeConfig, reset_config


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep NESTEDTREE_* variables from the developer's shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("NESTEDTREE_"):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    """Default configuration: gaps opened on the cheaper side of the tree."""
    return TreeConfig()


@pytest.fixture
def forward_config():
    """Configuration that always pushes nodes forward to open a gap."""
    return TreeConfig(prefer_minimal_shift=False)


@pytest.fixture(autouse=True)
def debug_logging(caplog):
    caplog.set_level(logging.DEBUG)
    yield
