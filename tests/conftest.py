"""
Pytest Configuration for the Auto Force-Merge Orchestrator
==========================================================

Root conftest.py - delegates to tests/fixtures/ for reusable components.
"""

import warnings
import gc

import pytest

# Import shared fixtures
from tests.fixtures import *


def pytest_configure(config):
    """Configure pytest with custom markers."""
    # Markers are defined in pyproject.toml
    pass


def pytest_collection_modifyitems(config, items):
    """Automatically add markers based on test location."""
    for item in items:
        # Add markers based on test file paths
        if "/unit/" in item.nodeid:
            item.add_marker(pytest.mark.unit)
            item.add_marker(pytest.mark.fast)  # Unit tests are fast by default
        elif "/integration/" in item.nodeid:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)

        # Add feature area markers
        if "/cli/" in item.nodeid:
            item.add_marker(pytest.mark.cli)
        if "threading" in item.nodeid.lower():
            item.add_marker(pytest.mark.threading)
        if "config" in item.nodeid.lower():
            item.add_marker(pytest.mark.config)


def pytest_runtest_setup(item):
    """Setup for each test run."""
    warnings.filterwarnings("ignore", category=DeprecationWarning)


def pytest_runtest_teardown(item):
    """Teardown after each test run."""
    gc.collect()
