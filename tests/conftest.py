"""
Test configuration and fixtures for the rpreport project.

This file is the root pytest configuration file that registers pytest
markers and imports fixtures from the fixtures modules to make them
available to all tests.
"""

import pytest

from tests.fixtures.base import base_test_env, mock_env_vars, reset_rpreport_logger, temp_dir
from tests.fixtures.api_clients import (
    launch,
    mock_response_factory,
    mock_transport,
    rp_client,
    rp_config,
    started_launch,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line("markers", "integration: mark a test as an integration test")
    config.addinivalue_line("markers", "api: mark a test that tests API functionality")
    config.addinivalue_line("markers", "cli: mark a test that tests CLI functionality")
