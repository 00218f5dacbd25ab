"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
API client fixtures for the rpreport test suite.

Unit tests drive launches and items through a ReportPortalClient whose
transport is a MagicMock, so every request the client builds can be
inspected without any network access.
"""

import json
from typing import Any
from unittest.mock import MagicMock

import pytest

from rpreport.client import ReportPortalClient
from rpreport.core.config import ReportPortalConfig
from rpreport.launch import Launch
from rpreport.transport import Transport

ENDPOINT = "https://rp.example.com/api/v1"
PROJECT = "demo"
TOKEN = "test-token-0000"


@pytest.fixture
def rp_config() -> ReportPortalConfig:
    """
    Create a ReportPortal configuration for testing.

    Returns:
        ReportPortalConfig: Connection settings for a fake instance
    """
    return ReportPortalConfig(endpoint="https://rp.example.com", project=PROJECT, token=TOKEN)


@pytest.fixture
def mock_transport() -> MagicMock:
    """Create a transport double; set do_request.return_value/side_effect per test."""
    return MagicMock(spec=Transport)


@pytest.fixture
def rp_client(rp_config: ReportPortalConfig, mock_transport: MagicMock) -> ReportPortalClient:
    """Create a client that sends through the mock transport."""
    return ReportPortalClient(rp_config, transport=mock_transport)


@pytest.fixture
def launch(rp_client: ReportPortalClient) -> Launch:
    """Create a launch that has not been started."""
    return rp_client.new_launch("Nightly regression", description="nightly run", tags=["nightly"])


@pytest.fixture
def started_launch(rp_client: ReportPortalClient) -> Launch:
    """Create a launch that already has a service-assigned id."""
    return rp_client.new_launch("Nightly regression", launch_id="launch-1")


@pytest.fixture
def mock_response_factory() -> callable:
    """
    Provide a factory function for creating mock responses.

    Returns:
        callable: Function to create mock responses
    """

    def _create_response(
        status_code: int = 200,
        json_data: Any = None,
        reason: str | None = None,
        content: str | None = None,
    ) -> MagicMock:
        """
        Create a mock HTTP response.

        Args:
            status_code: HTTP status code
            json_data: JSON response data
            reason: Status reason phrase
            content: Raw body; when not valid JSON, json() raises ValueError

        Returns:
            MagicMock: Mock response object
        """
        mock = MagicMock()
        mock.status_code = status_code
        mock.reason = reason or {200: "OK", 201: "Created", 400: "Bad Request",
                                 401: "Unauthorized", 404: "Not Found",
                                 500: "Internal Server Error"}.get(status_code, "")

        if content is not None:
            mock.text = content
            try:
                mock.json.return_value = json.loads(content)
            except ValueError as e:
                mock.json.side_effect = ValueError(f"Expecting value: {e}")
        else:
            mock.json.return_value = json_data if json_data is not None else {}
            mock.text = json.dumps(mock.json.return_value)

        return mock

    return _create_response
