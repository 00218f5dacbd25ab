"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Tests for the HTTP transport.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests
import responses

from rpreport.exceptions import RequestBuildError, TransportError
from rpreport.transport import Transport

URL = "https://rp.example.com/api/v1/demo/launch"


@pytest.mark.unit
class TestTransport:
    @pytest.fixture
    def transport(self):
        """Create a transport with a short timeout."""
        with Transport(timeout=5.0, pool_size=4) as transport:
            yield transport

    def test_adapter_configuration(self, transport):
        """Test that the pooled adapter never retries."""
        adapter = transport.session.get_adapter("https://rp.example.com")
        assert adapter.max_retries.total == 0
        assert adapter._pool_maxsize == 4
        assert transport.session.get_adapter("http://rp.local") is adapter
        assert transport.timeout == 5.0

    def test_custom_session_is_used_as_is(self):
        """Test that a caller-supplied session is not modified."""
        session = requests.Session()
        transport = Transport(session=session)
        assert transport.session is session

    def test_prepare_adds_bearer_token(self, transport):
        """Test that the Authorization header is set on the prepared request."""
        request = requests.Request(
            "POST", URL, data=b"{}", headers={"Content-Type": "application/json"}
        )
        prepared = transport.prepare(request, "secret-token")

        assert prepared.headers["Authorization"] == "Bearer secret-token"
        assert prepared.headers["Content-Type"] == "application/json"
        assert prepared.body == b"{}"

    def test_prepare_invalid_url(self, transport):
        """Test that an unusable URL is reported as a build error."""
        request = requests.Request("GET", "not a url")

        with pytest.raises(RequestBuildError) as exc_info:
            transport.prepare(request, "t")

        assert exc_info.value.url == "not a url"
        assert "failed to create GET request" in exc_info.value.message

    @responses.activate
    def test_do_request_returns_response(self, transport):
        """Test that any status is returned to the caller unchanged."""
        responses.add(responses.POST, URL, json={"message": "nope"}, status=404)

        response = transport.do_request(requests.Request("POST", URL, data=b"{}"), "tok")

        assert response.status_code == 404
        assert len(responses.calls) == 1
        assert responses.calls[0].request.headers["Authorization"] == "Bearer tok"

    @pytest.mark.parametrize(
        "error, fragment",
        [
            (requests.exceptions.ConnectTimeout("slow"), "timed out after 5.0s"),
            (requests.exceptions.ConnectionError("refused"), "failed to execute GET request"),
        ],
    )
    def test_do_request_transport_failures(self, transport, error, fragment):
        """Test that network failures become TransportError without retrying."""
        with patch.object(transport.session, "send", side_effect=error) as mock_send:
            with pytest.raises(TransportError) as exc_info:
                transport.do_request(requests.Request("GET", URL), "tok")

        assert mock_send.call_count == 1
        assert mock_send.call_args[1]["timeout"] == 5.0
        assert fragment in exc_info.value.message
        assert exc_info.value.url == URL

    def test_close(self):
        """Test that closing releases the session."""
        session = MagicMock(spec=requests.Session)
        Transport(session=session).close()
        session.close.assert_called_once()
