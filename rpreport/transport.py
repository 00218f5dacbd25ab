"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
HTTP transport for the ReportPortal client.

The transport owns a pooled requests.Session and exposes a single primitive,
do_request(request, token), that sends one request with a bearer credential and
returns the raw response. It never retries: reporting calls are best-effort and
their outcome is reported to the caller immediately.
"""

import logging
import time

import requests
from requests.adapters import HTTPAdapter

from rpreport.exceptions import RequestBuildError, TransportError

logger = logging.getLogger("rpreport.transport")

DEFAULT_TIMEOUT = 30.0
DEFAULT_POOL_SIZE = 10


class Transport:
    """
    Sends prepared requests to ReportPortal through a pooled session.

    Attributes:
        timeout: Default timeout in seconds applied to every request
        session: The underlying requests.Session
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        pool_size: int = DEFAULT_POOL_SIZE,
        session: requests.Session | None = None,
    ):
        """Initialize the transport.

        Args:
            timeout: Default timeout in seconds for connect and read
            pool_size: Maximum number of pooled connections per host
            session: Optional preconfigured session (used as-is)
        """
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=pool_size,
                pool_maxsize=pool_size,
                max_retries=0,
            )
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

        logger.debug(f"Transport initialized with timeout {timeout}s and pool size {pool_size}")

    def prepare(self, request: requests.Request, token: str) -> requests.PreparedRequest:
        """Prepare a request and attach the bearer credential.

        Raises:
            RequestBuildError: If the request cannot be encoded (bad URL, unreadable body)
        """
        try:
            prepared = self.session.prepare_request(request)
        except (requests.RequestException, ValueError, OSError) as e:
            raise RequestBuildError(
                f"failed to create {request.method} request: {e}",
                url=request.url,
            ) from e

        prepared.headers["Authorization"] = f"Bearer {token}"
        return prepared

    def do_request(self, request: requests.Request, token: str) -> requests.Response:
        """Send a single request and return the raw response.

        The caller owns the returned response and must close it; using it as a
        context manager releases the connection on every exit path.

        Args:
            request: Unprepared request (method, URL, body and content headers)
            token: Bearer credential for the Authorization header

        Returns:
            The HTTP response, whatever its status code

        Raises:
            RequestBuildError: If the request cannot be prepared
            TransportError: On connection, DNS, TLS or timeout failures
        """
        prepared = self.prepare(request, token)

        if logger.isEnabledFor(logging.DEBUG):
            safe_headers = {
                k: v for k, v in prepared.headers.items() if k.lower() != "authorization"
            }
            logger.debug(f"API Request: {prepared.method} {prepared.url}")
            logger.debug(f"Headers: {safe_headers}")

        start_time = time.time()
        try:
            response = self.session.send(prepared, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise TransportError(
                f"request timed out after {self.timeout}s: {e}",
                url=prepared.url,
            ) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(
                f"failed to execute {prepared.method} request: {e}",
                url=prepared.url,
            ) from e

        duration = time.time() - start_time
        logger.debug(
            f"Response received in {duration:.2f}s - Status: {response.status_code} "
            f"for {prepared.method} {prepared.url}"
        )
        return response

    def close(self) -> None:
        """Release pooled connections."""
        self.session.close()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
