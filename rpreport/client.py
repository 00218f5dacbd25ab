"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
ReportPortal API client.

This module provides the client every launch and test item reports through. It
builds URLs from the normalized configuration, executes single best-effort
requests through the transport and maps responses onto the expected status and
model. It also exposes the read-only calls (connectivity check, dashboards).
"""

import logging
from typing import Any

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from rpreport.core.config import ReportPortalConfig
from rpreport.core.logging import log_operation
from rpreport.exceptions import (
    RequestBuildError,
    ResponseDecodeError,
    TransportError,
    UnexpectedStatusError,
)
from rpreport.launch import Launch
from rpreport.models import Dashboard, LaunchMode
from rpreport.transport import Transport

logger = logging.getLogger("rpreport.client")

JSON_HEADERS = {"Content-Type": "application/json"}


class ReportPortalClient:
    """Client for interacting with the ReportPortal API."""

    def __init__(self, config: ReportPortalConfig, transport: Transport | None = None):
        """Initialize the client with configuration.

        Args:
            config: Normalized connection settings
            transport: Optional transport; one is created from the config otherwise
        """
        self.config = config
        self.transport = transport or Transport(timeout=config.timeout, pool_size=config.pool_size)

        logger.debug(
            f"ReportPortalClient initialized for project {config.project} with endpoint {config.endpoint}"
        )

    @classmethod
    def from_env(cls, **overrides) -> "ReportPortalClient":
        """Create a client from RPREPORT_* environment variables."""
        return cls(ReportPortalConfig.from_env(**overrides))

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    @property
    def project(self) -> str:
        return self.config.project

    @property
    def token(self) -> str:
        return self.config.token

    def url(self, *segments: str) -> str:
        """Join path segments onto the versioned endpoint."""
        return "/".join([self.endpoint, *segments])

    def project_url(self, *segments: str) -> str:
        """Join path segments onto the project path."""
        return self.url(self.project, *segments)

    def build_json_request(
        self, method: str, url: str, body: BaseModel | None = None
    ) -> requests.Request:
        """Build a request with an optional JSON body.

        Raises:
            RequestBuildError: If the body cannot be serialized
        """
        if body is None:
            return requests.Request(method, url, headers=dict(JSON_HEADERS))

        try:
            data = body.model_dump_json().encode("utf-8")
        except ValueError as e:
            raise RequestBuildError(f"failed to marshal {type(body).__name__}: {e}", url=url) from e

        return requests.Request(method, url, data=data, headers=dict(JSON_HEADERS))

    def execute(
        self,
        operation: str,
        request: requests.Request,
        expected_status: int,
        response_type: Any = None,
    ) -> Any:
        """
        Execute one request and check its outcome.

        Args:
            operation: Human-readable operation name used in logs and errors
            request: Unprepared request to send
            expected_status: The only status code treated as success
            response_type: Type to decode the JSON body into, or None to ignore the body

        Returns:
            The decoded body, or None when no response type is given

        Raises:
            RequestBuildError: If the request cannot be encoded
            TransportError: If the request cannot be sent
            UnexpectedStatusError: If the status differs from expected_status
            ResponseDecodeError: If the body is not JSON or does not match response_type
        """
        url = request.url
        with log_operation(
            logger, operation, level=logging.DEBUG, context={"method": request.method, "url": url}
        ):
            try:
                response = self.transport.do_request(request, self.token)
            except (RequestBuildError, TransportError) as e:
                raise type(e)(e.message, operation=operation, url=e.url or url) from e

            with response:
                if response.status_code != expected_status:
                    raise UnexpectedStatusError(
                        response.status_code,
                        response.reason,
                        operation=operation,
                        url=url,
                    )

                if response_type is None:
                    return None

                try:
                    payload = response.json()
                except ValueError as e:
                    raise ResponseDecodeError(
                        f"failed to decode response: {e}", operation=operation, url=url
                    ) from e

            try:
                return TypeAdapter(response_type).validate_python(payload)
            except ValidationError as e:
                raise ResponseDecodeError(
                    f"unexpected response shape: {e}", operation=operation, url=url
                ) from e

    def check_connect(self) -> None:
        """Check connectivity and credentials against the user endpoint.

        Raises:
            ReportPortalError: If the service is unreachable or rejects the token
        """
        request = self.build_json_request("GET", self.url("user"))
        self.execute("check connection", request, 200)
        logger.info(f"Connected to ReportPortal at {self.endpoint}")

    def get_dashboard(self) -> list[Dashboard]:
        """Get all dashboards of the project.

        Returns:
            List of dashboards with their widgets
        """
        request = self.build_json_request("GET", self.project_url("dashboard"))
        dashboards = self.execute("get dashboards", request, 200, list[Dashboard])
        logger.debug(f"Fetched {len(dashboards)} dashboards for project {self.project}")
        return dashboards

    def new_launch(
        self,
        name: str,
        description: str = "",
        tags: list[str] | None = None,
        mode: LaunchMode | str = LaunchMode.DEFAULT,
        launch_id: str = "",
    ) -> Launch:
        """Create a launch reporting through this client.

        Pass launch_id to attach to a launch that was started elsewhere.
        """
        return Launch(
            client=self,
            name=name,
            description=description,
            tags=tags,
            mode=mode,
            launch_id=launch_id,
        )

    def close(self) -> None:
        """Release the transport's pooled connections."""
        self.transport.close()

    def __enter__(self) -> "ReportPortalClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def new_client(
    endpoint: str,
    project: str,
    token: str,
    api_version: int = 1,
    **kwargs,
) -> ReportPortalClient:
    """
    Create a client for a ReportPortal endpoint.

    Args:
        endpoint: Raw endpoint; normalized to {scheme}://{host}/api/v{N}
        project: Project name
        token: Access token
        api_version: API version used when the endpoint carries none (values below 1 become 1)
        **kwargs: Extra ReportPortalConfig fields (timeout, pool_size)

    Returns:
        A configured ReportPortalClient
    """
    config = ReportPortalConfig(
        endpoint=endpoint,
        project=project,
        token=token,
        api_version=api_version,
        **kwargs,
    )
    return ReportPortalClient(config)
