"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Exception hierarchy for the ReportPortal client.

Every error raised by a reporting call derives from ReportPortalError and carries
the operation name and target URL so callers can decide whether to abort a run.
"""


class ReportPortalError(Exception):
    """Base class for all errors raised by the reporting client."""

    def __init__(self, message: str, operation: str | None = None, url: str | None = None):
        self.message = message
        self.operation = operation
        self.url = url
        super().__init__(self._compose())

    def _compose(self) -> str:
        parts = []
        if self.operation:
            parts.append(f"[{self.operation}]")
        parts.append(self.message)
        if self.url:
            parts.append(f"(url: {self.url})")
        return " ".join(parts)


class RequestBuildError(ReportPortalError):
    """Raised when a request body cannot be marshalled or encoded."""


class TransportError(ReportPortalError):
    """Raised when the HTTP request could not be executed at all."""


class UnexpectedStatusError(ReportPortalError):
    """Raised when the service answers with a status code other than the expected one."""

    def __init__(
        self,
        status_code: int,
        reason: str | None = None,
        operation: str | None = None,
        url: str | None = None,
    ):
        self.status_code = status_code
        self.reason = reason or ""
        status = f"{status_code} {self.reason}".strip()
        super().__init__(f"failed with status {status}", operation=operation, url=url)


class ResponseDecodeError(ReportPortalError):
    """Raised when a response body does not match the expected shape."""


class ItemStateError(ReportPortalError):
    """Raised when a lifecycle call is issued out of order (e.g. finish before start)."""


class UnsupportedOperationError(ReportPortalError):
    """Raised for capabilities the client declares but does not implement."""
