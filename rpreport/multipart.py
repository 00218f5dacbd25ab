"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Multipart encoding for log messages that carry a file.

ReportPortal accepts a log entry with an attachment as a multipart/form-data
body with exactly two parts, in this order:

1. ``json_request_part`` (application/json): a JSON array holding one log
   entry whose ``file.name`` references the uploaded file. The array wrapping
   is required by the service even for a single entry.
2. ``file``: the raw attachment bytes with the attachment's own content type
   and the attachment name as filename.

The body itself is produced by requests (urllib3 field encoding), which also
generates the boundary and sets the request Content-Type.
"""

import logging

import requests
from pydantic import TypeAdapter

from rpreport.exceptions import RequestBuildError
from rpreport.models import Attachment, FileInfo, LogLevel, LogWithFileRequest

logger = logging.getLogger("rpreport.multipart")

JSON_REQUEST_PART = "json_request_part"
FILE_PART = "file"
JSON_CONTENT_TYPE = "application/json"

_ENTRIES_ADAPTER = TypeAdapter(list[LogWithFileRequest])


def build_log_entry(
    item_id: str,
    message: str,
    level: LogLevel,
    attachment: Attachment,
    timestamp: int,
) -> LogWithFileRequest:
    """Build the metadata entry describing a log message and its file."""
    return LogWithFileRequest(
        file=FileInfo(name=attachment.name),
        item_id=item_id,
        level=level,
        message=message,
        time=timestamp,
    )


def encode_json_request_part(entry: LogWithFileRequest) -> bytes:
    """Serialize one log entry as the JSON array expected in json_request_part."""
    return _ENTRIES_ADAPTER.dump_json([entry])


def read_attachment(attachment: Attachment) -> bytes:
    """Read the attachment stream until exhaustion.

    Raises:
        RequestBuildError: If the stream cannot be read or does not yield bytes
    """
    try:
        content = attachment.data.read()
    except (OSError, ValueError) as e:
        raise RequestBuildError(f"failed to read attachment '{attachment.name}': {e}") from e

    if isinstance(content, str):
        raise RequestBuildError(f"attachment '{attachment.name}' must be opened in binary mode")
    return content


def build_multipart_fields(entry: LogWithFileRequest, attachment: Attachment) -> list[tuple]:
    """Return the ordered multipart fields for a log entry with a file.

    The list form keeps the part order stable; requests encodes the fields in
    the order given.
    """
    content = read_attachment(attachment)
    logger.debug(
        f"Encoding attachment '{attachment.name}' ({len(content)} bytes, {attachment.mime_type})"
    )
    return [
        (JSON_REQUEST_PART, (None, encode_json_request_part(entry), JSON_CONTENT_TYPE)),
        (FILE_PART, (attachment.name, content, attachment.mime_type)),
    ]


def build_log_with_attachment_request(
    url: str,
    item_id: str,
    message: str,
    level: LogLevel,
    attachment: Attachment,
    timestamp: int,
) -> requests.Request:
    """
    Build the POST request for a log message with an attachment.

    Args:
        url: Target log endpoint
        item_id: ID of the item the message belongs to
        message: Log message text
        level: Log level
        attachment: File to upload; its stream is consumed
        timestamp: Log time in epoch milliseconds

    Returns:
        An unprepared request whose files are encoded as multipart/form-data

    Raises:
        RequestBuildError: If the metadata cannot be serialized or the stream read
    """
    entry = build_log_entry(item_id, message, level, attachment, timestamp)
    try:
        fields = build_multipart_fields(entry, attachment)
    except ValueError as e:
        raise RequestBuildError(f"failed to marshal log entry: {e}", url=url) from e
    except RequestBuildError as e:
        raise RequestBuildError(e.message, url=url) from e

    return requests.Request("POST", url, files=fields)
