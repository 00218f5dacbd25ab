"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Tests for multipart encoding of log messages with attachments.
"""

import io
import json

import pytest

from rpreport.exceptions import RequestBuildError
from rpreport.models import Attachment, LogLevel
from rpreport.multipart import (
    FILE_PART,
    JSON_REQUEST_PART,
    build_log_entry,
    build_log_with_attachment_request,
    encode_json_request_part,
)

URL = "https://rp.example.com/api/v1/demo/log"


class UnreadableStream:
    def read(self):
        raise OSError("disk went away")


class TextStream:
    def read(self):
        return "not bytes"


def split_parts(prepared):
    """Split a prepared multipart body into (headers, payload) pairs."""
    content_type = prepared.headers["Content-Type"]
    assert content_type.startswith("multipart/form-data; boundary=")
    boundary = content_type.split("boundary=", 1)[1].encode()

    chunks = prepared.body.split(b"--" + boundary)
    assert chunks[0] == b""
    assert chunks[-1] == b"--\r\n"

    parts = []
    for chunk in chunks[1:-1]:
        headers, payload = chunk[2:-2].split(b"\r\n\r\n", 1)
        parts.append((headers.decode().split("\r\n"), payload))
    return parts


@pytest.mark.unit
class TestMultipartEncoding:
    def test_json_part_is_single_element_array(self):
        """Test that the metadata entry is wrapped in a one-element array."""
        attachment = Attachment.from_bytes("trace.txt", b"x", "text/plain")
        entry = build_log_entry("abc", "boom", LogLevel.ERROR, attachment, 1700000000000)

        data = json.loads(encode_json_request_part(entry))

        assert data == [
            {
                "file": {"name": "trace.txt"},
                "item_id": "abc",
                "level": "error",
                "message": "boom",
                "time": 1700000000000,
            }
        ]

    def test_request_has_two_ordered_parts(self):
        """Test the part names, headers and payloads of the encoded body."""
        attachment = Attachment.from_bytes("trace.txt", b"stack trace", "text/plain")

        request = build_log_with_attachment_request(
            URL, "abc", "boom", LogLevel.ERROR, attachment, 42
        )
        assert request.method == "POST"
        assert request.url == URL

        parts = split_parts(request.prepare())
        assert len(parts) == 2

        json_headers, json_payload = parts[0]
        assert f'Content-Disposition: form-data; name="{JSON_REQUEST_PART}"' in json_headers
        assert "Content-Type: application/json" in json_headers
        entries = json.loads(json_payload)
        assert len(entries) == 1
        assert entries[0]["file"]["name"] == "trace.txt"
        assert entries[0]["item_id"] == "abc"

        file_headers, file_payload = parts[1]
        assert (
            f'Content-Disposition: form-data; name="{FILE_PART}"; filename="trace.txt"'
            in file_headers
        )
        assert "Content-Type: text/plain" in file_headers
        assert file_payload == b"stack trace"

    def test_default_mime_type_is_used_for_file_part(self):
        """Test that an attachment without a mime type is sent as octet-stream."""
        attachment = Attachment(name="core.bin", data=io.BytesIO(b"\x00\x01"))

        request = build_log_with_attachment_request(URL, "abc", "dump", LogLevel.DEBUG, attachment, 1)

        file_headers, file_payload = split_parts(request.prepare())[1]
        assert "Content-Type: application/octet-stream" in file_headers
        assert file_payload == b"\x00\x01"

    def test_stream_is_consumed(self):
        """Test that the attachment stream is read to exhaustion."""
        data = io.BytesIO(b"payload")
        attachment = Attachment(name="p.txt", data=data)

        build_log_with_attachment_request(URL, "abc", "m", LogLevel.INFO, attachment, 1)

        assert data.read() == b""

    def test_unreadable_stream(self):
        """Test that a failing stream is reported as a build error."""
        attachment = Attachment(name="gone.log", data=UnreadableStream())

        with pytest.raises(RequestBuildError) as exc_info:
            build_log_with_attachment_request(URL, "abc", "m", LogLevel.INFO, attachment, 1)

        assert "gone.log" in exc_info.value.message
        assert exc_info.value.url == URL

    def test_text_stream_is_rejected(self):
        """Test that text-mode streams are rejected."""
        attachment = Attachment(name="notes.txt", data=TextStream())

        with pytest.raises(RequestBuildError, match="binary mode"):
            build_log_with_attachment_request(URL, "abc", "m", LogLevel.INFO, attachment, 1)
