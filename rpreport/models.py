"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
ReportPortal models module.

This module provides the Pydantic models and enumerations exchanged with the
ReportPortal API:
- closed enumerations for item types, statuses, log levels and launch modes
- request bodies for launch, item and log calls
- response bodies (created entries, dashboards and widgets)
- the Attachment carried by a log message
"""

import io
import mimetypes
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MIME_TYPE = "application/octet-stream"


class ItemType(str, Enum):
    """Types of test items in the execution tree."""

    SUITE = "SUITE"
    STORY = "STORY"
    TEST = "TEST"
    SCENARIO = "SCENARIO"
    STEP = "STEP"
    # Fixture phases
    BEFORE_CLASS = "BEFORE_CLASS"
    BEFORE_GROUPS = "BEFORE_GROUPS"
    BEFORE_METHOD = "BEFORE_METHOD"
    BEFORE_SUITE = "BEFORE_SUITE"
    BEFORE_TEST = "BEFORE_TEST"
    AFTER_CLASS = "AFTER_CLASS"
    AFTER_GROUPS = "AFTER_GROUPS"
    AFTER_METHOD = "AFTER_METHOD"
    AFTER_SUITE = "AFTER_SUITE"
    AFTER_TEST = "AFTER_TEST"


class ItemStatus(str, Enum):
    """Terminal statuses accepted when finishing an item or a launch."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    STOPPED = "STOPPED"
    SKIPPED = "SKIPPED"
    RESETED = "RESETED"
    CANCELLED = "CANCELLED"


class LogLevel(str, Enum):
    """Log levels understood by the log endpoint."""

    ERROR = "error"
    WARN = "warn"
    TRACE = "trace"
    INFO = "info"
    DEBUG = "debug"
    FATAL = "fatal"
    UNKNOWN = "unknown"


class LaunchMode(str, Enum):
    """Visibility mode of a launch."""

    DEFAULT = "DEFAULT"
    DEBUG = "DEBUG"


class LaunchAction(str, Enum):
    """Terminal actions for a launch, used as the last URL path segment."""

    FINISH = "finish"
    STOP = "stop"


class Parameter(BaseModel):
    """A key/value parameter of a parametrized test item."""

    key: str
    value: str


class Attachment(BaseModel):
    """
    A named binary payload sent together with one log message.

    The data stream is consumed exactly once by the log call and is not
    retained afterwards.
    """

    name: str = Field(..., min_length=1)
    data: Any
    mime_type: str = DEFAULT_MIME_TYPE

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("data")
    @classmethod
    def validate_data(cls, value):
        """Validate that data is a readable stream."""
        if not callable(getattr(value, "read", None)):
            raise ValueError("data must be a readable binary stream")
        return value

    @classmethod
    def from_path(cls, file_path: str | Path, mime_type: str | None = None) -> "Attachment":
        """Create an attachment from a file on disk, guessing its mime type."""
        if isinstance(file_path, str):
            file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        if mime_type is None:
            mime_type = mimetypes.guess_type(file_path.name)[0] or DEFAULT_MIME_TYPE

        return cls(name=file_path.name, data=io.BytesIO(file_path.read_bytes()), mime_type=mime_type)

    @classmethod
    def from_bytes(cls, name: str, content: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> "Attachment":
        """Create an attachment from in-memory bytes."""
        return cls(name=name, data=io.BytesIO(content), mime_type=mime_type)


# Request bodies


class StartLaunchRequest(BaseModel):
    """Body of the start-launch call."""

    name: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    start_time: int
    mode: LaunchMode = LaunchMode.DEFAULT


class FinishExecutionRequest(BaseModel):
    """Body shared by the finish-item, finish-launch and stop-launch calls."""

    end_time: int
    status: ItemStatus


class StartItemRequest(BaseModel):
    """Body of the start-item call."""

    name: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    start_time: int
    launch_id: str
    type: ItemType
    parameters: list[Parameter] = Field(default_factory=list)


class UpdateItemRequest(BaseModel):
    """Body of the update-item call."""

    description: str
    tags: list[str] = Field(default_factory=list)


class LogRequest(BaseModel):
    """Body of a log call without a file."""

    item_id: str
    message: str
    level: LogLevel
    time: int


class FileInfo(BaseModel):
    """File reference inside the JSON part of a multipart log call."""

    name: str


class LogWithFileRequest(BaseModel):
    """One entry of the json_request_part array of a multipart log call."""

    file: FileInfo
    item_id: str
    level: LogLevel
    message: str
    time: int


# Response bodies


class EntryCreated(BaseModel):
    """Response returned when the service creates a launch or an item."""

    id: str = Field(..., min_length=1)


class Widget(BaseModel):
    """A widget placed on a dashboard."""

    id: str = Field(..., alias="widgetId")
    size: list[int] = Field(default_factory=list, alias="widgetSize")
    position: list[int] = Field(default_factory=list, alias="widgetPosition")

    model_config = ConfigDict(populate_by_name=True)


class Dashboard(BaseModel):
    """A project dashboard with its widgets."""

    owner: str = ""
    share: bool = False
    id: str
    name: str
    widgets: list[Widget] = Field(default_factory=list)

    @field_validator("widgets", mode="before")
    @classmethod
    def validate_widgets(cls, value):
        """Treat a null widget list as empty."""
        return [] if value is None else value
