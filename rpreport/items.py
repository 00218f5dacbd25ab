"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Test items: the nodes of a launch's execution tree.

A TestItem is created in memory, started (the service assigns its id), then
receives any number of log and update calls and is finished once. Children are
started under an already started parent, so the tree is always built top-down.
Local fields change only after the service confirms the call.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING

from rpreport.exceptions import ItemStateError, UnsupportedOperationError
from rpreport.models import (
    Attachment,
    EntryCreated,
    FinishExecutionRequest,
    ItemStatus,
    ItemType,
    LogLevel,
    LogRequest,
    Parameter,
    StartItemRequest,
    UpdateItemRequest,
)
from rpreport.multipart import build_log_with_attachment_request
from rpreport.utils.timestamps import now_timestamp, to_timestamp, utc_now

if TYPE_CHECKING:
    from rpreport.client import ReportPortalClient
    from rpreport.launch import Launch

logger = logging.getLogger("rpreport.items")


def _to_parameters(
    parameters: Iterable[Parameter] | Mapping[str, str] | None,
) -> list[Parameter]:
    if parameters is None:
        return []
    if isinstance(parameters, Mapping):
        return [Parameter(key=key, value=value) for key, value in parameters.items()]
    return [p if isinstance(p, Parameter) else Parameter(**p) for p in parameters]


class TestItem:
    """A suite, story, test, step or fixture phase reported to ReportPortal."""

    # Not a pytest test class
    __test__ = False

    def __init__(
        self,
        launch: "Launch",
        name: str,
        item_type: ItemType | str,
        description: str = "",
        tags: list[str] | None = None,
        parent: "TestItem | None" = None,
        parameters: Iterable[Parameter] | Mapping[str, str] | None = None,
    ):
        """Create an item and register it with its launch; nothing is sent until start().

        Args:
            launch: Launch owning the item
            name: Item name
            item_type: One of the ItemType values
            description: Item description
            tags: Item tags
            parent: Parent item of the same launch, or None for a root item
            parameters: Test parameters as Parameter objects, dicts or a mapping

        Raises:
            ValueError: If item_type is unknown or parent belongs to another launch
        """
        if parent is not None and parent.launch is not launch:
            raise ValueError(f"Parent item '{parent.name}' belongs to a different launch")

        self._type = ItemType(item_type)
        self.id = ""
        self.name = name
        self.description = description
        self.tags = list(tags or [])
        self.parent = parent
        self.parameters = _to_parameters(parameters)
        self.start_time: datetime | None = None
        self.finished = False
        self.launch = launch
        launch.items.append(self)

    def __repr__(self) -> str:
        return f"TestItem(name={self.name!r}, type={self._type.value}, id={self.id!r})"

    @property
    def type(self) -> ItemType:
        """The item type; fixed at construction."""
        return self._type

    @property
    def client(self) -> "ReportPortalClient":
        return self.launch.client

    @property
    def started(self) -> bool:
        return bool(self.id)

    def _require_started(self, operation: str) -> None:
        if not self.started:
            raise ItemStateError(f"item '{self.name}' has not been started", operation=operation)

    def _require_open(self, operation: str) -> None:
        self._require_started(operation)
        if self.finished:
            raise ItemStateError(f"item '{self.name}' is already finished", operation=operation)

    def start(self) -> None:
        """
        Start the item under its parent, or under the launch for a root item.

        Raises:
            ItemStateError: If the item is already started, or its parent or launch is not
            ReportPortalError: If the request fails; the item stays unstarted
        """
        operation = f"start item '{self.name}'"
        if self.started:
            raise ItemStateError(f"item '{self.name}' is already started ({self.id})", operation=operation)
        if self.parent is not None and not self.parent.started:
            raise ItemStateError(
                f"parent item '{self.parent.name}' must be started before its children",
                operation=operation,
            )
        if not self.launch.id:
            raise ItemStateError(
                f"launch '{self.launch.name}' has no id; start it before its items",
                operation=operation,
            )

        if self.parent is not None:
            url = self.client.project_url("item", self.parent.id)
        else:
            url = self.client.project_url("item")

        started_at = utc_now()
        body = StartItemRequest(
            name=self.name,
            description=self.description,
            tags=self.tags,
            start_time=to_timestamp(started_at),
            launch_id=self.launch.id,
            type=self._type,
            parameters=self.parameters,
        )
        request = self.client.build_json_request("POST", url, body)
        created = self.client.execute(operation, request, 201, EntryCreated)

        self.id = created.id
        self.start_time = started_at
        logger.info(f"Started {self._type.value} '{self.name}' with id {self.id}")

    def finish(self, status: ItemStatus | str) -> None:
        """
        Finish the item with a terminal status.

        Args:
            status: One of the ItemStatus values

        Raises:
            ValueError: If status is not a known status
            ItemStateError: If the item is not started or already finished
            ReportPortalError: If the request fails
        """
        status = ItemStatus(status)
        operation = f"finish item '{self.name}'"
        self._require_open(operation)

        url = self.client.project_url("item", self.id)
        body = FinishExecutionRequest(end_time=now_timestamp(), status=status)
        request = self.client.build_json_request("PUT", url, body)
        self.client.execute(operation, request, 200)

        self.finished = True
        if self.start_time is not None:
            duration = (utc_now() - self.start_time).total_seconds()
            logger.info(f"Finished '{self.name}' as {status.value} after {duration:.2f}s")
        else:
            logger.info(f"Finished '{self.name}' as {status.value}")

    def log(
        self,
        message: str,
        level: LogLevel | str = LogLevel.INFO,
        attachment: Attachment | None = None,
    ) -> None:
        """
        Send a log message for the item, optionally with a file.

        Args:
            message: Log message text
            level: One of the LogLevel values
            attachment: Optional file sent as a multipart body; its stream is consumed

        Raises:
            ValueError: If level is not a known level
            ItemStateError: If the item is not started or already finished
            ReportPortalError: If encoding or the request fails
        """
        level = LogLevel(level)
        operation = f"log to item '{self.name}'"
        self._require_open(operation)

        url = self.client.project_url("log")
        timestamp = now_timestamp()
        if attachment is not None:
            request = build_log_with_attachment_request(
                url, self.id, message, level, attachment, timestamp
            )
        else:
            body = LogRequest(item_id=self.id, message=message, level=level, time=timestamp)
            request = self.client.build_json_request("POST", url, body)

        self.client.execute(operation, request, 201)

    def update(self, description: str, tags: list[str] | None = None) -> None:
        """
        Replace the item's description and tags.

        Local fields are changed only when the service accepts the update.

        Raises:
            ItemStateError: If the item is not started or already finished
            ReportPortalError: If the request fails
        """
        operation = f"update item '{self.name}'"
        self._require_open(operation)

        tags = list(tags or [])
        url = self.client.project_url("item", self.id, "update")
        body = UpdateItemRequest(description=description, tags=tags)
        request = self.client.build_json_request("PUT", url, body)
        self.client.execute(operation, request, 200)

        self.description = description
        self.tags = tags

    def get_activity(self):
        """Activity history is not available through this client.

        Raises:
            UnsupportedOperationError: Always
        """
        raise UnsupportedOperationError(
            "activity history is not supported by this client",
            operation=f"get activity for item '{self.name}'",
        )
