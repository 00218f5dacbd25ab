"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Launches: the root of a reporting session.

A launch groups every test item of one test run. It owns the items created
through it and reports through a shared client.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from rpreport.exceptions import ItemStateError
from rpreport.items import TestItem
from rpreport.models import (
    EntryCreated,
    FinishExecutionRequest,
    ItemStatus,
    ItemType,
    LaunchAction,
    LaunchMode,
    Parameter,
    StartLaunchRequest,
)
from rpreport.utils.timestamps import now_timestamp

if TYPE_CHECKING:
    from rpreport.client import ReportPortalClient

logger = logging.getLogger("rpreport.launch")


class Launch:
    """A ReportPortal launch and the tree of items reported under it."""

    def __init__(
        self,
        client: "ReportPortalClient",
        name: str,
        description: str = "",
        tags: list[str] | None = None,
        mode: LaunchMode | str = LaunchMode.DEFAULT,
        launch_id: str = "",
    ):
        self.client = client
        self.name = name
        self.description = description
        self.tags = list(tags or [])
        self.mode = LaunchMode(mode)
        self.id = launch_id
        self.finished = False
        self.items: list[TestItem] = []

    def __repr__(self) -> str:
        return f"Launch(name={self.name!r}, id={self.id!r}, items={len(self.items)})"

    def create_item(
        self,
        name: str,
        item_type: ItemType | str,
        description: str = "",
        tags: list[str] | None = None,
        parent: TestItem | None = None,
        parameters: Iterable[Parameter] | Mapping[str, str] | None = None,
    ) -> TestItem:
        """Create a test item owned by this launch. Nothing is sent until it is started."""
        return TestItem(
            self,
            name,
            item_type,
            description=description,
            tags=tags,
            parent=parent,
            parameters=parameters,
        )

    def children_of(self, parent: TestItem | None) -> list[TestItem]:
        """Return the items directly under parent (root items for None)."""
        return [item for item in self.items if item.parent is parent]

    def start(self) -> None:
        """
        Start the launch; the service assigns its id.

        Raises:
            ItemStateError: If the launch already has an id
            ReportPortalError: If the request fails; the launch keeps an empty id
        """
        operation = f"start launch '{self.name}'"
        if self.id:
            raise ItemStateError(f"launch '{self.name}' is already started ({self.id})", operation=operation)

        body = StartLaunchRequest(
            name=self.name,
            description=self.description,
            tags=self.tags,
            start_time=now_timestamp(),
            mode=self.mode,
        )
        request = self.client.build_json_request("POST", self.client.project_url("launch"), body)
        created = self.client.execute(operation, request, 201, EntryCreated)

        self.id = created.id
        logger.info(f"Started launch '{self.name}' with id {self.id}")

    def finish(self, status: ItemStatus | str = ItemStatus.PASSED) -> None:
        """Finish the launch normally."""
        self._terminate(LaunchAction.FINISH, ItemStatus(status))

    def stop(self, status: ItemStatus | str = ItemStatus.STOPPED) -> None:
        """Force-stop the launch, e.g. when the test run is interrupted."""
        self._terminate(LaunchAction.STOP, ItemStatus(status))

    def _terminate(self, action: LaunchAction, status: ItemStatus) -> None:
        operation = f"{action.value} launch '{self.name}'"
        if not self.id:
            raise ItemStateError(f"launch '{self.name}' has not been started", operation=operation)
        if self.finished:
            raise ItemStateError(f"launch '{self.name}' is already finished", operation=operation)

        url = self.client.project_url("launch", self.id, action.value)
        body = FinishExecutionRequest(end_time=now_timestamp(), status=status)
        request = self.client.build_json_request("PUT", url, body)
        self.client.execute(operation, request, 200)

        self.finished = True
        unfinished = [item for item in self.items if item.started and not item.finished]
        if unfinished:
            logger.warning(
                f"Launch '{self.name}' ended with {len(unfinished)} unfinished item(s)"
            )
        verb = "stopped" if action is LaunchAction.STOP else "finished"
        logger.info(f"Launch '{self.name}' {verb} as {status.value}")
