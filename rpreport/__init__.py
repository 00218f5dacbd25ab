"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
RPREPORT - ReportPortal reporting client
A library for streaming launches, test items, statuses and logs to ReportPortal
"""

__version__ = "0.1.0"

from rpreport.client import ReportPortalClient, new_client
from rpreport.items import TestItem
from rpreport.launch import Launch
from rpreport.models import Attachment, ItemStatus, ItemType, LaunchMode, LogLevel

__all__ = [
    "Attachment",
    "ItemStatus",
    "ItemType",
    "Launch",
    "LaunchMode",
    "LogLevel",
    "ReportPortalClient",
    "TestItem",
    "new_client",
]
