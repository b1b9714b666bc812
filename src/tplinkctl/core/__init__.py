from __future__ import annotations

from .discovery import DiscoveryListener, discover
from .executor import (
    query_status,
    reboot_with_delay,
    run_batch,
    switch,
)
from .mock_device import MockTPLinkDevice, run_mock_device
from .resolver import DEVICE_KINDS, device_class_for, device_from_data, resolve

__all__ = [
    "DEVICE_KINDS",
    "DiscoveryListener",
    "MockTPLinkDevice",
    "device_class_for",
    "device_from_data",
    "discover",
    "query_status",
    "reboot_with_delay",
    "resolve",
    "run_batch",
    "run_mock_device",
    "switch",
]
