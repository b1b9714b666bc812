"""tplinkctl - discover, query and control TP-Link smart plugs and bulbs."""

from __future__ import annotations

from importlib.metadata import version

from .config import DiscoveryConfig, QueryConfig, Settings, get_settings
from .devices import HS100, HS110, LB110, RawDevice
from .errors import (
    CapabilityError,
    DeviceConnectionError,
    DeviceError,
    DeviceResponseError,
    InvalidAddressError,
    ProtocolError,
)
from .models import DeviceKind, Endpoint, SysInfo, parse_endpoint

__all__ = [
    "CapabilityError",
    "DeviceConnectionError",
    "DeviceError",
    "DeviceKind",
    "DeviceResponseError",
    "DiscoveryConfig",
    "Endpoint",
    "HS100",
    "HS110",
    "InvalidAddressError",
    "LB110",
    "ProtocolError",
    "QueryConfig",
    "RawDevice",
    "Settings",
    "SysInfo",
    "__version__",
    "get_settings",
    "parse_endpoint",
]

__version__ = version("tplinkctl")
