"""Data models for tplinkctl."""

from tplinkctl.models.device import (
    ActionOutcome,
    DeviceKind,
    DiscoveredDevice,
    Failure,
    StatusOutcome,
)
from tplinkctl.models.endpoint import (
    DEFAULT_PORT,
    Endpoint,
    parse_endpoint,
    parse_endpoints,
)
from tplinkctl.models.sysinfo import CANONICAL_FIELDS, LightState, Location, SysInfo

__all__ = [
    "ActionOutcome",
    "CANONICAL_FIELDS",
    "DEFAULT_PORT",
    "DeviceKind",
    "DiscoveredDevice",
    "Endpoint",
    "Failure",
    "LightState",
    "Location",
    "StatusOutcome",
    "SysInfo",
    "parse_endpoint",
    "parse_endpoints",
]
