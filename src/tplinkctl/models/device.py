"""Device kinds and per-device outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tplinkctl.models.endpoint import Endpoint
from tplinkctl.models.sysinfo import Location, SysInfo


class DeviceKind(str, Enum):
    HS100 = "HS100"
    HS110 = "HS110"
    LB110 = "LB110"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class StatusOutcome:
    """Result of a status query against one device."""

    endpoint: Endpoint
    kind: DeviceKind
    sysinfo: SysInfo
    is_on: bool | None = None
    location: Location | None = None


@dataclass(frozen=True)
class ActionOutcome:
    """Result of an action; ``result`` is ``True`` or an error text."""

    endpoint: Endpoint
    kind: DeviceKind
    sysinfo: SysInfo
    action: str
    result: bool | str


@dataclass(frozen=True)
class DiscoveredDevice:
    """A device that answered the discovery broadcast."""

    endpoint: Endpoint
    kind: DeviceKind
    sysinfo: SysInfo
    data: dict[str, Any] = field(default_factory=dict)
    is_on: bool | None = None
    location: Location | None = None


@dataclass(frozen=True)
class Failure:
    """A device that could not be resolved; kept out of the result set."""

    endpoint: Endpoint
    error: Exception
