"""Device handles.

``RawDevice`` only knows how to ask a device for its sysinfo. Once the model
is known, ``from_raw`` upcasts it to a typed handle that keeps the same
connection and adds the operations that model supports.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, TypeVar

from pydantic import ValidationError

from tplinkctl.errors import CapabilityError, ProtocolError
from tplinkctl.models import DeviceKind, Endpoint, Location, SysInfo
from tplinkctl.protocol import Connection

logger = logging.getLogger(__name__)

DeviceT = TypeVar("DeviceT", bound="RawDevice")


def parse_sysinfo(endpoint: Endpoint, data: dict[str, Any]) -> SysInfo:
    try:
        return SysInfo.model_validate(data)
    except ValidationError as exc:
        raise ProtocolError(endpoint, f"malformed sysinfo: {exc}") from exc


class RawDevice:
    """Handle for a device of unknown kind: status queries only."""

    kind: ClassVar[DeviceKind] = DeviceKind.UNKNOWN

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.connection.endpoint})"

    @property
    def endpoint(self) -> Endpoint:
        return self.connection.endpoint

    @classmethod
    def from_raw(cls: type[DeviceT], raw: RawDevice) -> DeviceT:
        """Take over ``raw``'s connection as a handle of this class."""
        if type(raw) is not RawDevice:
            raise TypeError(f"can only upcast a RawDevice, got {type(raw).__name__}")
        return cls(raw.connection)

    async def sysinfo(self) -> SysInfo:
        result = await self.connection.call("system", "get_sysinfo")
        return parse_sysinfo(self.endpoint, result)

    def is_on_from(self, info: SysInfo) -> bool | None:
        return None

    def location_from(self, info: SysInfo) -> Location | None:
        return None

    async def is_on(self) -> bool:
        raise CapabilityError(self.endpoint, str(self.kind), "on/off state")

    async def location(self) -> Location:
        raise CapabilityError(self.endpoint, str(self.kind), "geolocation")

    async def reboot(self, delay: int = 1) -> None:
        raise CapabilityError(self.endpoint, str(self.kind), "reboot")

    async def switch(self, on: bool) -> None:
        raise CapabilityError(self.endpoint, str(self.kind), "switching")


class SmartDevice(RawDevice):
    """Capabilities shared by every recognised device kind."""

    system_namespace: ClassVar[str] = "system"

    async def is_on(self) -> bool:
        info = await self.sysinfo()
        state = self.is_on_from(info)
        if state is None:
            raise ProtocolError(self.endpoint, "sysinfo does not report on/off state")
        return state

    async def location(self) -> Location:
        info = await self.sysinfo()
        location = self.location_from(info)
        if location is None:
            raise ProtocolError(self.endpoint, "sysinfo does not report a location")
        return location

    def location_from(self, info: SysInfo) -> Location | None:
        return Location.from_sysinfo(info)

    async def reboot(self, delay: int = 1) -> None:
        logger.debug("Rebooting %s in %ds", self.endpoint, delay)
        await self.connection.call(self.system_namespace, "reboot", {"delay": delay})


class SmartPlug(SmartDevice):
    def is_on_from(self, info: SysInfo) -> bool | None:
        if info.relay_state is None:
            return None
        return info.relay_state == 1

    async def switch(self, on: bool) -> None:
        await self.connection.call("system", "set_relay_state", {"state": int(on)})


class SmartBulb(SmartDevice):
    system_namespace = "smartlife.iot.common.system"
    lighting_namespace: ClassVar[str] = "smartlife.iot.smartbulb.lightingservice"

    def is_on_from(self, info: SysInfo) -> bool | None:
        if info.light_state is None:
            return None
        return info.light_state.on_off == 1

    async def switch(self, on: bool) -> None:
        await self.connection.call(
            self.lighting_namespace,
            "transition_light_state",
            {"on_off": int(on), "ignore_default": 1},
        )


class HS100(SmartPlug):
    kind = DeviceKind.HS100


class HS110(SmartPlug):
    kind = DeviceKind.HS110


class LB110(SmartBulb):
    kind = DeviceKind.LB110
