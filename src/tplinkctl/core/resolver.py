"""Resolve an endpoint into a typed device handle."""

from __future__ import annotations

import logging
from typing import Any

from tplinkctl.config import QueryConfig
from tplinkctl.devices import HS100, HS110, LB110, RawDevice, parse_sysinfo
from tplinkctl.errors import ProtocolError
from tplinkctl.models import Endpoint, SysInfo
from tplinkctl.protocol import Connection

logger = logging.getLogger(__name__)

# Checked in order; the first prefix that matches the reported model wins.
DEVICE_KINDS: tuple[tuple[str, type[RawDevice]], ...] = (
    ("HS100", HS100),
    ("HS110", HS110),
    ("LB110", LB110),
)


def device_class_for(model: str) -> type[RawDevice] | None:
    for prefix, device_class in DEVICE_KINDS:
        if model.startswith(prefix):
            return device_class
    return None


def upcast(raw: RawDevice, model: str) -> RawDevice:
    """Wrap ``raw``'s connection in the handle class for ``model``."""
    device_class = device_class_for(model)
    if device_class is None:
        return raw
    return device_class.from_raw(raw)


async def resolve(
    endpoint: Endpoint, config: QueryConfig | None = None
) -> tuple[RawDevice, SysInfo]:
    """Probe ``endpoint`` and return its typed handle with canonical sysinfo.

    Raises ``DeviceError`` (tied to ``endpoint``) if either query fails.
    """
    timeout = config.timeout if config is not None else None
    raw = RawDevice(Connection(endpoint, timeout=timeout))
    info = await raw.sysinfo()

    device = upcast(raw, info.model)
    if device is raw:
        logger.debug("%s reports unrecognised model %r", endpoint, info.model)
        return raw, info

    logger.debug("%s resolved as %s", endpoint, device.kind)
    # some fields are only filled in when asked through the typed handle
    return device, await device.sysinfo()


def device_from_data(
    endpoint: Endpoint, data: dict[str, Any], config: QueryConfig | None = None
) -> tuple[RawDevice, SysInfo]:
    """Resolve a device from a discovery reply without talking to it again."""
    system = data.get("system")
    result = system.get("get_sysinfo") if isinstance(system, dict) else None
    if not isinstance(result, dict):
        raise ProtocolError(endpoint, "discovery reply has no sysinfo")

    info = parse_sysinfo(endpoint, result)
    timeout = config.timeout if config is not None else None
    raw = RawDevice(Connection(endpoint, timeout=timeout))
    return upcast(raw, info.model), info
