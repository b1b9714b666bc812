"""Shape outcomes into table rows or JSON records and render them."""

from __future__ import annotations

import json
from collections.abc import Sequence
from enum import Enum
from typing import Any

from tplinkctl.models import (
    ActionOutcome,
    DiscoveredDevice,
    Location,
    StatusOutcome,
    SysInfo,
)

from .table import Row, render_table

Record = dict[str, Any]
Shaped = Row | Record


class OutputFormat(str, Enum):
    SHORT = "short"
    LONG = "long"
    JSON = "json"

    @classmethod
    def from_flags(cls, json_output: bool, long_output: bool) -> OutputFormat:
        if json_output:
            return cls.JSON
        if long_output:
            return cls.LONG
        return cls.SHORT


def _signal(info: SysInfo) -> str:
    return f"{info.rssi} dB"


def _status_row(
    fmt: OutputFormat,
    address: str,
    info: SysInfo,
    is_on: bool | None,
    location: Location | None,
) -> Row:
    if fmt is OutputFormat.SHORT:
        return [
            ("Address", address),
            ("Alias", info.alias),
            ("Product", info.dev_name),
            ("Model", info.model),
            ("Signal", _signal(info)),
            ("On?", is_on),
        ]
    return [
        ("Address", address),
        ("MAC", info.mac),
        ("Alias", info.alias),
        ("Product", info.dev_name),
        ("Type", info.hw_type),
        ("Model", info.model),
        ("Version", info.sw_ver),
        ("Signal", _signal(info)),
        ("Latitude", location.latitude if location else None),
        ("Longitude", location.longitude if location else None),
        ("Mode", info.active_mode),
        ("On?", is_on),
    ]


def shape_status(fmt: OutputFormat, outcome: StatusOutcome) -> Shaped:
    if fmt is OutputFormat.JSON:
        location = outcome.location
        return {
            "addr": str(outcome.endpoint),
            "device": str(outcome.kind),
            "data": {
                "system": outcome.sysinfo.canonical(),
                "location": location.as_dict() if location else None,
            },
        }
    return _status_row(
        fmt, str(outcome.endpoint), outcome.sysinfo, outcome.is_on, outcome.location
    )


def shape_discovered(fmt: OutputFormat, found: DiscoveredDevice) -> Shaped:
    if fmt is OutputFormat.JSON:
        return {
            "addr": str(found.endpoint),
            "device": str(found.kind),
            "data": found.data,
        }
    return _status_row(
        fmt, str(found.endpoint), found.sysinfo, found.is_on, found.location
    )


def shape_actioned(fmt: OutputFormat, outcome: ActionOutcome) -> Shaped:
    info = outcome.sysinfo
    address = str(outcome.endpoint)
    if fmt is OutputFormat.JSON:
        return {
            "addr": address,
            "actioned": {"action": outcome.action, "result": outcome.result},
            "device": str(outcome.kind),
            "data": {"system": info.canonical()},
        }
    if fmt is OutputFormat.SHORT:
        return [
            ("Address", address),
            ("Alias", info.alias),
            ("Product", info.dev_name),
            ("Model", info.model),
            (outcome.action, outcome.result),
        ]
    return [
        ("Address", address),
        ("MAC", info.mac),
        ("Alias", info.alias),
        ("Product", info.dev_name),
        ("Type", info.hw_type),
        ("Model", info.model),
        ("Version", info.sw_ver),
        (outcome.action, outcome.result),
    ]


def render(shaped: Sequence[Shaped], fmt: OutputFormat) -> str:
    """Render a whole batch as one document."""
    if fmt is OutputFormat.JSON:
        return json.dumps(list(shaped))
    return render_table(shaped)  # type: ignore[arg-type]
