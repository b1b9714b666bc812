"""Device status snapshot models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

# Only these fields are part of the structured (JSON) status document.
CANONICAL_FIELDS = (
    "alias",
    "dev_name",
    "model",
    "mac",
    "hw_type",
    "sw_ver",
    "hw_ver",
    "rssi",
    "active_mode",
)


class LightState(BaseModel):
    model_config = {"frozen": True, "extra": "ignore"}

    on_off: int = 0
    brightness: int | None = None
    color_temp: int | None = None


class SysInfo(BaseModel):
    """Reply to ``system.get_sysinfo``.

    Plugs and bulbs report the same facts under different keys: bulbs use
    ``description``, ``mic_mac`` and ``mic_type`` where plugs use
    ``dev_name``, ``mac`` and ``type``.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    alias: str
    dev_name: str = Field(validation_alias=AliasChoices("dev_name", "description"))
    model: str
    mac: str = Field(validation_alias=AliasChoices("mac", "mic_mac"))
    hw_type: str = Field(validation_alias=AliasChoices("hw_type", "type", "mic_type"))
    sw_ver: str
    hw_ver: str | None = None
    rssi: int
    active_mode: str | None = None

    relay_state: int | None = None
    light_state: LightState | None = None
    latitude: float | None = None
    longitude: float | None = None
    latitude_i: int | None = None
    longitude_i: int | None = None

    def canonical(self) -> dict[str, Any]:
        return self.model_dump(mode="json", include=set(CANONICAL_FIELDS))


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    @classmethod
    def from_sysinfo(cls, info: SysInfo) -> Location | None:
        # Newer firmware reports fixed-point coordinates scaled by 10^4
        if info.latitude is not None and info.longitude is not None:
            return cls(info.latitude, info.longitude)
        if info.latitude_i is not None and info.longitude_i is not None:
            return cls(info.latitude_i / 10000, info.longitude_i / 10000)
        return None

    def as_dict(self) -> dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}
