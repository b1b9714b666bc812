"""Exceptions raised by tplinkctl."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tplinkctl.models import Endpoint


class InvalidAddressError(ValueError):
    """An address argument could not be parsed into an endpoint."""

    def __init__(self, address: str, reason: str = "") -> None:
        self.address = address
        message = f"not a valid address: {address}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class DeviceError(Exception):
    """Base class for failures tied to a single device endpoint."""

    def __init__(self, endpoint: Endpoint, message: str) -> None:
        self.endpoint = endpoint
        super().__init__(message)


class DeviceConnectionError(DeviceError):
    """The device could not be reached or the connection broke."""


class ProtocolError(DeviceError):
    """The device replied with something that is not a valid response."""


class DeviceResponseError(DeviceError):
    """The device answered with a non-zero error code."""

    def __init__(self, endpoint: Endpoint, message: str, code: int) -> None:
        self.code = code
        super().__init__(endpoint, message)


class CapabilityError(DeviceError):
    """The resolved device kind does not support the requested operation."""

    def __init__(self, endpoint: Endpoint, kind: str, capability: str) -> None:
        self.kind = kind
        self.capability = capability
        super().__init__(endpoint, f"{kind} devices do not support {capability}")
