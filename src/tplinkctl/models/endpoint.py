from __future__ import annotations

import ipaddress
from dataclasses import dataclass

from tplinkctl.errors import InvalidAddressError

DEFAULT_PORT = 9999

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


@dataclass(frozen=True)
class Endpoint:
    """Network address of a single device."""

    host: IPAddress
    port: int = DEFAULT_PORT

    def __str__(self) -> str:
        if self.host.version == 6:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.host.version, int(self.host), self.port)

    @classmethod
    def from_sockaddr(
        cls, addr: tuple[str, int] | tuple[str, int, int, int]
    ) -> Endpoint:
        # IPv6 socket addresses may carry a scope suffix ("fe80::1%eth0")
        host = addr[0].split("%", 1)[0]
        return cls(ipaddress.ip_address(host), addr[1])


def _parse_port(address: str, value: str) -> int:
    if not value.isdigit():
        raise InvalidAddressError(address, f"bad port {value!r}")
    port = int(value)
    if not 1 <= port <= 65535:
        raise InvalidAddressError(address, f"port {port} out of range")
    return port


def _parse_ip(address: str, value: str) -> IPAddress:
    try:
        return ipaddress.ip_address(value)
    except ValueError as exc:
        raise InvalidAddressError(address) from exc


def parse_endpoint(address: str, default_port: int = DEFAULT_PORT) -> Endpoint:
    """Parse ``host``, ``host:port``, ``v6`` or ``[v6]:port`` into an endpoint."""
    text = address.strip()
    if not text:
        raise InvalidAddressError(address, "empty")

    if text.startswith("["):
        host, sep, rest = text[1:].partition("]")
        if not sep:
            raise InvalidAddressError(address, "unclosed bracket")
        ip = _parse_ip(address, host)
        if ip.version != 6:
            raise InvalidAddressError(address, "brackets are for IPv6 only")
        if not rest:
            return Endpoint(ip, default_port)
        if not rest.startswith(":"):
            raise InvalidAddressError(address)
        return Endpoint(ip, _parse_port(address, rest[1:]))

    if text.count(":") == 1:
        host, _, port = text.partition(":")
        ip = _parse_ip(address, host)
        return Endpoint(ip, _parse_port(address, port))

    # bare IPv4 or bare IPv6
    return Endpoint(_parse_ip(address, text), default_port)


def parse_endpoints(
    addresses: list[str], default_port: int = DEFAULT_PORT
) -> list[Endpoint]:
    """Parse every address up front; the first bad one aborts the whole list."""
    return [parse_endpoint(address, default_port) for address in addresses]
