from __future__ import annotations

import asyncio
import logging
from typing import Any, cast

from tplinkctl.config import DiscoveryConfig, QueryConfig
from tplinkctl.errors import DeviceError
from tplinkctl.models import DiscoveredDevice, Endpoint
from tplinkctl.protocol import SYSINFO_REQUEST, decode_message, encode_message

from .resolver import device_from_data

logger = logging.getLogger(__name__)


class DiscoveryListener(asyncio.DatagramProtocol):
    """Collects sysinfo replies to a broadcast, one entry per sender."""

    def __init__(self, query: QueryConfig | None = None) -> None:
        self._query = query
        self._found: dict[Endpoint, dict[str, Any]] = {}
        self.transport: asyncio.DatagramTransport | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = cast(asyncio.DatagramTransport, transport)

    def datagram_received(self, data: bytes, addr: tuple[str | Any, int]) -> None:
        try:
            endpoint = Endpoint.from_sockaddr(addr)
            document = decode_message(data)
        except ValueError as exc:
            logger.debug("Ignoring undecodable datagram from %s: %s", addr, exc)
            return
        if "system" not in document:
            logger.debug("Ignoring non-sysinfo reply from %s", endpoint)
            return
        self._found[endpoint] = document
        logger.debug("Reply from %s", endpoint)

    def error_received(self, exc: Exception) -> None:
        logger.warning("Discovery socket error: %s", exc)

    def broadcast(self, config: DiscoveryConfig) -> None:
        if self.transport is None:
            raise RuntimeError("listener is not bound to a socket")
        logger.debug(
            "Broadcasting sysinfo request to %s:%d",
            config.broadcast_address,
            config.port,
        )
        self.transport.sendto(
            encode_message(SYSINFO_REQUEST), (config.broadcast_address, config.port)
        )

    def replies(self) -> dict[Endpoint, dict[str, Any]]:
        return dict(self._found)

    def devices(self) -> list[DiscoveredDevice]:
        devices: list[DiscoveredDevice] = []
        for endpoint, data in self._found.items():
            try:
                device, info = device_from_data(endpoint, data, self._query)
            except DeviceError as exc:
                logger.warning("Ignoring reply from %s: %s", endpoint, exc)
                continue
            devices.append(
                DiscoveredDevice(
                    endpoint=endpoint,
                    kind=device.kind,
                    sysinfo=info,
                    data=data,
                    is_on=device.is_on_from(info),
                    location=device.location_from(info),
                )
            )
        devices.sort(key=lambda found: found.endpoint.sort_key)
        return devices


async def discover(
    listener: DiscoveryListener,
    timeout: float | None,
    config: DiscoveryConfig | None = None,
) -> None:
    """Broadcast once and listen for ``timeout`` seconds (forever if ``None``).

    Replies accumulate in ``listener``; read them with ``listener.devices()``
    once this returns or is cancelled.
    """
    if config is None:
        config = DiscoveryConfig()

    loop = asyncio.get_running_loop()
    transport, _ = await loop.create_datagram_endpoint(
        lambda: listener, local_addr=("0.0.0.0", 0), allow_broadcast=True
    )
    try:
        listener.broadcast(config)
        if timeout is None:
            logger.info("Listening for devices until interrupted")
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(timeout)
    finally:
        transport.close()

    logger.debug("Discovery complete: %d replies", len(listener.replies()))
