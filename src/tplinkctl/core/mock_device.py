"""Mock TP-Link device for development and testing."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, cast

from tplinkctl.models import DEFAULT_PORT
from tplinkctl.protocol import decode_message, encode_message, make_frame, read_frame

if TYPE_CHECKING:
    from asyncio import StreamReader, StreamWriter

logger = logging.getLogger(__name__)

PLUG_SYSTEM = "system"
BULB_SYSTEM = "smartlife.iot.common.system"
BULB_LIGHTING = "smartlife.iot.smartbulb.lightingservice"

ERR_MODULE_NOT_SUPPORTED = {"err_code": -1, "err_msg": "module not support"}
ERR_METHOD_NOT_SUPPORTED = {"err_code": -2, "err_msg": "member not support"}


class _DiscoveryResponder(asyncio.DatagramProtocol):
    def __init__(self, device: MockTPLinkDevice) -> None:
        self._device = device
        self.transport: asyncio.DatagramTransport | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = cast(asyncio.DatagramTransport, transport)

    def datagram_received(self, data: bytes, addr: tuple[str | Any, int]) -> None:
        try:
            request = decode_message(data)
        except ValueError:
            logger.debug("Ignoring undecodable datagram from %s", addr)
            return
        if self.transport is not None:
            self.transport.sendto(encode_message(self._device.handle(request)), addr)


@dataclass
class MockTPLinkDevice:
    """Mock plug or bulb answering sysinfo, relay/light and reboot commands.

    A model starting with ``LB`` behaves as a bulb, anything else as a plug.
    """

    model: str = "HS100(UK)"
    alias: str = "Mock Plug"
    mac: str = "50:C7:BF:00:00:01"
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    udp_port: int | None = None
    sw_ver: str = "1.5.6 Build 191125 Rel.083657"
    hw_ver: str = "2.0"
    rssi: int = -52
    on: bool = False
    latitude_i: int | None = 515074
    longitude_i: int | None = -1278

    reboots: list[int] = field(default_factory=list, repr=False)
    _server: asyncio.Server | None = field(default=None, repr=False)
    _udp: asyncio.DatagramTransport | None = field(default=None, repr=False)

    @property
    def is_bulb(self) -> bool:
        return self.model.startswith("LB")

    @property
    def bound_port(self) -> int:
        if self._server is None:
            raise RuntimeError("mock device is not running")
        return int(self._server.sockets[0].getsockname()[1])

    @property
    def bound_udp_port(self) -> int:
        if self._udp is None:
            raise RuntimeError("mock device is not answering discovery")
        return int(self._udp.get_extra_info("sockname")[1])

    async def start(self, discovery: bool = True) -> None:
        """Start the TCP server and, optionally, the discovery responder."""
        self._server = await asyncio.start_server(
            self._handle_client, self.host, self.port
        )
        logger.info(
            "Mock %s '%s' listening on port %d", self.model, self.alias, self.bound_port
        )

        if discovery:
            loop = asyncio.get_running_loop()
            udp_port = self.port if self.udp_port is None else self.udp_port
            self._udp, _ = await loop.create_datagram_endpoint(
                lambda: _DiscoveryResponder(self), local_addr=(self.host, udp_port)
            )
            logger.info(
                "Mock '%s' answering discovery on port %d",
                self.alias,
                self.bound_udp_port,
            )

    async def stop(self) -> None:
        if self._udp is not None:
            self._udp.close()
            self._udp = None
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            logger.info("Mock device '%s' stopped", self.alias)

    async def run_forever(self) -> None:
        await self.start()
        if self._server:
            await self._server.serve_forever()

    async def _handle_client(self, reader: StreamReader, writer: StreamWriter) -> None:
        addr = writer.get_extra_info("peername")
        logger.debug("Client connected: %s", addr)
        try:
            body = await read_frame(reader)
            request = decode_message(body)
            writer.write(make_frame(self.handle(request)))
            await writer.drain()
        except asyncio.IncompleteReadError:
            logger.debug("Client %s disconnected before a full request", addr)
        except ValueError as exc:
            logger.warning("Bad request from %s: %s", addr, exc)
        except (ConnectionResetError, BrokenPipeError):
            logger.debug("Client disconnected: %s", addr)
        finally:
            writer.close()

    def sysinfo(self) -> dict[str, Any]:
        common: dict[str, Any] = {
            "sw_ver": self.sw_ver,
            "hw_ver": self.hw_ver,
            "model": self.model,
            "alias": self.alias,
            "rssi": self.rssi,
            "active_mode": "none",
            "err_code": 0,
        }
        if self.is_bulb:
            return common | {
                "description": "Smart Wi-Fi LED Bulb with Dimmable Light",
                "mic_type": "IOT.SMARTBULB",
                "mic_mac": self.mac.replace(":", ""),
                "is_dimmable": 1,
                "light_state": {"on_off": int(self.on), "brightness": 100},
            }
        info = common | {
            "type": "IOT.SMARTPLUGSWITCH",
            "mac": self.mac,
            "dev_name": "Smart Wi-Fi Plug",
            "relay_state": int(self.on),
            "led_off": 0,
        }
        if self.latitude_i is not None and self.longitude_i is not None:
            info |= {"latitude_i": self.latitude_i, "longitude_i": self.longitude_i}
        return info

    def handle(self, request: dict[str, Any]) -> dict[str, Any]:
        """Answer every namespace/method pair in ``request``."""
        response: dict[str, Any] = {}
        for namespace, methods in request.items():
            if namespace not in self.namespaces or not isinstance(methods, dict):
                response[namespace] = ERR_MODULE_NOT_SUPPORTED
                continue
            response[namespace] = {
                method: self._handle_method(namespace, method, params or {})
                for method, params in methods.items()
            }
        return response

    @property
    def namespaces(self) -> tuple[str, ...]:
        if self.is_bulb:
            return (PLUG_SYSTEM, BULB_SYSTEM, BULB_LIGHTING)
        return (PLUG_SYSTEM,)

    def _handle_method(
        self, namespace: str, method: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        system = BULB_SYSTEM if self.is_bulb else PLUG_SYSTEM

        if namespace == "system" and method == "get_sysinfo":
            return self.sysinfo()

        if namespace == system and method == "reboot":
            delay = int(params.get("delay", 1))
            self.reboots.append(delay)
            logger.info("Mock '%s' rebooting in %ds", self.alias, delay)
            return {"err_code": 0}

        if not self.is_bulb and namespace == "system" and method == "set_relay_state":
            self.on = bool(params.get("state"))
            logger.info("Mock '%s' relay %s", self.alias, "on" if self.on else "off")
            return {"err_code": 0}

        if (
            self.is_bulb
            and namespace == BULB_LIGHTING
            and method == "transition_light_state"
        ):
            self.on = bool(params.get("on_off"))
            logger.info("Mock '%s' light %s", self.alias, "on" if self.on else "off")
            return {"on_off": int(self.on), "err_code": 0}

        return ERR_METHOD_NOT_SUPPORTED


async def run_mock_device(
    model: str = "HS100(UK)",
    alias: str | None = None,
    host: str = "0.0.0.0",
    port: int = DEFAULT_PORT,
) -> None:
    """Run a mock device until interrupted."""
    device = MockTPLinkDevice(
        model=model,
        alias=alias or f"Mock {model.split('(', 1)[0]}",
        host=host,
        port=port,
    )
    await device.run_forever()
