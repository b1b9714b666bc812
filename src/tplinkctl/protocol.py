"""TP-Link smart home wire protocol.

Requests and replies are JSON documents obfuscated with an XOR autokey
cipher. Over TCP each message is prefixed with its length as a 4-byte
big-endian integer; over UDP (discovery) the datagram is the bare ciphertext.
"""

from __future__ import annotations

import asyncio
import json
import logging
import struct
from typing import Any

from tplinkctl.errors import DeviceConnectionError, DeviceResponseError, ProtocolError
from tplinkctl.models import Endpoint

logger = logging.getLogger(__name__)

INITIAL_KEY = 171
HEADER = struct.Struct(">I")
# Replies above this size are not something a plug or bulb sends
MAX_REPLY_SIZE = 1 << 20

SYSINFO_REQUEST: dict[str, Any] = {"system": {"get_sysinfo": {}}}


def encrypt(plaintext: bytes) -> bytes:
    key = INITIAL_KEY
    result = bytearray()
    for byte in plaintext:
        key ^= byte
        result.append(key)
    return bytes(result)


def decrypt(ciphertext: bytes) -> bytes:
    key = INITIAL_KEY
    result = bytearray()
    for byte in ciphertext:
        result.append(key ^ byte)
        key = byte
    return bytes(result)


def encode_message(payload: dict[str, Any]) -> bytes:
    """Encrypt a request as an unframed datagram body."""
    return encrypt(json.dumps(payload, separators=(",", ":")).encode("utf-8"))


def decode_message(data: bytes) -> dict[str, Any]:
    """Decrypt and parse a datagram body; raises ``ValueError`` on garbage."""
    document = json.loads(decrypt(data).decode("utf-8"))
    if not isinstance(document, dict):
        raise ValueError("reply is not a JSON object")
    return document


def make_frame(payload: dict[str, Any]) -> bytes:
    """Create a length-prefixed TCP frame."""
    body = encode_message(payload)
    return HEADER.pack(len(body)) + body


async def read_frame(reader: asyncio.StreamReader) -> bytes:
    """Read one length-prefixed frame body (still encrypted)."""
    header = await reader.readexactly(HEADER.size)
    (length,) = HEADER.unpack(header)
    if length > MAX_REPLY_SIZE:
        raise ValueError(f"frame of {length} bytes exceeds limit")
    return await reader.readexactly(length)


def unwrap(
    endpoint: Endpoint, response: dict[str, Any], namespace: str, method: str
) -> dict[str, Any]:
    """Return ``response[namespace][method]`` after checking its error code."""
    section = response.get(namespace)
    if not isinstance(section, dict):
        raise ProtocolError(endpoint, f"reply has no {namespace!r} section")

    # A namespace the device does not implement reports its error one level up
    result = section.get(method, section)
    if not isinstance(result, dict):
        raise ProtocolError(endpoint, f"reply has no {namespace}.{method} result")

    code = result.get("err_code", 0)
    if code != 0:
        message = result.get("err_msg") or f"error code {code}"
        raise DeviceResponseError(
            endpoint, f"{namespace}.{method} failed: {message}", code
        )
    return result


class Connection:
    """Request channel to one device; opens a TCP connection per request."""

    def __init__(self, endpoint: Endpoint, timeout: float | None = None) -> None:
        self.endpoint = endpoint
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"Connection({self.endpoint})"

    async def request(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            return await asyncio.wait_for(self._exchange(payload), self.timeout)
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise DeviceConnectionError(
                self.endpoint, f"no response within {self.timeout}s"
            ) from exc
        except (ConnectionError, OSError) as exc:
            raise DeviceConnectionError(self.endpoint, str(exc) or repr(exc)) from exc

    async def call(
        self, namespace: str, method: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        response = await self.request({namespace: {method: params or {}}})
        return unwrap(self.endpoint, response, namespace, method)

    async def _exchange(self, payload: dict[str, Any]) -> dict[str, Any]:
        logger.debug("%s <- %s", self.endpoint, payload)
        reader, writer = await asyncio.open_connection(
            str(self.endpoint.host), self.endpoint.port
        )
        try:
            writer.write(make_frame(payload))
            await writer.drain()
            try:
                body = await read_frame(reader)
            except asyncio.IncompleteReadError as exc:
                raise ProtocolError(
                    self.endpoint, "connection closed before a full reply"
                ) from exc
            except ValueError as exc:
                raise ProtocolError(self.endpoint, str(exc)) from exc
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                logger.debug("Error while closing connection to %s", self.endpoint)

        try:
            response = decode_message(body)
        except ValueError as exc:
            raise ProtocolError(self.endpoint, f"undecodable reply: {exc}") from exc
        logger.debug("%s -> %s", self.endpoint, response)
        return response
