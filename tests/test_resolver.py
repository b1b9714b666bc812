from __future__ import annotations

import asyncio
import ipaddress

import pytest

from tplinkctl.config import QueryConfig
from tplinkctl.core import MockTPLinkDevice, device_class_for, device_from_data, resolve
from tplinkctl.devices import HS100, HS110, LB110, RawDevice
from tplinkctl.errors import CapabilityError, DeviceConnectionError, ProtocolError
from tplinkctl.models import DeviceKind, Endpoint, Location
from tplinkctl.protocol import Connection

LOCALHOST = ipaddress.ip_address("127.0.0.1")


async def _with_device(device: MockTPLinkDevice, check):
    await device.start(discovery=False)
    try:
        endpoint = Endpoint(LOCALHOST, device.bound_port)
        return await check(endpoint)
    finally:
        await device.stop()


def _mock(model: str, **kwargs) -> MockTPLinkDevice:
    return MockTPLinkDevice(model=model, host="127.0.0.1", port=0, **kwargs)


@pytest.mark.parametrize(
    ("model", "expected"),
    [
        ("HS100(UK)", HS100),
        ("HS110(EU)", HS110),
        ("LB110(US)", LB110),
        ("HS105(US)", None),
        ("KP115(UK)", None),
        ("hs100", None),
    ],
)
def test_device_class_for(model, expected):
    assert device_class_for(model) is expected


def test_from_raw_keeps_the_connection():
    raw = RawDevice(Connection(Endpoint(LOCALHOST)))

    plug = HS100.from_raw(raw)

    assert plug.connection is raw.connection
    assert plug.kind is DeviceKind.HS100


def test_from_raw_rejects_typed_handles():
    plug = HS100(Connection(Endpoint(LOCALHOST)))

    with pytest.raises(TypeError):
        LB110.from_raw(plug)


def test_resolve_plug():
    async def check(endpoint):
        device, info = await resolve(endpoint)
        return device, info, await device.is_on(), await device.location()

    device, info, is_on, location = asyncio.run(
        _with_device(_mock("HS110(EU)", alias="Desk", on=True), check)
    )

    assert isinstance(device, HS110)
    assert info.alias == "Desk"
    assert info.hw_type == "IOT.SMARTPLUGSWITCH"
    assert is_on is True
    assert location == Location(51.5074, -0.1278)


def test_resolve_bulb_reads_bulb_field_names():
    async def check(endpoint):
        device, info = await resolve(endpoint)
        return device, info, await device.is_on()

    device, info, is_on = asyncio.run(
        _with_device(_mock("LB110(EU)", mac="50:C7:BF:00:00:02"), check)
    )

    assert isinstance(device, LB110)
    assert info.dev_name == "Smart Wi-Fi LED Bulb with Dimmable Light"
    assert info.mac == "50C7BF000002"
    assert info.hw_type == "IOT.SMARTBULB"
    assert is_on is False


def test_unknown_model_only_supports_status():
    mock = _mock("KP115(UK)")

    async def check(endpoint):
        device, info = await resolve(endpoint)
        with pytest.raises(CapabilityError):
            await device.reboot(1)
        with pytest.raises(CapabilityError):
            await device.is_on()
        with pytest.raises(CapabilityError):
            await device.location()
        with pytest.raises(CapabilityError):
            await device.switch(True)
        return device, info

    device, info = asyncio.run(_with_device(mock, check))

    assert type(device) is RawDevice
    assert device.kind is DeviceKind.UNKNOWN
    assert info.model == "KP115(UK)"
    assert mock.reboots == []


def test_reboot_and_switch_reach_the_device():
    plug = _mock("HS100(UK)")
    bulb = _mock("LB110(EU)")

    async def check(endpoint):
        device, _ = await resolve(endpoint)
        await device.reboot(5)
        await device.switch(True)
        return await device.is_on()

    assert asyncio.run(_with_device(plug, check)) is True
    assert asyncio.run(_with_device(bulb, check)) is True
    assert plug.reboots == [5]
    assert bulb.reboots == [5]


def test_resolve_unreachable_endpoint(unused_port):
    endpoint = Endpoint(LOCALHOST, unused_port)

    with pytest.raises(DeviceConnectionError) as info:
        asyncio.run(resolve(endpoint, QueryConfig(timeout=2.0)))

    assert info.value.endpoint == endpoint


def test_device_from_data_needs_no_network():
    endpoint = Endpoint(LOCALHOST, 9999)
    data = {"system": {"get_sysinfo": _mock("HS100(US)").sysinfo()}}

    device, info = device_from_data(endpoint, data)

    assert isinstance(device, HS100)
    assert device.endpoint == endpoint
    assert device.is_on_from(info) is False
    assert info.model == "HS100(US)"


def test_device_from_data_rejects_malformed_reply():
    endpoint = Endpoint(LOCALHOST, 9999)

    with pytest.raises(ProtocolError):
        device_from_data(endpoint, {"system": {"get_sysinfo": {"alias": "x"}}})
    with pytest.raises(ProtocolError):
        device_from_data(endpoint, {"smartlife": {}})
