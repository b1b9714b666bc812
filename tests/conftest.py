from __future__ import annotations

import socket

import pytest

from tplinkctl.config import get_settings
from tplinkctl.models import SysInfo


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.delenv("TPLINKCTL_CONFIG", raising=False)
    monkeypatch.setattr(
        "tplinkctl.config.settings.default_config_path",
        lambda: tmp_path / "config" / "config.toml",
    )
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return int(sock.getsockname()[1])


@pytest.fixture
def plug_sysinfo() -> SysInfo:
    return SysInfo.model_validate(
        {
            "alias": "Kitchen",
            "dev_name": "Smart Wi-Fi Plug",
            "model": "HS100(UK)",
            "mac": "50:C7:BF:00:00:01",
            "type": "IOT.SMARTPLUGSWITCH",
            "sw_ver": "1.5.6 Build 191125 Rel.083657",
            "hw_ver": "2.0",
            "rssi": -52,
            "active_mode": "schedule",
            "relay_state": 1,
        }
    )
