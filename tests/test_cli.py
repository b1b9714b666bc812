from __future__ import annotations

import ipaddress
import json

from typer.testing import CliRunner

import tplinkctl.cli.actions as actions_cmd
import tplinkctl.cli.discover as discover_cmd
import tplinkctl.cli.status as status_cmd
from tplinkctl import __version__
from tplinkctl.cli import app
from tplinkctl.config import Settings, get_settings, write_settings
from tplinkctl.core import MockTPLinkDevice
from tplinkctl.models import (
    ActionOutcome,
    DeviceKind,
    Endpoint,
    Location,
    StatusOutcome,
)
from tplinkctl.protocol import SYSINFO_REQUEST, encode_message

runner = CliRunner()


def _fake_status_batch(calls, plug_sysinfo):
    async def _run_batch(endpoints, operation, config):
        calls.append((list(endpoints), config))
        return [
            StatusOutcome(
                endpoint,
                DeviceKind.HS110,
                plug_sysinfo,
                is_on=True,
                location=Location(51.5074, -0.1278),
            )
            for endpoint in endpoints
        ]

    return _run_batch


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"tplinkctl version {__version__}" in result.stdout


def test_status_rejects_bad_address_before_any_query(monkeypatch, plug_sysinfo):
    calls = []
    monkeypatch.setattr(
        status_cmd, "run_batch", _fake_status_batch(calls, plug_sysinfo)
    )

    result = runner.invoke(app, ["status", "10.0.0.5", "plug.local"])

    assert result.exit_code == 1
    assert "not a valid address: plug.local" in result.output
    assert calls == []


def test_status_json(monkeypatch, plug_sysinfo):
    calls = []
    monkeypatch.setattr(
        status_cmd, "run_batch", _fake_status_batch(calls, plug_sysinfo)
    )

    result = runner.invoke(app, ["--json", "status", "10.0.0.5", "10.0.0.6:80"])

    assert result.exit_code == 0
    records = json.loads(result.stdout)
    assert [record["addr"] for record in records] == ["10.0.0.5:9999", "10.0.0.6:80"]
    assert records[0]["device"] == "HS110"
    assert records[0]["data"]["system"]["alias"] == "Kitchen"
    assert records[0]["data"]["location"] == {
        "latitude": 51.5074,
        "longitude": -0.1278,
    }
    endpoints, config = calls[0]
    assert endpoints[1] == Endpoint(ipaddress.ip_address("10.0.0.6"), 80)
    assert config.parallel_queries == 32


def test_status_table(monkeypatch, plug_sysinfo):
    monkeypatch.setattr(status_cmd, "run_batch", _fake_status_batch([], plug_sysinfo))

    short = runner.invoke(app, ["status", "10.0.0.5"])
    long = runner.invoke(app, ["--long", "status", "10.0.0.5"])

    assert short.exit_code == 0
    header = short.stdout.splitlines()[0]
    assert header.split("|")[0].strip() == "Address"
    assert "MAC" not in header
    assert "Kitchen" in short.stdout
    assert "true" in short.stdout

    assert long.exit_code == 0
    long_header = long.stdout.splitlines()[0]
    assert [label.strip() for label in long_header.split("|")] == [
        "Address",
        "MAC",
        "Alias",
        "Product",
        "Type",
        "Model",
        "Version",
        "Signal",
        "Latitude",
        "Longitude",
        "Mode",
        "On?",
    ]
    assert "schedule" in long.stdout


def test_status_uses_configured_port(monkeypatch, tmp_path, plug_sysinfo):
    config_path = tmp_path / "custom.toml"
    config_path.write_text("[query]\nport = 10000\nparallel_queries = 4\n")
    monkeypatch.setenv("TPLINKCTL_CONFIG", str(config_path))
    get_settings.cache_clear()
    calls = []
    monkeypatch.setattr(
        status_cmd, "run_batch", _fake_status_batch(calls, plug_sysinfo)
    )

    result = runner.invoke(app, ["status", "10.0.0.5"])

    assert result.exit_code == 0
    endpoints, config = calls[0]
    assert endpoints == [Endpoint(ipaddress.ip_address("10.0.0.5"), 10000)]
    assert config.parallel_queries == 4


def test_status_with_no_reachable_devices_prints_no_table(monkeypatch):
    async def _run_batch(endpoints, operation, config):
        return []

    monkeypatch.setattr(status_cmd, "run_batch", _run_batch)

    result = runner.invoke(app, ["status", "10.0.0.5"])

    assert result.exit_code == 0
    assert "Address" not in result.output


def test_reboot_passes_delay(monkeypatch, plug_sysinfo):
    delays = []

    def _reboot_with_delay(delay):
        delays.append(delay)
        return "reboot"

    async def _run_batch(endpoints, operation, config):
        assert operation == "reboot"
        return [
            ActionOutcome(
                endpoints[0], DeviceKind.HS100, plug_sysinfo, "Rebooted?", True
            ),
            ActionOutcome(
                endpoints[1],
                DeviceKind.UNKNOWN,
                plug_sysinfo,
                "Rebooted?",
                "Error: unknown devices do not support reboot",
            ),
        ]

    monkeypatch.setattr(actions_cmd, "reboot_with_delay", _reboot_with_delay)
    monkeypatch.setattr(actions_cmd, "run_batch", _run_batch)

    result = runner.invoke(
        app, ["--json", "reboot", "--delay", "5", "10.0.0.5", "10.0.0.6"]
    )

    assert result.exit_code == 0
    assert delays == [5]
    records = json.loads(result.stdout)
    assert [record["actioned"] for record in records] == [
        {"action": "Rebooted?", "result": True},
        {
            "action": "Rebooted?",
            "result": "Error: unknown devices do not support reboot",
        },
    ]
    assert records[1]["device"] == "unknown"


def test_reboot_rejects_negative_delay():
    result = runner.invoke(app, ["reboot", "--delay", "-1", "10.0.0.5"])

    assert result.exit_code == 2


def test_reboot_default_delay(monkeypatch):
    delays = []

    def _reboot_with_delay(delay):
        delays.append(delay)
        return "reboot"

    async def _run_batch(endpoints, operation, config):
        return []

    monkeypatch.setattr(actions_cmd, "reboot_with_delay", _reboot_with_delay)
    monkeypatch.setattr(actions_cmd, "run_batch", _run_batch)

    result = runner.invoke(app, ["reboot", "10.0.0.5"])

    assert result.exit_code == 0
    assert delays == [1]


def _fake_discover(timeouts, replies):
    async def _discover(listener, timeout, config):
        timeouts.append(timeout)
        for (host, port), reply in replies:
            listener.datagram_received(encode_message(reply), (host, port))

    return _discover


def test_discover_json_reports_raw_replies(monkeypatch):
    reply = MockTPLinkDevice(alias="Hall").handle(SYSINFO_REQUEST)
    timeouts = []
    monkeypatch.setattr(
        discover_cmd,
        "discover_devices",
        _fake_discover(timeouts, [(("10.0.0.5", 9999), reply)]),
    )

    result = runner.invoke(app, ["--json", "discover"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == [
        {"addr": "10.0.0.5:9999", "device": "HS100", "data": reply}
    ]
    assert timeouts == [3.0]


def test_discover_table(monkeypatch):
    replies = [
        (("10.0.0.9", 9999), MockTPLinkDevice(alias="Hall").handle(SYSINFO_REQUEST)),
        (
            ("10.0.0.5", 9999),
            MockTPLinkDevice(model="LB110(EU)", alias="Lamp", on=True).handle(
                SYSINFO_REQUEST
            ),
        ),
    ]
    monkeypatch.setattr(discover_cmd, "discover_devices", _fake_discover([], replies))

    result = runner.invoke(app, ["discover", "--timeout", "0.5"])

    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert len(lines) == 4
    assert lines[2].startswith(" 10.0.0.5:9999 ")
    assert "Lamp" in lines[2]
    assert "Hall" in lines[3]


def test_discover_timeout_never(monkeypatch):
    timeouts = []
    monkeypatch.setattr(discover_cmd, "discover_devices", _fake_discover(timeouts, []))

    result = runner.invoke(app, ["--json", "discover", "--timeout", "never"])

    assert result.exit_code == 0
    assert timeouts == [None]
    assert json.loads(result.stdout) == []


def test_discover_rejects_bad_timeout(monkeypatch):
    timeouts = []
    monkeypatch.setattr(discover_cmd, "discover_devices", _fake_discover(timeouts, []))

    result = runner.invoke(app, ["discover", "--timeout", "soon"])

    assert result.exit_code == 2
    assert timeouts == []


def test_config_init_and_show(monkeypatch, tmp_path):
    config_path = tmp_path / "tplinkctl.toml"
    monkeypatch.setenv("TPLINKCTL_CONFIG", str(config_path))

    created = runner.invoke(app, ["config", "init"])
    again = runner.invoke(app, ["config", "init"])
    shown = runner.invoke(app, ["config", "show"])

    assert created.exit_code == 0
    assert config_path.exists()
    assert "already exists" in again.stdout
    assert shown.exit_code == 0
    assert str(config_path) in shown.stdout
    assert "parallel_queries = 32" in shown.stdout


def test_config_show_defaults():
    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    assert "defaults" in result.stdout


def test_invalid_config_exits(monkeypatch, tmp_path):
    config_path = tmp_path / "broken.toml"
    write_settings(Settings(), config_path)
    config_path.write_text(config_path.read_text() + "\n[query]\nport = 1\n")
    monkeypatch.setenv("TPLINKCTL_CONFIG", str(config_path))

    result = runner.invoke(app, ["status", "10.0.0.5"])

    assert result.exit_code == 1
    assert "Invalid TOML" in result.output
