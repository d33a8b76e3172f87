import socket
from types import SimpleNamespace

import pytest
from typer.testing import CliRunner

from socks5_relay import __version__
from socks5_relay.cmd import cli
from socks5_relay.core.lib.auth import AuthMethod
from socks5_relay.core.network import is_local_address, list_interfaces

runner = CliRunner()


@pytest.fixture
def captured(monkeypatch):
    """Replace logging set-up and the server with recorders."""
    calls = []
    monkeypatch.setattr(cli, "configure_logging", lambda debug=False: None)
    monkeypatch.setattr(cli, "create_proxy_server", lambda config, show_ui=False: calls.append((config, show_ui)))
    return calls


@pytest.fixture
def fake_interfaces(monkeypatch):
    addrs = {
        "lo": [SimpleNamespace(family=socket.AF_INET, address="127.0.0.1")],
        "eth0": [
            SimpleNamespace(family=socket.AF_INET6, address="fe80::1"),
            SimpleNamespace(family=socket.AF_INET, address="192.168.1.20"),
        ],
        "wg0": [SimpleNamespace(family=socket.AF_INET6, address="fd00::2")],
    }
    stats = {"lo": SimpleNamespace(isup=True), "eth0": SimpleNamespace(isup=False)}
    monkeypatch.setattr("socks5_relay.core.network.psutil.net_if_addrs", lambda: addrs)
    monkeypatch.setattr("socks5_relay.core.network.psutil.net_if_stats", lambda: stats)


def test_version():
    result = runner.invoke(cli.app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_proxy_defaults(captured):
    result = runner.invoke(cli.app, ["proxy"])
    assert result.exit_code == 0, result.output
    config, show_ui = captured[0]
    assert config.port == 1080
    assert config.auth_method == AuthMethod.USERNAME_PASSWORD
    assert not show_ui


def test_proxy_options(captured):
    result = runner.invoke(
        cli.app,
        ["proxy", "--host", "127.0.0.1", "--port", "1081", "--auth", "none", "--connect-timeout", "2.5", "--ui"],
    )
    assert result.exit_code == 0, result.output
    config, show_ui = captured[0]
    assert config.host == "127.0.0.1"
    assert config.port == 1081
    assert config.auth_method == AuthMethod.NO_AUTH
    assert config.connect_timeout == 2.5
    assert show_ui


def test_proxy_environment(captured):
    result = runner.invoke(
        cli.app,
        ["proxy"],
        env={"SOCKS5_RELAY_USERNAME": "alice", "SOCKS5_RELAY_PASSWORD": "secret", "SOCKS5_RELAY_PORT": "9050"},
    )
    assert result.exit_code == 0, result.output
    config, _ = captured[0]
    assert (config.username, config.password, config.port) == ("alice", "secret", 9050)


def test_proxy_invalid_config(captured):
    result = runner.invoke(cli.app, ["proxy", "--username", ""])
    assert result.exit_code == 1
    assert not captured


def test_proxy_start_failure(monkeypatch):
    def fail(config, show_ui=False):
        raise OSError("Address already in use")

    monkeypatch.setattr(cli, "configure_logging", lambda debug=False: None)
    monkeypatch.setattr(cli, "create_proxy_server", fail)

    result = runner.invoke(cli.app, ["proxy"])
    assert result.exit_code == 1
    assert "Address already in use" in result.output


def test_interfaces_command(fake_interfaces):
    result = runner.invoke(cli.app, ["interfaces"])
    assert result.exit_code == 0
    assert "192.168.1.20" in result.output
    assert "wg0" not in result.output


def test_list_interfaces(fake_interfaces):
    interfaces = {iface.name: iface for iface in list_interfaces()}
    assert set(interfaces) == {"lo", "eth0"}
    assert interfaces["lo"].is_up
    assert not interfaces["eth0"].is_up


def test_is_local_address(fake_interfaces):
    assert is_local_address("0.0.0.0")
    assert is_local_address("192.168.1.20")
    assert not is_local_address("10.0.0.1")
