import pytest

from socks5_relay.core.config import DEFAULT_PORT, ProxyConfig
from socks5_relay.core.lib.auth import AuthMethod, NoAuthAuthenticator, UserPassAuthenticator


def test_defaults():
    config = ProxyConfig()
    assert config.port == DEFAULT_PORT == 1080
    assert config.auth_method == AuthMethod.USERNAME_PASSWORD
    assert config.connect_timeout is None
    assert config.io_timeout is None
    assert not config.strict_methods


def test_default_authenticator_accepts_reference_pair():
    authenticator = ProxyConfig().build_authenticator()
    assert isinstance(authenticator, UserPassAuthenticator)
    assert authenticator.credentials.valid(b"123", b"123")


def test_no_auth_authenticator():
    config = ProxyConfig(auth_method=AuthMethod.NO_AUTH, username="")
    assert isinstance(config.build_authenticator(), NoAuthAuthenticator)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"port": 70000},
        {"port": -1},
        {"username": ""},
        {"password": "x" * 256},
        {"connect_timeout": 0},
        {"io_timeout": -1.0},
        {"auth_method": AuthMethod.NO_ACCEPTABLE},
    ],
)
def test_invalid(kwargs):
    with pytest.raises(ValueError):
        ProxyConfig(**kwargs)
