"""Core proxy library components."""

from .auth import Authenticator, AuthMethod, NoAuthAuthenticator, StaticCredentials, UserPassAuthenticator, negotiate
from .proxy_server import SocksProxy, create_proxy_server, run_server, start_background_server
from .proxy_stats import ProxyStats
from .socks_handler import ConnectRequest, SocksHandler, establish_connect, relay
from .stream import SocketStream

__all__ = [
    "Authenticator",
    "AuthMethod",
    "ConnectRequest",
    "create_proxy_server",
    "establish_connect",
    "negotiate",
    "NoAuthAuthenticator",
    "ProxyStats",
    "relay",
    "run_server",
    "SocketStream",
    "SocksHandler",
    "SocksProxy",
    "start_background_server",
    "StaticCredentials",
    "UserPassAuthenticator",
]
