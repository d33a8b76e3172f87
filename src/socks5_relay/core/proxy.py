"""Core proxy functionality and main entry point for the SOCKS5 server.

This module exposes the public API of the proxy:
- The three protocol entry points (``negotiate``, ``establish_connect``, ``relay``)
- The configuration object
- Server start-up helpers

Example:
    from socks5_relay.core.proxy import ProxyConfig, create_proxy_server

    # Start a SOCKS5 proxy on localhost:1080 without authentication
    create_proxy_server(ProxyConfig(host="127.0.0.1", auth_method=AuthMethod.NO_AUTH))
"""

from .config import ProxyConfig
from .lib import (
    AuthMethod,
    create_proxy_server,
    establish_connect,
    negotiate,
    relay,
    start_background_server,
)

__all__ = [
    "AuthMethod",
    "create_proxy_server",
    "establish_connect",
    "negotiate",
    "ProxyConfig",
    "relay",
    "start_background_server",
]
