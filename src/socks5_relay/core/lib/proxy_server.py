"""SOCKS proxy server implementation.

This module implements the threaded accept loop of the proxy server:
- One daemon thread per accepted client
- Automatic address reuse
- Bind address validation
- Clean shutdown handling
- Optional live UI

Example:
    # Listen on all interfaces with username/password authentication
    create_proxy_server(ProxyConfig(port=1080))
"""

import contextlib
import socketserver
import threading
from typing import TYPE_CHECKING

from loguru import logger
from rich.console import Console

from socks5_relay.core.network import is_local_address
from socks5_relay.core.utils.prompt import proxy_ui

from .socks_handler import SocksHandler

if TYPE_CHECKING:
    from socks5_relay.core.config import ProxyConfig

console = Console()


class SocksProxy(socketserver.ThreadingMixIn, socketserver.TCPServer):
    """SOCKS proxy server implementation."""

    allow_reuse_address = True
    daemon_threads = True
    request_queue_size = 100

    def __init__(
        self,
        server_address: tuple[str, int],
        handler_class: type[socketserver.BaseRequestHandler],
        config: "ProxyConfig",
        bind_and_activate: bool = True,
    ) -> None:
        self.config = config
        # Built once and shared, credential stores are read-only
        self.authenticator = config.build_authenticator()
        super().__init__(server_address, handler_class, bind_and_activate)


def start_background_server(config: "ProxyConfig") -> tuple[SocksProxy, threading.Thread]:
    """Start a server in a daemon thread and return it with its thread.

    The caller stops it with ``server.shutdown()`` followed by ``server.server_close()``.
    """
    server = SocksProxy((config.host, config.port), SocksHandler, config)
    thread = threading.Thread(target=server.serve_forever, name="socks5-accept", daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    logger.info(f"Server listening on {host}:{port}")
    return server, thread


def run_server(config: "ProxyConfig") -> None:
    """Serve until interrupted.

    Args:
        config: Server configuration
    """
    server: SocksProxy | None = None
    try:
        server = SocksProxy((config.host, config.port), SocksHandler, config)
        host, port = server.server_address[:2]
        logger.info(f"Server started on {host}:{port} (auth: {config.auth_method.name})")
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server stopping")
    finally:
        if server:
            with contextlib.suppress(Exception):
                server.server_close()
                logger.info("Server closed")


def create_proxy_server(config: "ProxyConfig", show_ui: bool = False) -> None:
    """Validate the bind address, optionally start the UI and serve.

    Args:
        config: Server configuration
        show_ui: Display the live statistics panel

    Raises:
        ValueError: If ``config.host`` is not assigned to a local interface
    """
    if not is_local_address(config.host):
        msg = f"{config.host} is not assigned to any local interface"
        raise ValueError(msg)

    if show_ui:
        ui_thread = proxy_ui.create_proxy_ui(config.host, config.port)
        ui_thread.start()

    console.print(f"[bold green]SOCKS5 proxy listening on {config.host}:{config.port}")
    run_server(config)
