"""Command-line interface for the SOCKS5 proxy server.

This module provides the main command-line interface for the proxy server, handling:
- Command-line and environment variable parsing
- Logging set-up
- Server initialization
- Error reporting

The CLI is built using Typer. Every ``proxy`` option can also be set through a
``SOCKS5_RELAY_*`` environment variable.

Example:
    # Run from command line:
    $ socks5-relay proxy --port 1080 --auth password --username alice --password secret
    $ SOCKS5_RELAY_AUTH=none python -m socks5_relay proxy --host 127.0.0.1
"""

from enum import Enum

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from socks5_relay import __version__
from socks5_relay.core.config import DEFAULT_HOST, DEFAULT_PASSWORD, DEFAULT_PORT, DEFAULT_USERNAME
from socks5_relay.core.network import list_interfaces
from socks5_relay.core.proxy import AuthMethod, ProxyConfig, create_proxy_server
from socks5_relay.core.utils.log_config import LOG_DIR, configure_logging

console = Console()
app = typer.Typer(help="SOCKS5 proxy server with username/password authentication", no_args_is_help=True)

ENV_PREFIX = "SOCKS5_RELAY_"


class AuthChoice(str, Enum):
    """Authentication method names accepted on the command line."""

    none = "none"
    password = "password"

    def to_method(self) -> AuthMethod:
        if self is AuthChoice.none:
            return AuthMethod.NO_AUTH
        return AuthMethod.USERNAME_PASSWORD


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[cyan]SOCKS5 Relay v{__version__}[/cyan]")


@app.command()
def interfaces() -> None:
    """List local IPv4 addresses the proxy can bind to."""
    table = Table(title="Network Interfaces")
    table.add_column("Interface", style="cyan")
    table.add_column("IPv4 Address", style="green")
    table.add_column("Status")

    for iface in list_interfaces():
        table.add_row(iface.name, iface.ip, "[green]up" if iface.is_up else "[red]down")

    console.print(table)


@app.command(name="proxy")
def start_proxy(
    host: str = typer.Option(DEFAULT_HOST, "--host", envvar=f"{ENV_PREFIX}HOST", help="Address to listen on"),
    port: int = typer.Option(
        DEFAULT_PORT, "--port", "-p", min=0, max=65535, envvar=f"{ENV_PREFIX}PORT", help="Port to listen on"
    ),
    auth: AuthChoice = typer.Option(
        AuthChoice.password, "--auth", envvar=f"{ENV_PREFIX}AUTH", help="Authentication method to require"
    ),
    username: str = typer.Option(DEFAULT_USERNAME, "--username", "-u", envvar=f"{ENV_PREFIX}USERNAME"),
    password: str = typer.Option(DEFAULT_PASSWORD, "--password", envvar=f"{ENV_PREFIX}PASSWORD"),
    strict_methods: bool = typer.Option(
        False,
        "--strict-methods",
        envvar=f"{ENV_PREFIX}STRICT_METHODS",
        help="Reject clients that do not offer the configured method",
    ),
    connect_timeout: float | None = typer.Option(
        None, "--connect-timeout", envvar=f"{ENV_PREFIX}CONNECT_TIMEOUT", help="Seconds to wait when dialing"
    ),
    io_timeout: float | None = typer.Option(
        None, "--io-timeout", envvar=f"{ENV_PREFIX}IO_TIMEOUT", help="Seconds to wait per handshake read/write"
    ),
    ui: bool = typer.Option(False, "--ui", envvar=f"{ENV_PREFIX}UI", help="Show live statistics"),
    debug: bool = typer.Option(False, "--debug", envvar=f"{ENV_PREFIX}DEBUG", help="Enable debug logging"),
) -> None:
    """Start the SOCKS5 proxy server."""
    configure_logging(debug=debug)

    try:
        config = ProxyConfig(
            host=host,
            port=port,
            auth_method=auth.to_method(),
            username=username,
            password=password,
            strict_methods=strict_methods,
            connect_timeout=connect_timeout,
            io_timeout=io_timeout,
        )
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}")
        raise typer.Exit(1) from e

    if config.auth_method == AuthMethod.USERNAME_PASSWORD and (username, password) == (
        DEFAULT_USERNAME,
        DEFAULT_PASSWORD,
    ):
        logger.warning("Using the built-in default credentials, pass --username/--password to change them")

    logger.info(f"Starting SOCKS5 proxy server (logs in {LOG_DIR})")
    try:
        create_proxy_server(config, show_ui=ui)
    except KeyboardInterrupt:
        logger.info("Shutting down proxy server")
    except (OSError, ValueError) as e:
        logger.error(f"Could not start proxy server: {e}")
        console.print(f"[red]Error: {e}")
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
