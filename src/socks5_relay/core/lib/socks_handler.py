"""SOCKS protocol handler implementation for the proxy server.

This module implements the request phase of SOCKS5 (RFC 1928) and the relay:
- CONNECT request parsing (IPv4 and domain name destinations)
- Dialing the destination and writing the reply
- Bi-directional data forwarding with coordinated teardown
- The ``socketserver`` request handler tying every phase together

The handler supports:
- CONNECT command only (BIND and UDP ASSOCIATE are rejected)
- IPv4 addresses and domain names (IPv6 is rejected)
- Optional dial and handshake timeouts
- Connection statistics tracking

Example:
    # The handler is automatically used by the SocksProxy server class
    server = SocksProxy((host, port), SocksHandler, config)
    server.serve_forever()
"""

import errno
import socket
import socketserver
import struct
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Final

from loguru import logger

from socks5_relay.core.exceptions import (
    DialFailed,
    InvalidAddressType,
    ProxyError,
    ReplyWriteFailed,
    UnsupportedAddressType,
    UnsupportedCommand,
    UnsupportedVersion,
    WriteFailed,
)
from socks5_relay.core.lib.auth import SOCKS_VERSION, negotiate
from socks5_relay.core.lib.proxy_stats import proxy_stats
from socks5_relay.core.lib.stream import DuplexStream, SocketStream
from socks5_relay.core.utils.prompt.socks_ui import socks_ui

# SOCKS protocol constants
CONNECT_CMD: Final = 1
ADDR_TYPE_IPV4: Final = 1
ADDR_TYPE_DOMAIN: Final = 3
ADDR_TYPE_IPV6: Final = 4

# Response codes
RESP_SUCCESS: Final = 0
RESP_GENERAL_FAILURE: Final = 1
RESP_NETWORK_UNREACHABLE: Final = 3
RESP_HOST_UNREACHABLE: Final = 4
RESP_CONNECTION_REFUSED: Final = 5

# Bound address reported in every reply
# TODO: report the dialed socket's real local endpoint (SocketStream.local_address) for full RFC 1928 replies
BIND_ADDR_ZERO: Final = b"\x00\x00\x00\x00"
BIND_PORT_ZERO: Final = 0


@dataclass(frozen=True)
class ConnectRequest:
    """Parsed CONNECT request."""

    version: int
    command: int
    address_type: int
    host: str
    port: int

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass
class Session:
    """State of one client session, owned by its handler thread."""

    client: SocketStream
    destination: SocketStream | None = None
    authenticated: bool = False
    request: ConnectRequest | None = field(default=None, repr=False)

    def close(self) -> None:
        self.client.close()
        if self.destination is not None:
            self.destination.close()


def encode_reply(status: int) -> bytes:
    """Encode a 10-byte CONNECT reply with a zero-filled bound address."""
    return struct.pack("!BBBB", SOCKS_VERSION, status, 0, ADDR_TYPE_IPV4) + BIND_ADDR_ZERO + struct.pack("!H", BIND_PORT_ZERO)


def read_connect_request(stream: DuplexStream) -> ConnectRequest:
    """Read and validate a CONNECT request.

    Raises:
        UnsupportedVersion: If the version byte is not 5
        UnsupportedCommand: For anything but CONNECT
        UnsupportedAddressType: For IPv6, before reading the address
        InvalidAddressType: For unknown address types
        ShortRead: If the client disconnects mid-request
    """
    version, cmd, _, addr_type = struct.unpack("!BBBB", stream.read_exact(4))
    if version != SOCKS_VERSION:
        raise UnsupportedVersion(version)
    if cmd != CONNECT_CMD:
        raise UnsupportedCommand(cmd)

    if addr_type == ADDR_TYPE_IPV4:
        host = socket.inet_ntoa(stream.read_exact(4))
    elif addr_type == ADDR_TYPE_DOMAIN:
        (domain_len,) = struct.unpack("!B", stream.read_exact(1))
        host = stream.read_exact(domain_len).decode(errors="replace")
    elif addr_type == ADDR_TYPE_IPV6:
        raise UnsupportedAddressType(addr_type)
    else:
        raise InvalidAddressType(addr_type)

    (port,) = struct.unpack("!H", stream.read_exact(2))
    return ConnectRequest(version, cmd, addr_type, host, port)


def _dial_failure_status(error: Exception) -> int:
    if isinstance(error, ConnectionRefusedError):
        return RESP_CONNECTION_REFUSED
    # UnicodeError: the idna codec rejected the host name
    if isinstance(error, (socket.gaierror, TimeoutError, UnicodeError)):
        return RESP_HOST_UNREACHABLE
    if not isinstance(error, OSError):
        return RESP_GENERAL_FAILURE
    if error.errno == errno.ENETUNREACH:
        return RESP_NETWORK_UNREACHABLE
    if error.errno == errno.EHOSTUNREACH:
        return RESP_HOST_UNREACHABLE
    return RESP_GENERAL_FAILURE


def dial(host: str, port: int, timeout: float | None = None) -> SocketStream:
    """Open a TCP connection to the destination.

    Name resolution is left to ``socket.create_connection``.
    """
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except (OSError, UnicodeError) as e:
        raise DialFailed(host, port, e) from e
    # Relay reads block indefinitely, only the connect itself is bounded
    sock.settimeout(None)
    return SocketStream(sock, name=f"{host}:{port}")


def establish_connect(
    stream: DuplexStream, *, connect_timeout: float | None = None
) -> tuple[SocketStream, ConnectRequest]:
    """Handle the CONNECT phase: parse, dial and reply.

    Args:
        stream: Authenticated client stream
        connect_timeout: Seconds to wait for the destination, ``None`` to wait forever

    Returns:
        The connected destination stream and the parsed request

    Raises:
        ProtocolViolation: If the request is malformed or unsupported
        DialFailed: If the destination cannot be reached
        ReplyWriteFailed: If the success reply cannot be written
    """
    request = read_connect_request(stream)
    logger.info(f"{stream} -> {request.address}")

    try:
        destination = dial(request.host, request.port, connect_timeout)
    except DialFailed as e:
        try:
            stream.write_all(encode_reply(_dial_failure_status(e.cause)))
        except WriteFailed as write_error:
            logger.debug(f"Could not send failure reply: {write_error}")
        raise

    try:
        stream.write_all(encode_reply(RESP_SUCCESS))
    except WriteFailed as e:
        destination.close()
        raise ReplyWriteFailed(str(e)) from e

    return destination, request


def _forward(src: SocketStream, dst: SocketStream, account: Callable[[int], None]) -> None:
    """Copy src to dst until either side ends, then close both."""
    try:
        while data := src.read_some():
            dst.write_all(data)
            account(len(data))
    except (OSError, ProxyError) as e:
        logger.debug(f"Forward {src} -> {dst} ended: {e}")
    finally:
        src.close()
        dst.close()


def relay(client: SocketStream, destination: SocketStream) -> None:
    """Forward data between client and destination until both directions end.

    Each direction closes both streams when it finishes, which makes the
    blocked read in the other direction return.
    """
    upstream = threading.Thread(
        target=_forward,
        args=(client, destination, lambda n: proxy_stats.update_bytes(sent=n, received=0)),
        name=f"relay {client} -> {destination}",
        daemon=True,
    )
    downstream = threading.Thread(
        target=_forward,
        args=(destination, client, lambda n: proxy_stats.update_bytes(sent=0, received=n)),
        name=f"relay {destination} -> {client}",
        daemon=True,
    )
    upstream.start()
    downstream.start()
    upstream.join()
    downstream.join()


class SocksHandler(socketserver.BaseRequestHandler):
    """Handle incoming SOCKS5 connections."""

    def handle(self) -> None:
        """Run negotiate, connect and relay for one client."""
        client_addr = self.client_address
        config = self.server.config
        session = Session(client=SocketStream(self.request))
        socks_ui.connection_started(client_addr)
        proxy_stats.connection_started()
        try:
            session.client.set_timeout(config.io_timeout)
            negotiate(session.client, self.server.authenticator, strict=config.strict_methods)
            session.authenticated = True

            session.destination, session.request = establish_connect(
                session.client, connect_timeout=config.connect_timeout
            )
            socks_ui.destination_connected(client_addr, session.request.address)

            session.client.set_timeout(None)
            relay(session.client, session.destination)
            logger.debug(f"Session {session.client} -> {session.request.address} closed")
        except ProxyError as exc:
            logger.warning(f"Session {client_addr[0]}:{client_addr[1]} aborted: {exc}")
        except Exception:
            logger.exception(f"Error handling SOCKS connection from {client_addr[0]}:{client_addr[1]}")
        finally:
            session.close()
            socks_ui.connection_ended(client_addr)
            proxy_stats.connection_ended()
