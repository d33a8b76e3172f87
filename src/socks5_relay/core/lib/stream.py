"""Duplex byte streams used by the SOCKS5 handshake and the relay.

The handshake only ever needs three primitives: read an exact number of
bytes, write a whole buffer and close. ``SocketStream`` provides them on top of
a connected TCP socket and adds ``read_some`` for the relay loop.
"""

import contextlib
import socket
import threading
from typing import Protocol

from loguru import logger

from socks5_relay.core.exceptions import ShortRead, WriteFailed

BUFFER_SIZE = 4096


class DuplexStream(Protocol):
    """Byte stream contract consumed by the negotiator and establisher."""

    def read_exact(self, size: int) -> bytes: ...

    def write_all(self, data: bytes) -> None: ...

    def close(self) -> None: ...


class SocketStream:
    """Connected TCP socket with exact-read semantics."""

    def __init__(self, sock: socket.socket, name: str | None = None) -> None:
        self.sock = sock
        self.name = name or _describe_peer(sock)
        self._closed = False
        self._close_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"SocketStream({self.name})"

    @property
    def closed(self) -> bool:
        return self._closed

    def read_exact(self, size: int) -> bytes:
        """Read exactly ``size`` bytes.

        Raises:
            ShortRead: If the peer closes (or the socket fails) before ``size``
                bytes have arrived.
        """
        buf = bytearray()
        while len(buf) < size:
            try:
                chunk = self.sock.recv(size - len(buf))
            except OSError as e:
                logger.debug(f"{self.name}: read failed after {len(buf)}/{size} bytes: {e}")
                raise ShortRead(size, len(buf)) from e
            if not chunk:
                raise ShortRead(size, len(buf))
            buf += chunk
        return bytes(buf)

    def read_some(self, size: int = BUFFER_SIZE) -> bytes:
        """Read up to ``size`` bytes, returning ``b""`` at end of stream."""
        return self.sock.recv(size)

    def write_all(self, data: bytes) -> None:
        try:
            self.sock.sendall(data)
        except OSError as e:
            raise WriteFailed(f"{self.name}: write failed: {e}") from e

    def set_timeout(self, timeout: float | None) -> None:
        self.sock.settimeout(timeout)

    def local_address(self) -> tuple[str, int]:
        return self.sock.getsockname()[:2]

    def close(self) -> None:
        """Shut the socket down and close it. Safe to call from any thread, any number of times."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        # shutdown wakes up a recv() blocked in another thread, close() alone does not
        with contextlib.suppress(OSError):
            self.sock.shutdown(socket.SHUT_RDWR)
        with contextlib.suppress(OSError):
            self.sock.close()


def _describe_peer(sock: socket.socket) -> str:
    try:
        host, port = sock.getpeername()[:2]
    except (OSError, ValueError):
        return "unconnected"
    return f"{host}:{port}"
