"""SOCKS5 method negotiation and authentication (RFC 1928, RFC 1929).

This module implements the first phase of every session:
- Reading the client's greeting (version and offered methods)
- Announcing the configured authentication method
- Running the username/password sub-negotiation when required

The server does not pick a method from the offered set. The method is fixed
by configuration and announced regardless of what the client offered, unless
``strict`` is requested, in which case an unoffered method is answered with
``NO_ACCEPTABLE`` (0xFF).

Credentials are checked through a ``CredentialStore`` so the single static
pair used by default can be swapped for another store without touching the
protocol code.

Example:
    authenticator = UserPassAuthenticator(StaticCredentials({"alice": "secret"}))
    negotiate(SocketStream(client_socket), authenticator)
"""

import hmac
import struct
from collections.abc import Mapping
from enum import IntEnum
from typing import Final, Protocol

from loguru import logger

from socks5_relay.core.exceptions import (
    InvalidCredentials,
    NoAcceptableMethod,
    UnsupportedAuthVersion,
    UnsupportedVersion,
)
from socks5_relay.core.lib.stream import DuplexStream

SOCKS_VERSION: Final = 5
USER_AUTH_VERSION: Final = 1

AUTH_SUCCESS: Final = 0
AUTH_FAILURE: Final = 1


class AuthMethod(IntEnum):
    """Authentication method identifiers announced in the method reply."""

    NO_AUTH = 0x00
    USERNAME_PASSWORD = 0x02
    NO_ACCEPTABLE = 0xFF


class CredentialStore(Protocol):
    """Anything that can tell whether a username/password pair is valid."""

    def valid(self, username: bytes, password: bytes) -> bool: ...


class StaticCredentials:
    """Fixed username to password mapping.

    The mapping is never mutated after construction, so one instance can be
    shared by every session thread.
    """

    def __init__(self, credentials: Mapping[str | bytes, str | bytes]) -> None:
        self._credentials = {_to_bytes(user): _to_bytes(password) for user, password in credentials.items()}

    def __len__(self) -> int:
        return len(self._credentials)

    def valid(self, username: bytes, password: bytes) -> bool:
        expected = self._credentials.get(username)
        if expected is None:
            return False
        return hmac.compare_digest(expected, password)


class Authenticator:
    """Base class for authentication methods."""

    method: AuthMethod

    def authenticate(self, stream: DuplexStream) -> None:
        """Run the method-specific exchange after the method reply was sent."""
        raise NotImplementedError


class NoAuthAuthenticator(Authenticator):
    """Method 0x00: nothing to exchange."""

    method = AuthMethod.NO_AUTH

    def authenticate(self, stream: DuplexStream) -> None:
        return None


class UserPassAuthenticator(Authenticator):
    """Method 0x02: username/password sub-negotiation."""

    method = AuthMethod.USERNAME_PASSWORD

    def __init__(self, credentials: CredentialStore) -> None:
        self.credentials = credentials

    def authenticate(self, stream: DuplexStream) -> None:
        """Read the credentials, validate them and send the status reply.

        Raises:
            UnsupportedAuthVersion: If the sub-negotiation version is not 1
            InvalidCredentials: After the failure status has been written
            ShortRead: If the client disconnects mid-exchange
        """
        version, user_len = struct.unpack("!BB", stream.read_exact(2))
        if version != USER_AUTH_VERSION:
            raise UnsupportedAuthVersion(version)

        username = stream.read_exact(user_len)
        (pass_len,) = struct.unpack("!B", stream.read_exact(1))
        password = stream.read_exact(pass_len)

        if self.credentials.valid(username, password):
            stream.write_all(struct.pack("!BB", USER_AUTH_VERSION, AUTH_SUCCESS))
            logger.debug(f"User {username!r} authenticated")
            return

        # The client must see the failure status before the session is torn down
        stream.write_all(struct.pack("!BB", USER_AUTH_VERSION, AUTH_FAILURE))
        raise InvalidCredentials(f"Invalid credentials for user {username!r}")


def negotiate(stream: DuplexStream, authenticator: Authenticator, *, strict: bool = False) -> None:
    """Perform SOCKS5 method negotiation and authentication.

    Args:
        stream: Client stream, fresh from accept
        authenticator: The configured authentication method
        strict: Reject clients that did not offer the configured method

    Raises:
        UnsupportedVersion: If the greeting is not SOCKS5
        NoAcceptableMethod: In strict mode, when the method was not offered
        AuthenticationFailure: If the method-specific exchange fails
        ShortRead: If the client disconnects mid-handshake
    """
    version, nmethods = struct.unpack("!BB", stream.read_exact(2))
    if version != SOCKS_VERSION:
        raise UnsupportedVersion(version)

    offered = stream.read_exact(nmethods)
    logger.debug(f"Client offered methods {list(offered)}, using {authenticator.method.name}")

    if strict and authenticator.method not in offered:
        stream.write_all(struct.pack("!BB", SOCKS_VERSION, AuthMethod.NO_ACCEPTABLE))
        raise NoAcceptableMethod(authenticator.method, offered)

    stream.write_all(struct.pack("!BB", SOCKS_VERSION, authenticator.method))
    authenticator.authenticate(stream)


def _to_bytes(value: str | bytes) -> bytes:
    return value.encode() if isinstance(value, str) else value
