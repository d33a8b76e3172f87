"""Server configuration.

``ProxyConfig`` collects every setting a running server needs. The CLI fills it
from command-line options and environment variables, the server keeps one
instance and every request handler reads from it.
"""

from dataclasses import dataclass
from typing import Final

from socks5_relay.core.lib.auth import (
    Authenticator,
    AuthMethod,
    NoAuthAuthenticator,
    StaticCredentials,
    UserPassAuthenticator,
)

DEFAULT_HOST: Final = "0.0.0.0"
DEFAULT_PORT: Final = 1080
DEFAULT_USERNAME: Final = "123"
DEFAULT_PASSWORD: Final = "123"


@dataclass
class ProxyConfig:
    """Runtime configuration of the SOCKS5 server.

    Attributes:
        host: Address to listen on
        port: Port to listen on, 0 picks a free one
        auth_method: Method announced to every client
        username: Accepted username for ``USERNAME_PASSWORD``
        password: Accepted password for ``USERNAME_PASSWORD``
        strict_methods: Answer NO_ACCEPTABLE when the client did not offer ``auth_method``
        connect_timeout: Seconds allowed for dialing a destination, ``None`` for no limit
        io_timeout: Seconds allowed per handshake read or write, ``None`` for no limit
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    auth_method: AuthMethod = AuthMethod.USERNAME_PASSWORD
    username: str = DEFAULT_USERNAME
    password: str = DEFAULT_PASSWORD
    strict_methods: bool = False
    connect_timeout: float | None = None
    io_timeout: float | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"Port out of range: {self.port}")
        if self.auth_method not in (AuthMethod.NO_AUTH, AuthMethod.USERNAME_PASSWORD):
            raise ValueError(f"Unsupported authentication method: {self.auth_method!r}")
        if self.auth_method == AuthMethod.USERNAME_PASSWORD:
            # RFC 1929 length fields are a single byte
            for label, value in (("username", self.username), ("password", self.password)):
                if not 1 <= len(value.encode()) <= 0xFF:
                    raise ValueError(f"{label} must be 1-255 bytes long")
        for label, value in (("connect_timeout", self.connect_timeout), ("io_timeout", self.io_timeout)):
            if value is not None and value <= 0:
                raise ValueError(f"{label} must be positive")

    def build_authenticator(self) -> Authenticator:
        """Create the authenticator for the configured method."""
        if self.auth_method == AuthMethod.NO_AUTH:
            return NoAuthAuthenticator()
        return UserPassAuthenticator(StaticCredentials({self.username: self.password}))
