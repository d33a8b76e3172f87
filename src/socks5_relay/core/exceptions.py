"""Custom exceptions for the proxy server.

This module defines the exceptions raised while serving a SOCKS5 session.
They fall into four families:
- Protocol violations (bad version, command, address type, short reads)
- Authentication failures (bad credentials, unsupported sub-negotiation version)
- Dial failures (destination unreachable, refused, timed out)
- I/O failures (writes to the client or destination socket failed)

Every one of them is terminal for the session that raised it. The request
handler catches ``ProxyError``, logs it and closes the client connection.

Example:
    try:
        negotiate(stream, authenticator)
    except AuthenticationFailure as e:
        logger.warning(f"Authentication failed: {e}")
"""


class ProxyError(Exception):
    """Base exception for proxy errors."""


class ProtocolViolation(ProxyError):
    """Raised when the client breaks the SOCKS5 framing rules."""


class UnsupportedVersion(ProtocolViolation):
    """Raised when a version byte is not SOCKS version 5."""

    def __init__(self, version: int) -> None:
        super().__init__(f"Unsupported SOCKS version: {version}")
        self.version = version


class UnsupportedCommand(ProtocolViolation):
    """Raised for BIND, UDP ASSOCIATE or unknown commands."""

    def __init__(self, command: int) -> None:
        super().__init__(f"Unsupported command: {command:#04x}")
        self.command = command


class UnsupportedAddressType(ProtocolViolation):
    """Raised for address types that are known but not served (IPv6)."""

    def __init__(self, address_type: int) -> None:
        super().__init__(f"Unsupported address type: {address_type:#04x}")
        self.address_type = address_type


class InvalidAddressType(ProtocolViolation):
    """Raised for address types outside the protocol."""

    def __init__(self, address_type: int) -> None:
        super().__init__(f"Invalid address type: {address_type:#04x}")
        self.address_type = address_type


class ShortRead(ProtocolViolation):
    """Raised when the peer closes before sending the announced byte count."""

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(f"Expected {expected} bytes, got {received}")
        self.expected = expected
        self.received = received


class NoAcceptableMethod(ProtocolViolation):
    """Raised in strict mode when the client did not offer the configured method."""

    def __init__(self, method: int, offered: bytes) -> None:
        super().__init__(f"Method {method:#04x} not offered by client (offered: {offered.hex()})")
        self.method = method
        self.offered = offered


class AuthenticationFailure(ProxyError):
    """Base exception for failed authentication exchanges."""


class UnsupportedAuthVersion(AuthenticationFailure):
    """Raised when the username/password sub-negotiation version is not 1."""

    def __init__(self, version: int) -> None:
        super().__init__(f"Unsupported auth version: {version}")
        self.version = version


class InvalidCredentials(AuthenticationFailure):
    """Raised after the failure status has been sent to the client."""


class DialFailure(ProxyError):
    """Base exception for outbound connection failures."""


class DialFailed(DialFailure):
    """Raised when the destination cannot be reached."""

    def __init__(self, host: str, port: int, cause: Exception) -> None:
        super().__init__(f"Dial {host}:{port} failed: {cause}")
        self.host = host
        self.port = port
        self.cause = cause


class IOFailure(ProxyError):
    """Base exception for socket write failures."""


class WriteFailed(IOFailure):
    """Raised when writing to a stream fails."""


class ReplyWriteFailed(IOFailure):
    """Raised when the CONNECT reply could not be delivered to the client."""
