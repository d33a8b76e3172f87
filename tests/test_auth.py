import pytest

from socks5_relay.core.exceptions import (
    AuthenticationFailure,
    InvalidCredentials,
    NoAcceptableMethod,
    ProtocolViolation,
    ShortRead,
    UnsupportedAuthVersion,
    UnsupportedVersion,
)
from socks5_relay.core.lib.auth import (
    AuthMethod,
    NoAuthAuthenticator,
    StaticCredentials,
    UserPassAuthenticator,
    negotiate,
)

from .conftest import recv_exact


def userpass_request(username: bytes, password: bytes) -> bytes:
    return b"\x01" + bytes([len(username)]) + username + bytes([len(password)]) + password


@pytest.fixture
def userpass():
    return UserPassAuthenticator(StaticCredentials({"alice": "secret"}))


class TestStaticCredentials:
    def test_valid_pair(self):
        creds = StaticCredentials({"123": "123"})
        assert creds.valid(b"123", b"123")

    def test_wrong_password(self):
        creds = StaticCredentials({"123": "123"})
        assert not creds.valid(b"123", b"124")

    def test_unknown_user(self):
        creds = StaticCredentials({"123": "123"})
        assert not creds.valid(b"root", b"123")

    def test_bytes_keys(self):
        creds = StaticCredentials({b"bob": b"\xffpw"})
        assert creds.valid(b"bob", b"\xffpw")
        assert len(creds) == 1


def test_no_auth_reply(stream_pair):
    stream, client = stream_pair
    client.sendall(b"\x05\x02\x00\x02")

    negotiate(stream, NoAuthAuthenticator())

    assert recv_exact(client, 2) == b"\x05\x00"
    assert not stream.closed


def test_userpass_success(stream_pair, userpass):
    stream, client = stream_pair
    client.sendall(b"\x05\x01\x02" + userpass_request(b"alice", b"secret"))

    negotiate(stream, userpass)

    assert recv_exact(client, 4) == b"\x05\x02\x01\x00"


def test_userpass_failure_status_sent_before_error(stream_pair, userpass):
    stream, client = stream_pair
    client.sendall(b"\x05\x01\x02" + userpass_request(b"alice", b"wrong"))

    with pytest.raises(InvalidCredentials):
        negotiate(stream, userpass)

    assert recv_exact(client, 4) == b"\x05\x02\x01\x01"


def test_userpass_announced_even_if_not_offered(stream_pair, userpass):
    stream, client = stream_pair
    client.sendall(b"\x05\x01\x00" + userpass_request(b"alice", b"secret"))

    negotiate(stream, userpass)

    assert recv_exact(client, 4) == b"\x05\x02\x01\x00"


def test_strict_rejects_unoffered_method(stream_pair, userpass):
    stream, client = stream_pair
    client.sendall(b"\x05\x01\x00")

    with pytest.raises(NoAcceptableMethod) as excinfo:
        negotiate(stream, userpass, strict=True)

    assert isinstance(excinfo.value, ProtocolViolation)
    assert excinfo.value.offered == b"\x00"
    assert recv_exact(client, 2) == bytes([0x05, AuthMethod.NO_ACCEPTABLE])


def test_strict_accepts_offered_method(stream_pair):
    stream, client = stream_pair
    client.sendall(b"\x05\x02\x02\x00")

    negotiate(stream, NoAuthAuthenticator(), strict=True)

    assert recv_exact(client, 2) == b"\x05\x00"


def test_bad_version_writes_nothing(stream_pair):
    stream, client = stream_pair
    # Only the bytes the server reads, unread data would turn the close into a reset
    client.sendall(b"\x04\x01")

    with pytest.raises(UnsupportedVersion) as excinfo:
        negotiate(stream, NoAuthAuthenticator())

    assert excinfo.value.version == 4
    stream.close()
    assert client.recv(16) == b""


def test_bad_auth_subversion(stream_pair, userpass):
    stream, client = stream_pair
    client.sendall(b"\x05\x01\x02" + b"\x05\x05alice\x06secret")

    with pytest.raises(UnsupportedAuthVersion) as excinfo:
        negotiate(stream, userpass)

    assert isinstance(excinfo.value, AuthenticationFailure)
    assert recv_exact(client, 2) == b"\x05\x02"


def test_short_methods_list(stream_pair):
    stream, client = stream_pair
    # Announces three methods but sends one, then hangs up
    client.sendall(b"\x05\x03\x00")
    client.shutdown(1)

    with pytest.raises(ShortRead) as excinfo:
        negotiate(stream, NoAuthAuthenticator())

    assert excinfo.value.expected == 3
    assert excinfo.value.received == 1


def test_short_password(stream_pair, userpass):
    stream, client = stream_pair
    client.sendall(b"\x05\x01\x02\x01\x05alice\x06sec")
    client.shutdown(1)

    with pytest.raises(ProtocolViolation):
        negotiate(stream, userpass)


def test_empty_connection(stream_pair):
    stream, client = stream_pair
    client.shutdown(1)

    with pytest.raises(ShortRead):
        negotiate(stream, NoAuthAuthenticator())
