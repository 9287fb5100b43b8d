from __future__ import annotations

import socket

import pytest

from deckbridge.errors import BindError
from deckbridge.server import _bind_socket, ws_url
from deckbridge.runtime.settings_loader import validate_host


def _ipv6_loopback_available() -> bool:
    if not socket.has_ipv6:
        return False
    try:
        with socket.socket(socket.AF_INET6, socket.SOCK_STREAM) as sock:
            sock.bind(("::1", 0))
    except OSError:
        return False
    return True


@pytest.mark.parametrize("host", ["127.0.0.1", "localhost", "::1"])
def test_every_accepted_host_can_be_bound(host: str) -> None:
    assert validate_host(host) == host
    if host == "::1" and not _ipv6_loopback_available():
        pytest.skip("IPv6 loopback not configured on this machine")

    sock = _bind_socket(host, 0)
    try:
        assert sock.getsockname()[1] > 0
        if host == "::1":
            assert sock.family == socket.AF_INET6
    finally:
        sock.close()


def test_busy_port_raises_bind_error() -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
        holder.bind(("127.0.0.1", 0))
        holder.listen(1)
        port = holder.getsockname()[1]

        with pytest.raises(BindError) as exc:
            _bind_socket("127.0.0.1", port)

    assert exc.value.port == port
    assert exc.value.host == "127.0.0.1"


def test_ipv6_urls_are_bracketed() -> None:
    assert ws_url("::1", 8888) == "ws://[::1]:8888"
    assert ws_url("127.0.0.1", 8888) == "ws://127.0.0.1:8888"
