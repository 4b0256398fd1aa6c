from __future__ import annotations

import socket

import pytest


def reserve_udp_port():
    """Return a currently free UDP port on localhost, or None when sockets are not permitted."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.bind(("127.0.0.1", 0))
            return sock.getsockname()[1]
    except (PermissionError, OSError):
        return None


@pytest.fixture
def udp_port():
    port = reserve_udp_port()
    if port is None:
        pytest.skip("UDP sockets are not permitted in this environment.")
    return port
