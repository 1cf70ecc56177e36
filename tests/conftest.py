import socket
import time

import pytest

from jitterpy.reactor import Reactor


def has_ipv6_loopback():
    if not socket.has_ipv6:
        return False
    try:
        with socket.socket(socket.AF_INET6, socket.SOCK_DGRAM) as s:
            s.bind(("::1", 0))
    except OSError:
        return False
    return True


requires_ipv6 = pytest.mark.skipif(not has_ipv6_loopback(), reason="no IPv6 loopback")


def pump(reactor, until, timeout=2.0):
    """Drive the reactor until until() is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while not until():
        if time.monotonic() > deadline:
            return False
        reactor.run_once(0.05)
    return True


@pytest.fixture
def reactor():
    r = Reactor()
    yield r
    r.close()
