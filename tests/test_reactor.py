"""Tests for jitterpy.reactor."""

import socket
import time

import pytest

from jitterpy.reactor import Reactor


@pytest.fixture
def pair():
    a = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    b = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    a.bind(("127.0.0.1", 0))
    b.bind(("127.0.0.1", 0))
    b.setblocking(False)
    yield a, b
    a.close()
    b.close()


def test_dispatches_readable_socket(reactor, pair):
    a, b = pair
    events = []
    reactor.register(b, lambda: events.append(b.recv(100)))
    a.sendto(b"ping", b.getsockname())

    deadline = time.monotonic() + 2
    while not events and time.monotonic() < deadline:
        reactor.run_once(0.05)
    assert events == [b"ping"]


def test_nothing_ready(reactor, pair):
    a, b = pair
    reactor.register(b, lambda: pytest.fail("not readable"))
    assert reactor.run_once(0.01) == 0


def test_cancel_stops_dispatch(reactor, pair):
    a, b = pair
    reactor.register(b, lambda: pytest.fail("cancelled"))
    assert reactor.cancel(b) is True
    assert reactor.cancel(b) is False
    a.sendto(b"ping", b.getsockname())
    assert reactor.run_once(0.05) == 0
    assert len(reactor) == 0


def test_callback_errors_go_to_error_handler(pair):
    a, b = pair
    errors = []
    reactor = Reactor(error_handler=errors.append)

    def boom():
        b.recv(100)
        raise RuntimeError("boom")

    reactor.register(b, boom)
    a.sendto(b"ping", b.getsockname())
    reactor.run(timeout=0.5)
    reactor.close()
    assert len(errors) == 1
    assert isinstance(errors[0], RuntimeError)


def test_run_until_stop(reactor, pair):
    a, b = pair

    def on_read():
        b.recv(100)
        reactor.stop()

    reactor.register(b, on_read)
    a.sendto(b"ping", b.getsockname())
    start = time.monotonic()
    reactor.run(timeout=5)
    assert time.monotonic() - start < 4
    assert not reactor.running


def test_run_timeout(reactor, pair):
    a, b = pair
    reactor.register(b, lambda: None)
    start = time.monotonic()
    reactor.run(timeout=0.2)
    assert 0.15 < time.monotonic() - start < 2


def test_run_returns_when_empty(reactor):
    start = time.monotonic()
    reactor.run(timeout=5)
    assert time.monotonic() - start < 1
