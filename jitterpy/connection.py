import binascii
import collections
import select
import socket
import threading
import time

from jitterpy.address import SocketAddress
from jitterpy.constants import RECEIVE_BUFFER_DEFAULT
from jitterpy.errors import (AddressParseError, BindError, ConnectionClosedError, ReceiveError,
                             SendError, SocketCreateError)
from jitterpy.packet import Timestamp
from jitterpy.reactor import Reactor
from jitterpy.utils import wildcard

import logging
logger = logging.getLogger(__name__)


Datagram = collections.namedtuple('Datagram', 'data host port received')


class Connection:
    """One UDP socket, IPv4 or IPv6.

    The socket is created lazily by bind() or by the first send(); its
    address family follows the first address given. Inbound datagrams are
    delivered by the reactor to on_datagram as Datagram values. Without a
    handler they are read and dropped so the kernel buffer does not fill up.

    Receive errors never propagate: they go to error_handler(connection, exc),
    which logs them by default. Send errors are raised to the caller and leave
    the connection usable.
    """

    def __init__(self, reactor=None, on_datagram=None, receive_buffer_size=RECEIVE_BUFFER_DEFAULT,
                 name=None, error_handler=None):
        self._owns_reactor = reactor is None
        self.reactor = Reactor() if reactor is None else reactor
        self.on_datagram = on_datagram
        self.receive_buffer_size = receive_buffer_size
        self.name = name or "connection-%x" % id(self)
        self.error_handler = error_handler

        self.socket = None
        self.family = None
        self.local_port = 0
        self.sent = 0
        self.received = 0
        self.dropped = 0

        self._closed = False
        # serializes senders on other threads with dispatch on the reactor thread
        self._lock = threading.RLock()

    def __repr__(self):
        return "<Connection %s port=%d%s>" % (self.name, self.local_port, " closed" if self._closed else "")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def closed(self):
        return self._closed

    def set_receive_handler(self, callback):
        self.on_datagram = callback

    def bind(self, host, port=0):
        """Bind to (host, port) and return the local port; port 0 lets the
        OS pick an ephemeral port.
        """
        with self._lock:
            self._check_open()
            try:
                address = SocketAddress.parse(host, port)
            except AddressParseError as e:
                raise BindError("cannot bind to %s:%s: %s" % (host, port, e), e) from e

            created = self.socket is None
            if created:
                self._create_socket(address.family)
            elif address.family != self.family:
                raise BindError("cannot bind IPv%d socket to %s" % (self._ipversion(), address))

            logger.debug("bind(name=%s, addr=%s)", self.name, address)
            try:
                self.socket.bind(address.to_sockaddr())
                self.local_port = SocketAddress.from_sockaddr(self.socket.getsockname()).port
            except OSError as e:
                logger.error("%s: bind to %s failed: %s", self.name, address, e)
                if created:
                    self._release()
                raise BindError("cannot bind to %s: %s" % (address, e), e) from e

            logger.info("%s: wait to receive packets on %s", self.name, address.with_port(self.local_port))
            return self.local_port

    def send(self, data, host, port, timeout=None):
        """Send one datagram to (host, port) and return the number of bytes sent.

        An unbound connection first binds to the wildcard address of the
        destination's family. With a timeout, a full send buffer is waited
        on for up to timeout seconds instead of failing immediately.
        """
        with self._lock:
            self._check_open()
            address = SocketAddress.parse(host, port)
            if self.socket is None:
                self.bind(wildcard(address.ipversion), 0)
            elif address.family != self.family:
                raise SendError("cannot send to %s from an IPv%d socket" % (address, self._ipversion()))

            deadline = None if timeout is None else time.monotonic() + timeout
            while True:
                try:
                    sent = self.socket.sendto(data, address.to_sockaddr())
                    break
                except BlockingIOError as e:
                    remaining = None if deadline is None else deadline - time.monotonic()
                    if remaining is None or remaining <= 0:
                        logger.error("%s: send buffer full, %d bytes to %s not sent", self.name, len(data), address)
                        raise SendError("send buffer full", e) from e
                    select.select([], [self.socket], [], remaining)
                except OSError as e:
                    logger.error("%s: failed to send data to %s: %s", self.name, address, e)
                    raise SendError("cannot send to %s: %s" % (address, e), e) from e

            if sent != len(data):
                logger.error("%s: short send to %s: %d of %d bytes", self.name, address, sent, len(data))
                raise SendError("sent %d of %d bytes to %s" % (sent, len(data), address))

            self.sent += 1
            logger.debug("%s: transmit to %s: %s", self.name, address, binascii.hexlify(data))
            return sent

    def close(self):
        """Release the socket; safe to call more than once. A datagram
        callback already running completes first.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self.socket is not None:
                self._release()
                logger.info("%s: closed", self.name)
            if self._owns_reactor:
                self.reactor.close()

    def _check_open(self):
        if self._closed:
            raise ConnectionClosedError("%s is closed" % self.name)

    def _ipversion(self):
        return 6 if self.family == socket.AF_INET6 else 4

    def _create_socket(self, family):
        try:
            sock = socket.socket(family, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        except OSError as e:
            logger.error("%s: cannot create UDP socket: %s", self.name, e)
            raise SocketCreateError("cannot create UDP socket: %s" % e, e) from e

        sock.setblocking(False)
        try:
            self.reactor.register(sock, self._on_readable)
        except (OSError, ValueError) as e:
            sock.close()
            raise SocketCreateError("cannot register socket: %s" % e, e) from e

        self.socket = sock
        self.family = family

    def _release(self):
        self.reactor.cancel(self.socket)
        self.socket.close()
        self.socket = None
        self.family = None
        self.local_port = 0

    def _on_readable(self):
        with self._lock:
            if self.socket is None:
                return
            try:
                data, sockaddr = self.socket.recvfrom(self.receive_buffer_size)
            except BlockingIOError:
                return
            except OSError as e:
                self._report(ReceiveError("recvfrom failed: %s" % e, e))
                return
            received = Timestamp.now()

            if not data:
                logger.debug("%s: empty datagram from %s ignored", self.name, sockaddr)
                return

            try:
                peer = SocketAddress.from_sockaddr(sockaddr)
            except (AddressParseError, ValueError, IndexError) as e:
                self._report(ReceiveError("unknown peer address %r" % (sockaddr,), e))
                return

            logger.debug("%s: received %d bytes from %s: %s", self.name, len(data), peer, binascii.hexlify(data))

            callback = self.on_datagram
            if callback is None:
                self.dropped += 1
                logger.info("%s: no receive handler, dropped %d bytes from %s", self.name, len(data), peer)
                return

            self.received += 1
            callback(Datagram(data, peer.host, peer.port, received))

    def _report(self, exc):
        if self.error_handler is not None:
            self.error_handler(self, exc)
        else:
            logger.error("%s: %s", self.name, exc)
