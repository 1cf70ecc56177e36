"""
IPv4/IPv6 endpoint addresses.

A SocketAddress is an immutable (family, raw, port) triple. Besides the tuple
form used by the ``socket`` module it has a compact binary wire form:

    +--------+--------+-----------------+---------------------------+
    | tag    | pad    | port (BE, 16b)  | address (4 or 16 bytes)   |
    +--------+--------+-----------------+---------------------------+

tag is 4 for IPv4 and 6 for IPv6, giving 8 or 20 bytes in total.
"""

import collections
import socket
import struct

from jitterpy.errors import AddressParseError, DecodeError


WIRE_HEADER_FORMAT = '!BxH'
WIRE_HEADER_SIZE = struct.calcsize(WIRE_HEADER_FORMAT)

_FAMILY_TAGS = {socket.AF_INET: 4, socket.AF_INET6: 6}
_TAG_FAMILIES = {4: socket.AF_INET, 6: socket.AF_INET6}
_RAW_SIZES = {socket.AF_INET: 4, socket.AF_INET6: 16}


class SocketAddress(collections.namedtuple('SocketAddress', 'family raw port')):
    __slots__ = ()

    @classmethod
    def parse(cls, text, port=0):
        """Parse a textual IPv6 or IPv4 address.

        IPv6 is tried first; the two textual forms never overlap.
        """
        for family in (socket.AF_INET6, socket.AF_INET):
            try:
                raw = socket.inet_pton(family, text)
            except (OSError, ValueError, TypeError):
                continue
            return cls(family, raw, check_port(port))
        raise AddressParseError(text)

    @classmethod
    def from_sockaddr(cls, sockaddr):
        """Build from the address tuple returned by recvfrom/getsockname."""
        host = sockaddr[0].split('%', 1)[0]
        return cls.parse(host, sockaddr[1])

    @property
    def host(self):
        return socket.inet_ntop(self.family, self.raw)

    @property
    def ipversion(self):
        return _FAMILY_TAGS[self.family]

    def with_port(self, port):
        return self._replace(port=check_port(port))

    def to_sockaddr(self):
        if self.family == socket.AF_INET6:
            return (self.host, self.port, 0, 0)
        return (self.host, self.port)

    def to_wire_bytes(self):
        return struct.pack(WIRE_HEADER_FORMAT, _FAMILY_TAGS[self.family], self.port) + self.raw

    def __str__(self):
        if self.family == socket.AF_INET6:
            return "[%s]:%d" % (self.host, self.port)
        return "%s:%d" % (self.host, self.port)


def check_port(port):
    if not isinstance(port, int) or not 0 <= port <= 0xffff:
        raise AddressParseError(port, "port out of range: %r" % (port,))
    return port


def parse(text, port=0):
    return SocketAddress.parse(text, port)


def with_port(address, port):
    return address.with_port(port)


def to_wire_bytes(address):
    return address.to_wire_bytes()


def from_wire_bytes(data):
    """Decode the wire form back into a (host, port) pair."""
    if len(data) < WIRE_HEADER_SIZE:
        raise DecodeError("address too short: %d bytes" % len(data))

    tag, port = struct.unpack(WIRE_HEADER_FORMAT, data[:WIRE_HEADER_SIZE])
    family = _TAG_FAMILIES.get(tag)
    if family is None:
        raise DecodeError("unsupported address family tag %d" % tag)

    raw = bytes(data[WIRE_HEADER_SIZE:])
    if len(raw) != _RAW_SIZES[family]:
        raise DecodeError("IPv%d address must be %d bytes, got %d" % (tag, _RAW_SIZES[family], len(raw)))

    return socket.inet_ntop(family, raw), port
