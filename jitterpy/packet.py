"""
Test packet layout (all integers in network byte order):

     0                   1                   2                   3
     0 1 2 3 4 5 6 7 8 9 0 1 2 3 4 5 6 7 8 9 0 1 2 3 4 5 6 7 8 9 0 1
    +-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+
    |                  Timestamp, seconds (int64)                   |
    |                                                               |
    +-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+
    |                Timestamp, microseconds (int64)                |
    |                                                               |
    +-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+
    |                   Sequence Number (uint64)                    |
    |                                                               |
    +-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+
    .                                                               .
    .                  Payload (PACKET_SIZE - 24)                   .
    .                                                               .
    +-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+
"""

import collections
import struct

from jitterpy.constants import HEADER_FORMAT, HEADER_SIZE, PACKET_SIZE, USEC_PER_SEC
from jitterpy.errors import DecodeError, EncodeError
from jitterpy.utils import now, generate_random_bytes, generate_zero_bytes


class Timestamp(collections.namedtuple('Timestamp', 'seconds microseconds')):
    __slots__ = ()

    @classmethod
    def now(cls):
        return cls.from_float(now())

    @classmethod
    def from_float(cls, t):
        seconds = int(t)
        microseconds = int(round((t - seconds) * USEC_PER_SEC))
        if microseconds >= USEC_PER_SEC:
            seconds, microseconds = seconds + 1, microseconds - USEC_PER_SEC
        return cls(seconds, microseconds)

    def to_float(self):
        return self.seconds + float(self.microseconds) / USEC_PER_SEC

    def is_valid(self):
        return self.seconds >= 0 and 0 <= self.microseconds < USEC_PER_SEC


class Packet(collections.namedtuple('Packet', 'timestamp sequence_number payload')):
    __slots__ = ()

    @property
    def size(self):
        return HEADER_SIZE + len(self.payload)


def make_packet(sequence_number, payload=None, packet_size=PACKET_SIZE, timestamp=None):
    """Build a packet of exactly packet_size bytes stamped with the current time.

    Without an explicit payload, random bytes fill the datagram. A shorter
    payload is padded with zeros, a longer one is rejected.
    """
    if packet_size < HEADER_SIZE:
        raise EncodeError("packet size %d is smaller than the %d byte header" % (packet_size, HEADER_SIZE))

    room = packet_size - HEADER_SIZE
    if payload is None:
        payload = generate_random_bytes(room)
    elif len(payload) > room:
        raise EncodeError("payload of %d bytes exceeds the %d byte packet size" % (len(payload), packet_size))
    else:
        payload = bytes(payload) + generate_zero_bytes(room - len(payload))

    if timestamp is None:
        timestamp = Timestamp.now()
    return Packet(timestamp, sequence_number, payload)


def encode(packet, packet_size=PACKET_SIZE):
    """Serialize packet; the result never exceeds packet_size bytes."""
    timestamp = Timestamp(*packet.timestamp)
    if not timestamp.is_valid():
        raise EncodeError("invalid timestamp %r" % (tuple(timestamp),))
    if packet.sequence_number < 0:
        raise EncodeError("negative sequence number %d" % packet.sequence_number)
    if HEADER_SIZE + len(packet.payload) > packet_size:
        raise EncodeError("payload of %d bytes exceeds the %d byte packet size" % (len(packet.payload), packet_size))

    try:
        header = struct.pack(HEADER_FORMAT, timestamp.seconds, timestamp.microseconds, packet.sequence_number)
    except struct.error as e:
        raise EncodeError(str(e)) from e
    return header + bytes(packet.payload)


def decode(data):
    if len(data) < HEADER_SIZE:
        raise DecodeError("short packet: %d bytes, header needs %d" % (len(data), HEADER_SIZE))

    seconds, microseconds, sequence_number = struct.unpack(HEADER_FORMAT, data[:HEADER_SIZE])
    timestamp = Timestamp(seconds, microseconds)
    if not timestamp.is_valid():
        raise DecodeError("malformed timestamp: %d.%06d" % (seconds, microseconds))

    return Packet(timestamp, sequence_number, bytes(data[HEADER_SIZE:]))
