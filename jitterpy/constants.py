import struct

PACKET_SIZE = 1024               # total datagram size on the wire
HEADER_FORMAT = '!qqQ'           # seconds, microseconds, sequence number
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)

RECEIVE_BUFFER_DEFAULT = 4096
JITTER_GAIN = 16                 # RFC 3550 section 6.4.1

PORT_DEFAULT = 20000
COUNT_DEFAULT = 100
INTERVAL_DEFAULT = 100           # msec
TIMEOUT_DEFAULT = 5              # sec

USEC_PER_SEC = 1000000
