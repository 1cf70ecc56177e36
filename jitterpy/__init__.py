##############################################################################
#                                                                            #
#  Objective:                                                                #
#    Measure network jitter by exchanging fixed-size UDP test packets        #
#    between two endpoints, using the interarrival jitter estimator          #
#    defined in RFC3550 (section 6.4.1).                                     #
#                                                                            #
#  Features supported:                                                       #
#    - IPv4 and IPv6 (address family chosen per connection)                  #
#    - ephemeral ports (bind to port 0)                                      #
#    - non-blocking sockets driven by a single-threaded readiness reactor    #
#    - length-checked packet codec (timestamp, sequence number, payload)     #
#    - per-stream delay, jitter, loss and reordering statistics              #
#                                                                            #
#  Modes of operation:                                                       #
#    - Ping-pong                                                             #
#        two local connections bouncing packets over loopback                #
#    - Reflector                                                             #
#        measure one-way jitter of inbound packets and echo them back        #
#    - Sender                                                                #
#        send a packet train to a reflector, measure round-trip jitter       #
#                                                                            #
#  Limitations:                                                              #
#    As there is no hardware based timestamping, transit and jitter values   #
#    measured by this tool are not very precise. One-way transit times       #
#    include the clock offset between the hosts; jitter does not.            #
#                                                                            #
#  Not supported:                                                            #
#    - congestion control, retransmission, encryption                        #
#    - multiplexing several streams over one socket                          #
#    - persistence of measurement results                                    #
#                                                                            #
#  License:                                                                  #
#    Licensed under the BSD license                                          #
#    See LICENSE.md delivered with this project for more information.        #
#                                                                            #
##############################################################################

from jitterpy.address import SocketAddress
from jitterpy.connection import Connection, Datagram
from jitterpy.errors import (JitterError, AddressParseError, DecodeError, EncodeError, BindError,
                             SocketCreateError, SendError, ReceiveError, ConnectionClosedError)
from jitterpy.jitter import JitterEstimator
from jitterpy.packet import Packet, Timestamp, encode, decode, make_packet
from jitterpy.reactor import Reactor
from jitterpy.statistics import StreamStatistics

__version__ = "0.1.0"
