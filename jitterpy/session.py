from jitterpy import packet as codec
from jitterpy.connection import Connection
from jitterpy.constants import COUNT_DEFAULT, INTERVAL_DEFAULT, PACKET_SIZE, TIMEOUT_DEFAULT, HEADER_SIZE
from jitterpy.errors import BindError, DecodeError, SendError
from jitterpy.reactor import Reactor
from jitterpy.statistics import StreamStatistics
from jitterpy.utils import generate_random_bytes, now

import logging
logger = logging.getLogger(__name__)


def loopback(ipversion):
    return "::1" if ipversion == 6 else "127.0.0.1"


class PingPong:
    """Two connections on one reactor bouncing packets over loopback.

    The generator stamps and sends a packet; the measurer records its
    jitter and echoes it back, which makes the generator send the next one.
    """

    def __init__(self, count=COUNT_DEFAULT, packet_size=PACKET_SIZE, ipversion=4, reactor=None):
        self.count = count
        self.ipversion = ipversion
        self.target = loopback(ipversion)
        self._owns_reactor = reactor is None
        self.reactor = Reactor() if reactor is None else reactor
        self.stats = StreamStatistics("Loopback")
        self.sequence_number = 1
        self.packet_size = packet_size
        self.payload = generate_random_bytes(packet_size - HEADER_SIZE)

        self.measurer = Connection(self.reactor, self.on_measure, name="Connection 1")
        self.generator = Connection(self.reactor, self.on_echo, name="Connection 2")

    def on_measure(self, datagram):
        try:
            packet = codec.decode(datagram.data)
        except DecodeError as e:
            logger.error("%s: %s", self.measurer.name, e)
            return

        self.stats.add(packet, datagram.received)
        logger.info("Packet: %d, Jitter: %.6f", packet.sequence_number, self.stats.estimator.jitter)

        if self.stats.count >= self.count:
            self.reactor.stop()
            return
        self.measurer.send(datagram.data, self.target, self.generator.local_port)

    def on_echo(self, datagram):
        self.sequence_number += 1
        self.send_next()

    def send_next(self):
        p = codec.make_packet(self.sequence_number, self.payload, self.packet_size)
        self.generator.send(codec.encode(p, self.packet_size), self.target, self.measurer.local_port)

    def run(self, timeout=TIMEOUT_DEFAULT):
        host = "::" if self.ipversion == 6 else "0.0.0.0"
        try:
            self.measurer.bind(host, 0)
            self.generator.bind(host, 0)
            self.send_next()
            self.reactor.run(timeout)
        finally:
            self.close()

        if self.stats.count < self.count:
            logger.info("Receive timeout after %d of %d packets", self.stats.count, self.count)
        return self.stats

    def close(self):
        self.measurer.close()
        self.generator.close()
        if self._owns_reactor:
            self.reactor.close()


class Reflector:
    """Measures jitter of inbound packets per sender and echoes them back."""

    def __init__(self, host, port, reactor=None):
        self._owns_reactor = reactor is None
        self.reactor = Reactor() if reactor is None else reactor
        self.connection = Connection(self.reactor, self.on_datagram, name="reflector")
        try:
            self.connection.bind(host, port)
        except BindError:
            self.close()
            raise
        self.streams = {}

    @property
    def port(self):
        return self.connection.local_port

    def on_datagram(self, datagram):
        try:
            packet = codec.decode(datagram.data)
        except DecodeError as e:
            logger.error("Request from [%s]:%d dropped: %s", datagram.host, datagram.port, e)
            return

        peer = (datagram.host, datagram.port)
        stats = self.streams.get(peer)
        if stats is None:
            logger.info("New sender [%s]:%d", datagram.host, datagram.port)
            stats = self.streams[peer] = StreamStatistics("Inbound")

        transit = stats.add(packet, datagram.received)
        logger.info("Request from [%s]:%d [seq=%d transit=%.2fms jitter=%.3fms]",
                    datagram.host, datagram.port, packet.sequence_number, transit, stats.jitter)
        try:
            self.connection.send(datagram.data, datagram.host, datagram.port)
        except SendError as e:
            logger.error("Reply to [%s]:%d failed: %s", datagram.host, datagram.port, e)

    def run(self, timeout=None):
        self.reactor.run(timeout)

    def stop(self, signum=None, frame=None):
        logger.info("Stop reflector")
        self.reactor.stop()

    def close(self):
        self.connection.close()
        if self._owns_reactor:
            self.reactor.close()
        logger.info("Reflector stopped")


class Sender:
    """Sends count packets at a fixed interval and measures round-trip
    jitter on the echoes returned by a Reflector.
    """

    def __init__(self, host, port, count=COUNT_DEFAULT, interval=INTERVAL_DEFAULT,
                 packet_size=PACKET_SIZE, near_host=None, near_port=0, reactor=None):
        self.remote_addr = host
        self.remote_port = port
        self.count = count
        self.interval = float(interval) / 1000
        self.packet_size = packet_size
        self._owns_reactor = reactor is None
        self.reactor = Reactor() if reactor is None else reactor
        self.stats = StreamStatistics("Roundtrip")
        self.sent = 0
        self.running = False

        self.connection = Connection(self.reactor, self.on_datagram, name="sender")
        if near_host is not None or near_port:
            try:
                self.connection.bind(near_host or "0.0.0.0", near_port)
            except BindError:
                self.connection.close()
                if self._owns_reactor:
                    self.reactor.close()
                raise

    def on_datagram(self, datagram):
        try:
            packet = codec.decode(datagram.data)
        except DecodeError as e:
            logger.error("short packet received: %s", e)
            return

        transit = self.stats.add(packet, datagram.received)
        logger.info("Reply from [%s]:%d [seq=%d rtt=%.2fms jitter=%.3fms]",
                    datagram.host, datagram.port, packet.sequence_number, transit, self.stats.jitter)

        if self.stats.count >= self.count:
            logger.info("All packets received back")
            self.running = False

    def run(self, timeout=TIMEOUT_DEFAULT):
        schedule = now()
        endtime = schedule + self.count * self.interval + timeout

        self.running = True
        try:
            while self.running:
                t1 = now()
                if (t1 >= schedule) and (self.sent < self.count):
                    schedule = schedule + self.interval
                    self.sent += 1
                    p = codec.make_packet(self.sent, packet_size=self.packet_size)
                    try:
                        self.connection.send(codec.encode(p, self.packet_size), self.remote_addr, self.remote_port)
                        logger.info("Sent to %s [seq=%d]", self.remote_addr, self.sent)
                    except SendError as e:
                        logger.error("Send to %s [seq=%d] failed: %s", self.remote_addr, self.sent, e)

                if t1 > endtime:
                    logger.info("Receive timeout for last packet (don't wait anymore)")
                    break

                if self.sent < self.count:
                    wait = max(0, schedule - now())
                else:
                    wait = max(0, min(endtime - now(), 0.1))
                self.reactor.run_once(wait)
        finally:
            self.running = False
            self.connection.close()
            if self._owns_reactor:
                self.reactor.close()

        return self.stats

    def stop(self, signum=None, frame=None):
        logger.info("SIGINT received: stop sender")
        self.running = False
