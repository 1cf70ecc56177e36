#!/usr/bin/env python3

from jitterpy.constants import COUNT_DEFAULT, INTERVAL_DEFAULT, PACKET_SIZE, HEADER_SIZE, PORT_DEFAULT, TIMEOUT_DEFAULT
from jitterpy.errors import JitterError
from jitterpy.session import PingPong, Reflector, Sender
from jitterpy.utils import parse_addr, wildcard

import click
import click_log
import contextlib
import signal

from logging.handlers import TimedRotatingFileHandler


import logging
logger = logging.getLogger("jitterpy")
click_logger = click_log.basic_config(logger)


class AliasedGroup(click.Group):

    def get_command(self, ctx, cmd_name):
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        matches = [x for x in self.list_commands(ctx)
                   if x.startswith(cmd_name)]
        if not matches:
            return None
        elif len(matches) == 1:
            return click.Group.get_command(self, ctx, matches[0])
        ctx.fail('Please be more specific \n%s' % '\n'.join(sorted(matches)))


near_end_argument = click.argument(
    'near_end', metavar='local-ip:port', default=":%d" % PORT_DEFAULT)
count_option = click.option('-c', '--count', metavar='packets', default=COUNT_DEFAULT,
                            type=click.IntRange(1, 9999, True), help="[1..9999]")
size_option = click.option('-s', '--size', metavar='bytes', default=PACKET_SIZE,
                           type=click.IntRange(HEADER_SIZE, 65507), help="UDP payload size [%d..65507]" % HEADER_SIZE)
timeout_option = click.option('-t', '--timeout', metavar='sec', default=TIMEOUT_DEFAULT,
                              type=click.FloatRange(0, 3600), help="wait for outstanding packets")


@contextlib.contextmanager
def on_sigint(handler):
    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


@click.group(cls=AliasedGroup)
@click_log.simple_verbosity_option(logger)
@click.option("-q", "--quiet", "quiet", is_flag=True)
@click.option("-l", "--logfile", "logfile", type=click.Path())
def cli(quiet, logfile):
    """Measure UDP jitter (RFC3550 interarrival jitter) between two
       endpoints."""

    loglevel = logger.level
    if quiet:
        logger.setLevel(logging.WARNING)

    if logfile:
        file_handler = TimedRotatingFileHandler(
            filename=logfile, when='midnight', backupCount=31)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        file_handler.setLevel(loglevel)
        logger.addHandler(file_handler)


@cli.command('pingpong')
@count_option
@size_option
@timeout_option
@click.option('-6', '--ipv6', 'ipv6', is_flag=True, help="use IPv6 loopback")
def pingpong(count, size, timeout, ipv6):
    """Bounce packets between two local connections."""
    session = PingPong(count=count, packet_size=size, ipversion=6 if ipv6 else 4)
    try:
        with on_sigint(session.reactor.stop):
            stats = session.run(timeout)
    except JitterError as e:
        raise click.ClickException(str(e))
    stats.dump(count)


@cli.command('reflector')
@near_end_argument
@click.option('-t', '--timeout', metavar='sec', default=None, type=click.FloatRange(0),
              help="stop after this many seconds")
def reflector(near_end, timeout):
    """Echo test packets and measure their inbound jitter."""
    addr, port, ipversion = parse_addr(near_end, PORT_DEFAULT)
    try:
        reflector = Reflector(addr or wildcard(ipversion), port)
    except JitterError as e:
        raise click.ClickException(str(e))

    try:
        with on_sigint(reflector.stop):
            reflector.run(timeout)
    finally:
        reflector.close()

    for (host, port), stats in sorted(reflector.streams.items()):
        click.echo("Sender [%s]:%d" % (host, port))
        stats.dump()


@cli.command('sender')
@click.argument('far_end', metavar='remote-ip:port', default="127.0.0.1:%d" % PORT_DEFAULT)
@click.argument('near_end', metavar='local-ip:port', default=":0")
@count_option
@size_option
@timeout_option
@click.option('-i', '--interval', metavar='msec', default=INTERVAL_DEFAULT,
              type=click.IntRange(1, 10000, True), help="[1..10000]")
def sender(far_end, near_end, count, size, timeout, interval):
    """Send packets to a reflector and measure round-trip jitter."""
    rip, rpt, ripv = parse_addr(far_end, PORT_DEFAULT)
    sip, spt, sipv = parse_addr(near_end, 0)
    if not rip:
        raise click.BadParameter("remote address required", param_hint="remote-ip:port")

    try:
        session = Sender(rip, rpt, count=count, interval=interval, packet_size=size,
                         near_host=sip or (wildcard(ripv) if spt else None), near_port=spt)
    except JitterError as e:
        raise click.ClickException(str(e))

    try:
        with on_sigint(session.stop):
            stats = session.run(timeout)
    except JitterError as e:
        raise click.ClickException(str(e))
    stats.dump(count)


if __name__ == "__main__":
    cli()
