import click

from jitterpy.jitter import JitterEstimator, to_seconds
from jitterpy.utils import format_time


class StreamStatistics:
    """Delay, jitter and loss summary of one packet stream.

    Transit times are kept in milliseconds. Jitter follows RFC 3550 and is
    computed by a JitterEstimator owned by this instance.
    """

    def __init__(self, name="Stream"):
        self.name = name
        self.estimator = JitterEstimator()
        self.count = 0
        self.reordered = 0
        self.duplicates = 0
        self.highest_seq = None
        self.first_seq = None
        self.min_transit = None
        self.max_transit = None
        self.sum_transit = 0.0
        self._seen = set()

    def add(self, packet, received):
        """Account for one packet received at the given time, return the
        transit time in ms.
        """
        sent = to_seconds(packet.timestamp)
        transit = 1000 * abs(to_seconds(received) - sent)

        seq = packet.sequence_number
        if seq in self._seen:
            self.duplicates += 1
            return transit
        self._seen.add(seq)

        if self.count == 0:
            self.min_transit = transit
            self.max_transit = transit
            self.sum_transit = transit
            self.first_seq = seq
        else:
            self.min_transit = min(self.min_transit, transit)
            self.max_transit = max(self.max_transit, transit)
            self.sum_transit += transit
            self.first_seq = min(self.first_seq, seq)

        if self.highest_seq is not None and seq < self.highest_seq:
            self.reordered += 1
        else:
            self.highest_seq = seq

        self.estimator.update(sent, received)
        self.count += 1
        return transit

    @property
    def jitter(self):
        """Current jitter in ms."""
        return 1000 * self.estimator.jitter

    @property
    def average(self):
        return self.sum_transit / self.count if self.count else 0.0

    def expected(self, total=None):
        if total is not None:
            return total
        if self.count == 0:
            return 0
        return self.highest_seq - self.first_seq + 1

    def lost(self, total=None):
        return max(0, self.expected(total) - self.count)

    def loss(self, total=None):
        """Loss in percent of the expected packets."""
        expected = self.expected(total)
        if expected == 0:
            return 0.0
        return 100 * float(self.lost(total)) / expected

    def dump(self, total=None):
        click.echo(
            "===============================================================================")
        click.echo(
            "Direction         Min         Max         Avg          Jitter     Loss")
        click.echo(
            "-------------------------------------------------------------------------------")
        if self.count > 0:
            click.echo("  %-10s   %s  %s  %s  %s    %5.1f%%" % (
                self.name[:10],
                format_time(self.min_transit),
                format_time(self.max_transit),
                format_time(self.average),
                format_time(self.jitter),
                self.loss(total)))
            if self.reordered or self.duplicates:
                click.echo("  reordered: %d  duplicates: %d" % (self.reordered, self.duplicates))
        else:
            click.echo("  NO STATS AVAILABLE (100% loss)", err=True)
        click.echo(
            "-------------------------------------------------------------------------------")
        click.echo(
            "                                                    Jitter Algorithm [RFC3550]")
        click.echo(
            "===============================================================================")
