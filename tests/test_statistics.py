"""Tests for jitterpy.statistics."""

import pytest

from jitterpy.packet import Packet, Timestamp
from jitterpy.statistics import StreamStatistics


def packet(seq, sent):
    return Packet(Timestamp.from_float(sent), seq, b"")


def feed(stats, samples):
    """samples are (seq, transit in ms) pairs, one packet per second."""
    for seq, transit in samples:
        stats.add(packet(seq, float(seq)), seq + transit / 1000.0)


def test_delay_and_jitter():
    stats = StreamStatistics()
    feed(stats, [(1, 10), (2, 12), (3, 9)])
    assert stats.count == 3
    assert stats.min_transit == pytest.approx(9)
    assert stats.max_transit == pytest.approx(12)
    assert stats.average == pytest.approx(31 / 3.0)
    assert stats.jitter == pytest.approx(0.3046875, rel=1e-3)


def test_add_returns_transit():
    stats = StreamStatistics()
    assert stats.add(packet(1, 5.0), 5.25) == pytest.approx(250)


def test_loss_from_sequence_gaps():
    stats = StreamStatistics()
    feed(stats, [(1, 1), (2, 1), (5, 1)])
    assert stats.expected() == 5
    assert stats.lost() == 2
    assert stats.loss() == pytest.approx(40.0)


def test_loss_against_total():
    stats = StreamStatistics()
    feed(stats, [(1, 1), (2, 1)])
    assert stats.lost(total=4) == 2
    assert stats.loss(total=4) == pytest.approx(50.0)


def test_reordering_and_duplicates():
    stats = StreamStatistics()
    feed(stats, [(1, 1), (3, 1), (2, 1), (3, 1)])
    assert stats.count == 3
    assert stats.reordered == 1
    assert stats.duplicates == 1
    assert stats.lost() == 0


def test_empty():
    stats = StreamStatistics()
    assert stats.min_transit is None
    assert stats.max_transit is None
    assert stats.average == 0.0
    assert stats.loss() == 0.0
    assert stats.jitter == 0.0


def test_dump(capsys):
    stats = StreamStatistics("Inbound")
    feed(stats, [(1, 10), (2, 12), (3, 9)])
    stats.dump(total=4)
    out = capsys.readouterr().out
    assert "Inbound" in out
    assert "25.0%" in out
    assert "RFC3550" in out


def test_dump_without_packets(capsys):
    StreamStatistics().dump(total=10)
    captured = capsys.readouterr()
    assert "NO STATS AVAILABLE" in captured.err
