"""Tests for the command line interface."""

import threading
from logging.handlers import TimedRotatingFileHandler

from click.testing import CliRunner

from cli import cli, logger
from jitterpy.session import Reflector


def test_pingpong_command():
    result = CliRunner().invoke(cli, ["pingpong", "-c", "5", "-t", "5"])
    assert result.exit_code == 0, result.output
    assert "Loopback" in result.output
    assert "0.0%" in result.output


def test_command_prefix_alias():
    result = CliRunner().invoke(cli, ["ping", "-c", "2", "-s", "100"])
    assert result.exit_code == 0, result.output


def test_unknown_command_is_rejected():
    result = CliRunner().invoke(cli, ["re", "--help"])
    assert result.exit_code == 0
    assert "inbound jitter" in result.output
    result = CliRunner().invoke(cli, ["xyz"])
    assert result.exit_code != 0


def test_count_range():
    result = CliRunner().invoke(cli, ["pingpong", "-c", "0"])
    assert result.exit_code == 2


def test_sender_command():
    reflector = Reflector("127.0.0.1", 0)
    thread = threading.Thread(target=reflector.run, kwargs={"timeout": 10})
    thread.start()
    try:
        result = CliRunner().invoke(cli, ["sender", "127.0.0.1:%d" % reflector.port,
                                          "-c", "3", "-i", "10", "-t", "2"])
    finally:
        reflector.stop()
        thread.join()
        reflector.close()

    assert result.exit_code == 0, result.output
    assert "Roundtrip" in result.output


def test_reflector_command_bad_address():
    result = CliRunner().invoke(cli, ["reflector", "300.1.1.1:5000", "-t", "0"])
    assert result.exit_code == 1
    assert "cannot bind" in result.output


def test_reflector_command_times_out():
    result = CliRunner().invoke(cli, ["reflector", "127.0.0.1:0", "-t", "0.1"])
    assert result.exit_code == 0, result.output


def test_logfile(tmp_path):
    logfile = tmp_path / "jitter.log"
    try:
        result = CliRunner().invoke(cli, ["-l", str(logfile), "pingpong", "-c", "2"])
    finally:
        for handler in list(logger.handlers):
            if isinstance(handler, TimedRotatingFileHandler):
                logger.removeHandler(handler)
                handler.close()
    assert result.exit_code == 0, result.output
    assert "Packet: 2" in logfile.read_text()
