# tests/test_config_and_sinks.py
import socket

import pytest

from pping.config import Settings
from pping.netutil import format_peer, join_host_port, protocol_params
from pping.schemas import ListSink, QueueSink, print_sink


def test_settings_defaults():
    s = Settings()
    assert (s.protocol, s.payload_size, s.interval_ms, s.ttl_ms) == ("tcp", 64, 1000, 10000)
    assert s.max_pings is None
    assert s.interval_s == 1.0 and s.ttl_s == 10.0
    assert not s.udp and Settings(protocol="udp6").udp


@pytest.mark.parametrize("kw", [
    {"protocol": "icmp"},
    {"port": 0},
    {"port": 70000},
    {"payload_size": -1},
    {"ttl_ms": -5},
    {"max_pings": 0},
])
def test_settings_rejects_bad_values(kw):
    with pytest.raises(ValueError):
        Settings(**kw)


@pytest.mark.parametrize("protocol,family,socktype", [
    ("tcp", socket.AF_UNSPEC, socket.SOCK_STREAM),
    ("tcp4", socket.AF_INET, socket.SOCK_STREAM),
    ("tcp6", socket.AF_INET6, socket.SOCK_STREAM),
    ("udp", socket.AF_UNSPEC, socket.SOCK_DGRAM),
    ("udp4", socket.AF_INET, socket.SOCK_DGRAM),
    ("udp6", socket.AF_INET6, socket.SOCK_DGRAM),
])
def test_protocol_params(protocol, family, socktype):
    assert protocol_params(protocol) == (family, socktype)


def test_peer_formatting():
    assert join_host_port("example.org", 80) == "example.org:80"
    assert format_peer(("10.0.0.1", 7)) == "10.0.0.1:7"
    assert format_peer(("::1", 7, 0, 0)) == "[::1]:7"


def test_list_sink_collects_lines():
    sink = ListSink()
    sink("a")
    sink("b")
    assert sink.lines == ["a", "b"]


def test_queue_sink_drops_when_full(caplog):
    """A full queue never blocks the caller."""
    sink = QueueSink(maxsize=2)
    for line in ("one", "two", "three"):
        sink(line)
    assert sink.discarded == 1
    assert sink.drain() == ["one", "two"]
    assert "log queue full" in caplog.text


def test_print_sink(capsys):
    print_sink("64 bytes to 127.0.0.1:80 tcp_seq=0 time=0.100 ms")
    assert capsys.readouterr().out == "64 bytes to 127.0.0.1:80 tcp_seq=0 time=0.100 ms\n"
