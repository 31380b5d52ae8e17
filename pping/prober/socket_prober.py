# pping/prober/socket_prober.py
import logging
import socket
import time

from pping.netutil import dial, format_peer, join_host_port, protocol_params
from pping.prober.base import Prober, ProbeEvent
from pping.resolver import Resolver

logger = logging.getLogger(__name__)

READ_BUFFER_SIZE = 1024


class AttemptFailed(Exception):
    """A non-transport reason for dropping an attempt (short write, empty read)."""


class SocketProber(Prober):
    """
    Plain-socket prober: dial host:port, write the payload and optionally read
    an echo, all inside the per-attempt deadline. RTT only counts the phases
    that ran, so UDP without wait measures local socket setup and always
    succeeds even when nothing listens on the far side.
    """

    def __init__(self, settings):
        self.s = settings
        self.family, self.socktype = protocol_params(settings.protocol)
        self.target = join_host_port(settings.host, settings.port)

    def _event(self, seq: int, **fields) -> ProbeEvent:
        event: ProbeEvent = {
            "seq": seq, "protocol": self.s.protocol, "status": "dropped",
            "peer": None, "nbytes": 0, "direction": "to", "rtt_ms": None,
            "error": None,
        }
        event.update(fields)
        return event

    def _dial(self, resolver: Resolver) -> socket.socket:
        deadline = time.monotonic() + self.s.ttl_s
        addrs = resolver.resolve(self.s.host, self.s.port, self.family, self.socktype)
        return dial(addrs, self.socktype, max(0.0, deadline - time.monotonic()))

    @staticmethod
    def _remaining(deadline: float) -> float:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise socket.timeout("i/o timeout")
        return remaining

    def _write(self, sock: socket.socket, payload: bytes, deadline: float) -> int:
        view = memoryview(payload)
        sent = 0
        # at least one send, so an empty payload still goes out as an empty datagram
        while True:
            sock.settimeout(self._remaining(deadline))
            n = sock.send(view[sent:])
            sent += n
            if n == 0 or sent >= len(view):
                return sent

    def probe_once(self, payload: bytes, seq: int, resolver: Resolver) -> ProbeEvent:
        start = time.perf_counter()
        try:
            sock = self._dial(resolver)
        except OSError as e:
            logger.debug("seq=%d dial %s failed: %r", seq, self.target, e)
            return self._event(seq, error=f"dial {self.s.protocol} {self.target}: {e}")
        t_connect = time.perf_counter() - start

        peer = None
        phase = "write"
        try:
            peer = format_peer(sock.getpeername())
            deadline = time.monotonic() + self.s.ttl_s

            start = time.perf_counter()
            n = self._write(sock, payload, deadline)
            t_write = time.perf_counter() - start
            if n != len(payload):
                raise AttemptFailed(f"partial payload written (size={n})")

            rtt = t_connect + t_write
            nbytes, direction = len(payload), "to"
            if self.s.wait:
                phase = "read"
                sock.settimeout(self._remaining(deadline))
                start = time.perf_counter()
                data = sock.recv(READ_BUFFER_SIZE)
                t_read = time.perf_counter() - start
                if not data:
                    raise AttemptFailed("no packet received")
                rtt += t_read
                nbytes, direction = len(data), "from"
        except AttemptFailed as e:
            return self._event(seq, peer=peer, error=str(e))
        except OSError as e:
            logger.debug("seq=%d %s %s failed: %r", seq, phase, peer or self.target, e)
            return self._event(seq, peer=peer, error=f"{phase} {self.s.protocol} {peer or self.target}: {e}")
        finally:
            sock.close()

        return self._event(seq, status="received", peer=peer, nbytes=nbytes,
                           direction=direction, rtt_ms=rtt * 1000.0)
