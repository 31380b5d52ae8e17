# pping/prober/fake.py
import time
from collections import deque

from pping.prober.base import Prober, ProbeEvent

class FakeProber(Prober):
    """
    script: list of ProbeEvent-like dicts returned one per call, in order.
    Once the script runs out every call returns a dropped timeout event.
    delay_s simulates time spent blocked in I/O.
    """
    def __init__(self, script=None, delay_s: float = 0.0):
        self.script = deque(script or [])
        self.delay_s = delay_s
        self.calls = []

    def probe_once(self, payload: bytes, seq: int, resolver) -> ProbeEvent:
        self.calls.append((len(payload), seq, resolver))
        if self.delay_s:
            time.sleep(self.delay_s)
        if self.script:
            event = dict(self.script.popleft())
            event.setdefault("seq", seq)
            return event
        # default: timeout
        return {
            "seq": seq,
            "protocol": "tcp",
            "status": "dropped",
            "peer": None,
            "nbytes": 0,
            "direction": "to",
            "rtt_ms": None,
            "error": "i/o timeout",
        }


def received(peer="127.0.0.1:7", nbytes=64, rtt_ms=1.0, direction="to", protocol="tcp") -> dict:
    return {"protocol": protocol, "status": "received", "peer": peer, "nbytes": nbytes,
            "direction": direction, "rtt_ms": rtt_ms, "error": None}


def dropped(error="i/o timeout", peer=None, protocol="tcp") -> dict:
    return {"protocol": protocol, "status": "dropped", "peer": peer, "nbytes": 0,
            "direction": "to", "rtt_ms": None, "error": error}
