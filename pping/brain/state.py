# pping/brain/state.py
import threading
from dataclasses import dataclass, field

@dataclass
class Result:
    """
    Live counters for a run. The loop thread increments them while any other
    thread may read them, e.g. to print stats on Ctrl+C before run() returns.
    """
    _received: int = 0
    _dropped: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def received(self) -> int:
        with self._lock:
            return self._received

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    @property
    def total(self) -> int:
        received, dropped = self.snapshot()
        return received + dropped

    def snapshot(self) -> tuple[int, int]:
        """(received, dropped) read together."""
        with self._lock:
            return self._received, self._dropped

    def add_received(self):
        with self._lock:
            self._received += 1

    def add_dropped(self):
        with self._lock:
            self._dropped += 1

@dataclass
class RunState:
    count: int = 0
    first_packet: bool = True
    interrupted: threading.Event = field(default_factory=threading.Event)

    def reset(self):
        self.count = 0
        self.first_packet = True
        self.interrupted.clear()
