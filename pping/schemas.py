import logging
import queue
from typing import Literal, Optional, Protocol, TypedDict

logger = logging.getLogger(__name__)

AttemptStatus = Literal["received", "dropped"]
Direction = Literal["to", "from"]

class ProbeEvent(TypedDict, total=False):
    seq: int
    protocol: str
    status: AttemptStatus
    peer: Optional[str]         # remote "ip:port", set once the connect succeeded
    nbytes: int
    direction: Direction
    rtt_ms: Optional[float]
    error: Optional[str]


class LogSink(Protocol):
    """Anything that accepts one line of text."""

    def __call__(self, line: str) -> None: ...


def print_sink(line: str) -> None:
    print(line, flush=True)


class ListSink:
    """Collects lines in memory; handy for tests and embedding."""

    def __init__(self):
        self.lines: list[str] = []

    def __call__(self, line: str) -> None:
        self.lines.append(line)


class QueueSink:
    """
    Hands lines to a bounded queue so a slow consumer doesn't stall the probe loop.
    Lines that don't fit are dropped and reported through logging.
    """

    def __init__(self, maxsize: int = 1024):
        self.queue: "queue.Queue[str]" = queue.Queue(maxsize=maxsize)
        self.discarded = 0

    def __call__(self, line: str) -> None:
        try:
            self.queue.put_nowait(line)
        except queue.Full:
            self.discarded += 1
            logger.warning("log queue full, discarded line: %s", line)

    def drain(self) -> list[str]:
        out = []
        while True:
            try:
                out.append(self.queue.get_nowait())
            except queue.Empty:
                return out
