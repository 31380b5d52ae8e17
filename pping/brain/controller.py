# pping/brain/controller.py

import logging
import time
from typing import Optional

from pping.brain.state import Result, RunState
from pping.resolver import open_resolver
from pping.schemas import LogSink, print_sink

logger = logging.getLogger(__name__)

FILLER_BYTE = 0x0a


class PingController:
    """
    Drives one ping run: open the resolver, then attempt -> count -> log ->
    sleep until max_pings is reached or interrupt() is observed.

    The log sink is called on the loop thread, so a slow sink delays the next
    probe and stretches the interval. Use schemas.QueueSink to decouple.
    """

    def __init__(self, prober, settings, log: Optional[LogSink] = None):
        self.prober = prober
        self.s = settings
        self.log = log or print_sink
        self.state = RunState()

    def interrupt(self):
        """
        Stop the run at the next iteration boundary. Safe from any thread and
        safe to repeat. An attempt already in flight still runs to completion
        or to its deadline first.
        """
        self.state.interrupted.set()

    @property
    def interrupted(self) -> bool:
        return self.state.interrupted.is_set()

    def run(self, result: Result) -> None:
        """
        Ping until done, updating `result` after every attempt so it can be
        read at any time. Raises DNSServerUnreachable before the first attempt
        when a DNS override is configured but can't be reached; per-attempt
        failures are only counted and logged.
        """
        run = self.state
        run.reset()
        payload = bytes([FILLER_BYTE]) * self.s.payload_size
        resolver = open_resolver(self.s)
        logger.debug("pinging %s:%d over %s, max_pings=%s", self.s.host, self.s.port,
                     self.s.protocol, self.s.max_pings)

        while not run.interrupted.is_set():
            seq = run.count
            ev = self.prober.probe_once(payload, seq, resolver)

            peer = ev.get("peer")
            if peer and run.first_packet:
                run.first_packet = False
                self.log(f"PING {self.s.host} ({peer}): {self.s.payload_size} data bytes")

            if ev.get("status") == "received":
                result.add_received()
                self.log(f"{ev.get('nbytes')} bytes {ev.get('direction')} {peer} "
                         f"{self.s.protocol}_seq={seq} time={ev.get('rtt_ms') or 0.0:.3f} ms")
            else:
                result.add_dropped()
                self.log(f"{ev.get('error') or 'unknown error'} for seq={seq}")

            run.count += 1
            if self.s.max_pings is not None and run.count >= self.s.max_pings:
                run.interrupted.set()
            time.sleep(self.s.interval_s)

        logger.debug("run finished after %d attempts", run.count)
