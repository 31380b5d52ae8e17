# tools/run_ping.py
# Usage examples:
#   python3 -m tools.run_ping google.com 80
#   python3 -m tools.run_ping -s 128 google.com 80
#   python3 -m tools.run_ping -p udp -w -c 5 -t 1000 myserver.com 8085

import argparse
import logging
import signal
import sys

from pping.brain.controller import PingController
from pping.brain.state import Result
from pping.config import PROTOCOLS, Settings
from pping.prober.socket_prober import SocketProber
from pping.resolver import PingError
from pping.schemas import print_sink

VERSION = "1.1"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_SOME_LOSS = 2
EXIT_TOTAL_LOSS = 3


def exit_code(result: Result) -> int:
    received, dropped = result.snapshot()
    if dropped == 0:
        return EXIT_OK
    if received == 0:
        return EXIT_TOTAL_LOSS
    return EXIT_SOME_LOSS


def format_statistics(host: str, port: int, result: Result) -> str:
    received, dropped = result.snapshot()
    total = received + dropped
    loss = dropped / total * 100 if total else 0.0
    return (f"\n--- {host}:{port} ping statistics ---\n"
            f"{total} packets transmitted, {received} packets received, {loss:.2f}% packet loss")


class ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit 1; status 2 is reserved for partial loss."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_ERROR, f"{self.prog}: error: {message}\n")


def build_argparser():
    ap = ArgumentParser(
        prog="pping",
        description="pping - Protocol Ping. Tool to simulate TCP and UDP pings. "
                    "This can also be used as a port scanner.")
    ap.add_argument("host", help="Host name or IP address to ping")
    ap.add_argument("port", type=int, help="Port on the host to ping")
    ap.add_argument("-s", dest="payload_size", type=int, default=64, metavar="size",
                    help="Payload size in bytes.")
    ap.add_argument("-i", dest="interval_ms", type=int, default=1000, metavar="time",
                    help="Interval time between pings in ms.")
    ap.add_argument("-t", dest="ttl_ms", type=int, default=10000, metavar="time",
                    help="Max time-to-live for each ping (in ms) before moving on to the next attempt.")
    ap.add_argument("-p", dest="protocol", default="tcp", choices=PROTOCOLS,
                    help="Protocol to use. Since UDP is connectionless, pings will always succeed "
                         "even if nothing listens on the given host and port. Use -w to wait for a response.")
    ap.add_argument("-w", dest="wait", action="store_true",
                    help="Wait for a response from the server. Ideally set when the protocol is udp.")
    ap.add_argument("-c", dest="max_pings", type=int, default=None, metavar="num",
                    help="Stop after sending the specified number of pings.")
    ap.add_argument("-d", dest="dns_server", default=None, metavar="server",
                    help="DNS server to use for name resolution, for systems that don't use "
                         "the traditional configuration such as /etc/resolv.conf.")
    ap.add_argument("-v", action="version", version=VERSION, help="Display version.")
    ap.add_argument("--debug", action="store_true", help="Enable debug logging on stderr.")
    return ap


def main(argv=None):
    ap = build_argparser()
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    if not args.host:
        ap.error("host not specified")
    if args.port <= 0:
        ap.error("invalid port specified")

    try:
        s = Settings(
            host=args.host,
            port=args.port,
            protocol=args.protocol,
            wait=args.wait,
            payload_size=args.payload_size,
            interval_ms=args.interval_ms,
            ttl_ms=args.ttl_ms,
            max_pings=args.max_pings,
            dns_server=args.dns_server,
        )
    except ValueError as e:
        ap.error(str(e))

    ctrl = PingController(SocketProber(s), s, log=print_sink)
    result = Result()

    def finish():
        print(format_statistics(s.host, s.port, result))
        sys.exit(exit_code(result))

    def on_sigint(signum, frame):
        # don't wait for the in-flight attempt to hit its deadline
        ctrl.interrupt()
        finish()

    signal.signal(signal.SIGINT, on_sigint)

    try:
        ctrl.run(result)
    except PingError as e:
        print(e, file=sys.stderr)
        sys.exit(EXIT_ERROR)
    finish()


if __name__ == "__main__":
    main()
