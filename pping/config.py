from dataclasses import dataclass

from pping.resolver import parse_dns_server

PROTOCOLS = ("tcp", "tcp4", "tcp6", "udp", "udp4", "udp6")

@dataclass
class Settings:
    host: str = "127.0.0.1"
    port: int = 80
    protocol: str = "tcp"
    wait: bool = False              # block for an echo before calling it a success
    payload_size: int = 64
    interval_ms: int = 1000
    ttl_ms: int = 10000             # per-attempt deadline, not a hop count
    max_pings: int | None = None    # None -> run until interrupted
    dns_server: str | None = None   # "host" or "host:port", port 53 by default

    def __post_init__(self):
        if self.protocol not in PROTOCOLS:
            raise ValueError(f"unknown protocol {self.protocol!r}, expected one of {', '.join(PROTOCOLS)}")
        if not 0 < self.port < 65536:
            raise ValueError(f"invalid port {self.port}")
        if self.payload_size < 0:
            raise ValueError("payload_size must be >= 0")
        if self.interval_ms < 0 or self.ttl_ms < 0:
            raise ValueError("interval_ms and ttl_ms must be >= 0")
        if self.max_pings is not None and self.max_pings <= 0:
            raise ValueError("max_pings must be positive or None")
        if self.dns_server:
            parse_dns_server(self.dns_server)

    @property
    def interval_s(self) -> float:
        return self.interval_ms / 1000.0

    @property
    def ttl_s(self) -> float:
        return self.ttl_ms / 1000.0

    @property
    def udp(self) -> bool:
        return self.protocol.startswith("udp")
