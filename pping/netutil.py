# pping/netutil.py
import socket
import time

_FAMILIES = {"": socket.AF_UNSPEC, "4": socket.AF_INET, "6": socket.AF_INET6}


def protocol_params(protocol: str) -> tuple[int, int]:
    """Map 'tcp', 'udp4', ... to (address family, socket type)."""
    base, suffix = protocol[:3], protocol[3:]
    if base not in ("tcp", "udp") or suffix not in _FAMILIES:
        raise ValueError(f"unknown protocol {protocol!r}")
    socktype = socket.SOCK_STREAM if base == "tcp" else socket.SOCK_DGRAM
    return _FAMILIES[suffix], socktype


def join_host_port(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def format_peer(sockaddr) -> str:
    # sockaddr is (ip, port) for v4 and (ip, port, flowinfo, scope_id) for v6
    return join_host_port(sockaddr[0], sockaddr[1])


def dial(addrs: list[tuple[int, tuple]], socktype: int, timeout: float) -> socket.socket:
    """
    Connect to the first address that accepts within `timeout` seconds overall.
    For datagram sockets connect() only fixes the peer, so it succeeds without
    any packet leaving the host.
    """
    if not addrs:
        raise socket.gaierror("no addresses to dial")
    deadline = time.monotonic() + timeout
    last_err: OSError | None = None
    for family, sockaddr in addrs:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise socket.timeout("timed out")
        sock = socket.socket(family, socktype)
        try:
            sock.settimeout(remaining)
            sock.connect(sockaddr)
            return sock
        except OSError as e:
            sock.close()
            last_err = e
    raise last_err
