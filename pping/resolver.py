# pping/resolver.py
"""
Name resolution used by a ping run.

SystemResolver defers to the OS (getaddrinfo). DNSServerResolver sends every
query straight to one DNS server with dnspython and never reads the system
resolver configuration, which matters on hosts without /etc/resolv.conf
(e.g. Android). A resolver lives for one run and is handed to each attempt;
nothing here touches process-wide state.
"""
import ipaddress
import logging
import socket
from abc import ABC, abstractmethod

import dns.exception
import dns.resolver

from pping.netutil import dial, join_host_port, protocol_params

logger = logging.getLogger(__name__)

DEFAULT_DNS_PORT = 53


class PingError(RuntimeError):
    """Base class for errors that abort a run."""


class DNSServerUnreachable(PingError):
    def __init__(self, server: str):
        super().__init__(f"dns server not reachable: {server}")
        self.server = server


class Resolver(ABC):
    @abstractmethod
    def resolve(self, host: str, port: int, family: int, socktype: int) -> list[tuple[int, tuple]]:
        """Return (family, sockaddr) pairs for host:port, or raise socket.gaierror."""
        raise NotImplementedError


class SystemResolver(Resolver):
    def resolve(self, host, port, family, socktype):
        infos = socket.getaddrinfo(host, port, family, socktype)
        return [(fam, sockaddr) for fam, _, _, _, sockaddr in infos]


class DNSServerResolver(Resolver):
    def __init__(self, nameserver: str, port: int = DEFAULT_DNS_PORT, tcp: bool = False, timeout: float = 5.0):
        self.nameserver = nameserver
        self.port = port
        self.tcp = tcp
        self.timeout = timeout
        self._resolver = dns.resolver.Resolver(configure=False)
        self._resolver.nameservers = [nameserver]
        self._resolver.port = port
        self._resolver.lifetime = timeout

    def _query(self, host: str, rdtype: str) -> list[str]:
        try:
            answer = self._resolver.resolve(host, rdtype, tcp=self.tcp, lifetime=self.timeout)
        except (dns.resolver.NoAnswer, dns.resolver.NXDOMAIN):
            return []
        return [rdata.address for rdata in answer]

    def resolve(self, host, port, family, socktype):
        literal = _parse_literal(host)
        if literal is not None:
            fam = socket.AF_INET6 if literal.version == 6 else socket.AF_INET
            if family not in (socket.AF_UNSPEC, fam):
                raise socket.gaierror(f"address family mismatch for {host}")
            return [(fam, _sockaddr(fam, str(literal), port))]

        queries = []
        if family in (socket.AF_UNSPEC, socket.AF_INET):
            queries.append((socket.AF_INET, "A"))
        if family in (socket.AF_UNSPEC, socket.AF_INET6):
            queries.append((socket.AF_INET6, "AAAA"))

        out = []
        try:
            for fam, rdtype in queries:
                out.extend((fam, _sockaddr(fam, addr, port)) for addr in self._query(host, rdtype))
        except dns.exception.DNSException as e:
            logger.debug("lookup of %s via %s failed: %s", host, self.nameserver, e)
            raise socket.gaierror(f"lookup {host} on {join_host_port(self.nameserver, self.port)}: {e}") from e
        if not out:
            raise socket.gaierror(f"lookup {host} on {join_host_port(self.nameserver, self.port)}: no such host")
        return out


def _parse_literal(host: str):
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        return None


def _sockaddr(family: int, addr: str, port: int) -> tuple:
    if family == socket.AF_INET6:
        return (addr, port, 0, 0)
    return (addr, port)


def parse_dns_server(text: str) -> tuple[str, int]:
    """
    Split "host", "host:port", "[v6]:port" or a bare IPv6 literal into (host, port).
    The port defaults to 53.
    """
    text = text.strip()
    if not text:
        raise ValueError("empty dns server")
    if text.startswith("["):
        host, sep, rest = text[1:].partition("]")
        if not sep:
            raise ValueError(f"invalid dns server {text!r}")
        if not rest:
            return host, DEFAULT_DNS_PORT
        if not rest.startswith(":"):
            raise ValueError(f"invalid dns server {text!r}")
        return host, _parse_port(rest[1:], text)
    if text.count(":") == 1:
        host, _, port = text.partition(":")
        return host, _parse_port(port, text)
    # bare hostname, IPv4 or unbracketed IPv6 literal
    return text, DEFAULT_DNS_PORT


def _parse_port(port: str, text: str) -> int:
    try:
        value = int(port)
    except ValueError:
        raise ValueError(f"invalid port in dns server {text!r}") from None
    if not 0 < value < 65536:
        raise ValueError(f"invalid port in dns server {text!r}")
    return value


def open_resolver(settings) -> Resolver:
    """
    Build the resolver for one run. With settings.dns_server set, the server is
    dialled with the run's protocol within the run's deadline first; failure
    raises DNSServerUnreachable.
    """
    if not settings.dns_server:
        return SystemResolver()

    host, port = parse_dns_server(settings.dns_server)
    server = join_host_port(host, port)
    family, socktype = protocol_params(settings.protocol)
    try:
        # the server itself may be given by name; that lookup goes to the system
        addrs = SystemResolver().resolve(host, port, family, socktype)
        with dial(addrs, socktype, settings.ttl_s) as sock:
            nameserver = sock.getpeername()[0]
    except OSError as e:
        logger.debug("dns server %s check failed: %s", server, e)
        raise DNSServerUnreachable(server) from e

    logger.debug("resolving names through %s (%s)", server, settings.protocol)
    return DNSServerResolver(nameserver, port, tcp=not settings.udp, timeout=max(settings.ttl_s, 0.001))
