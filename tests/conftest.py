# tests/conftest.py
import socket
import threading

import pytest

REPLY = b"Message received."


class EchoServer:
    """
    Local TCP/UDP server on a background thread. Replies with REPLY to every
    payload unless silent, in which case it reads and hangs up without answering.
    With hold, TCP connections are read and then kept open with no reply.
    """

    def __init__(self, protocol="tcp", silent=False, hold=False):
        self.protocol = protocol
        self.silent = silent or hold
        self.hold = hold
        self.held = []
        socktype = socket.SOCK_STREAM if protocol == "tcp" else socket.SOCK_DGRAM
        self.sock = socket.socket(socket.AF_INET, socktype)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", 0))
        if protocol == "tcp":
            self.sock.listen(16)
        self.sock.settimeout(0.05)
        self.port = self.sock.getsockname()[1]
        self.hits = 0
        self._running = threading.Event()
        self._running.set()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        try:
            while self._running.is_set():
                try:
                    if self.protocol == "tcp":
                        self._serve_tcp()
                    else:
                        self._serve_udp()
                except socket.timeout:
                    continue
                except OSError:
                    continue
        finally:
            for conn in self.held:
                conn.close()
            self.sock.close()

    def _serve_tcp(self):
        conn, _ = self.sock.accept()
        if self.hold:
            self.held.append(conn)
            conn.settimeout(0.5)
            conn.recv(1024)
            self.hits += 1
            return
        with conn:
            conn.settimeout(0.5)
            try:
                data = conn.recv(1024)
            except OSError:
                return
            self.hits += 1
            if data and not self.silent:
                conn.sendall(REPLY)

    def _serve_udp(self):
        data, addr = self.sock.recvfrom(2048)
        self.hits += 1
        if not self.silent:
            self.sock.sendto(REPLY, addr)

    def stop(self):
        self._running.clear()
        self._thread.join(timeout=2)


def free_port(socktype=socket.SOCK_STREAM) -> int:
    """A port on 127.0.0.1 that nothing listens on."""
    s = socket.socket(socket.AF_INET, socktype)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


@pytest.fixture
def tcp_server():
    srv = EchoServer("tcp")
    yield srv
    srv.stop()


@pytest.fixture
def udp_server():
    srv = EchoServer("udp")
    yield srv
    srv.stop()


@pytest.fixture
def silent_tcp_server():
    srv = EchoServer("tcp", silent=True)
    yield srv
    srv.stop()


@pytest.fixture
def mute_tcp_server():
    srv = EchoServer("tcp", hold=True)
    yield srv
    srv.stop()
