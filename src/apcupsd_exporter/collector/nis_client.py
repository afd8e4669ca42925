"""
Status source for a live apcupsd daemon. Talks to its Network
Information Server (NIS, TCP port 3551 by default) and maps the
status text into UPSStatus.

NIS framing: every message is a 2-byte big-endian length followed by
that many bytes. We send "status" and apcupsd answers with one message
per line of status text, then a zero-length message.

A new connection is opened for every fetch, so nothing is held open
between scrapes.
"""

from __future__ import annotations

import logging
import socket
import struct
from typing import List

from apcupsd_exporter.addr import split_host_port
from apcupsd_exporter.collector.base import StatusSource, StatusSourceError
from apcupsd_exporter.collector.status_parser import parse_status
from apcupsd_exporter.status import UPSStatus

log = logging.getLogger(__name__)

DEFAULT_ADDR = "localhost:3551"

_LENGTH = struct.Struct("!H")


class NISError(StatusSourceError):
    """Network or framing failure while talking to apcupsd."""


def encode_message(payload: bytes) -> bytes:
    return _LENGTH.pack(len(payload)) + payload


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    """Read exactly `size` bytes; recv() may return less."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = sock.recv(remaining)
        if not chunk:
            raise NISError("connection closed by apcupsd before end of status")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_messages(sock: socket.socket) -> List[str]:
    """Read length-prefixed messages until the zero-length terminator."""
    lines = []
    while True:
        (length,) = _LENGTH.unpack(_recv_exact(sock, _LENGTH.size))
        if length == 0:
            return lines
        lines.append(_recv_exact(sock, length).decode("utf-8", errors="replace"))


class NISClient(StatusSource):

    def __init__(self, addr: str = DEFAULT_ADDR, timeout_seconds: float = 5.0):
        self._host, self._port = split_host_port(addr, default_host="localhost")
        self._timeout = timeout_seconds

    def fetch(self) -> UPSStatus:
        """Request status over NIS and parse the reply."""
        return parse_status(self.fetch_lines())

    def fetch_lines(self) -> List[str]:
        """Raw status lines, one per NIS message."""
        log.debug("Requesting status from %s:%d", self._host, self._port)
        try:
            with socket.create_connection((self._host, self._port), timeout=self._timeout) as sock:
                sock.sendall(encode_message(b"status"))
                lines = read_messages(sock)
        except OSError as e:
            raise NISError(f"apcupsd at {self._host}:{self._port}: {e}") from e

        log.debug("Received %d status lines", len(lines))
        return lines

    def name(self) -> str:
        return f"apcupsd NIS ({self._host}:{self._port})"
