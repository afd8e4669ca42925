"""host:port address strings, as used by the CLI flags."""

from __future__ import annotations

from typing import Tuple


def split_host_port(addr: str, default_host: str = "") -> Tuple[str, int]:
    """Split "host:port" (or ":port") into a (host, port) tuple.

    An empty host is replaced by `default_host`. IPv6 hosts must be
    bracketed, e.g. "[::1]:3551".
    """
    host, sep, port = addr.rpartition(":")
    if not sep or not port:
        raise ValueError(f"missing port in address {addr!r}")

    try:
        port_num = int(port)
    except ValueError:
        raise ValueError(f"invalid port in address {addr!r}") from None

    if not 0 <= port_num <= 65535:
        raise ValueError(f"port out of range in address {addr!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    return host or default_host, port_num
