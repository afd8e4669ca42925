"""
Fake apcupsd NIS server for testing without a UPS.

    python -m apcupsd_exporter.mock.fake_nis_server
    apcupsd-exporter --apcupsd-addr localhost:3551
"""

from __future__ import annotations

import socketserver
import struct
from datetime import datetime
from typing import List, Optional

from apcupsd_exporter.mock.generator import MockUPS
from apcupsd_exporter.status import UPSStatus

_LENGTH = struct.Struct("!H")

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def _ts(value: Optional[datetime]) -> str:
    return value.strftime(_TIME_FORMAT) if value else "N/A"


def render_status(status: UPSStatus) -> List[str]:
    """Format a UPSStatus the way apcupsd prints it, one line per key."""
    fields = [
        ("APC", "001,036,0879"),
        ("HOSTNAME", status.hostname),
        ("VERSION", "3.14.14 (31 May 2016) debian"),
        ("UPSNAME", status.ups_name),
        ("CABLE", "USB Cable"),
        ("DRIVER", "USB UPS Driver"),
        ("UPSMODE", "Stand Alone"),
        ("MODEL", status.model),
        ("STATUS", status.status + " "),
        ("LINEV", f"{status.line_voltage:.1f} Volts"),
        ("LOADPCT", f"{status.load_percent:.1f} Percent"),
        ("BCHARGE", f"{status.battery_charge_percent:.1f} Percent"),
        ("TIMELEFT", f"{status.time_left.total_seconds() / 60:.1f} Minutes"),
        ("MBATTCHG", "5 Percent"),
        ("MINTIMEL", "3 Minutes"),
        ("OUTPUTV", f"{status.output_voltage:.1f} Volts"),
        ("ITEMP", f"{status.internal_temp:.1f} C"),
        ("BATTV", f"{status.battery_voltage:.1f} Volts"),
        ("NUMXFERS", str(status.number_transfers)),
        ("XONBATT", _ts(status.x_on_battery)),
        ("TONBATT", f"{int(status.time_on_battery.total_seconds())} Seconds"),
        ("CUMONBATT", f"{int(status.cumulative_time_on_battery.total_seconds())} Seconds"),
        ("XOFFBATT", _ts(status.x_off_battery)),
        ("LASTSTEST", _ts(status.last_selftest)),
        ("STATFLAG", "0x05000008"),
        ("NOMINV", f"{status.nominal_input_voltage:.0f} Volts"),
        ("NOMBATTV", f"{status.nominal_battery_voltage:.1f} Volts"),
        ("NOMPOWER", f"{status.nominal_power} Watts"),
    ]
    return [f"{key:<9}: {value}\n" for key, value in fields]


class _NISHandler(socketserver.BaseRequestHandler):

    def _recv_exact(self, size: int) -> Optional[bytes]:
        data = b""
        while len(data) < size:
            chunk = self.request.recv(size - len(data))
            if not chunk:
                return None
            data += chunk
        return data

    def _send(self, payload: bytes):
        self.request.sendall(_LENGTH.pack(len(payload)) + payload)

    def handle(self):
        # apcupsd keeps the connection open for more commands
        while True:
            header = self._recv_exact(_LENGTH.size)
            if header is None:
                return
            (length,) = _LENGTH.unpack(header)
            command = self._recv_exact(length)
            if command is None:
                return

            if command == b"status":
                for line in render_status(self.server.ups.snapshot()):
                    self._send(line.encode())
            else:
                self._send(b"Invalid command\n")
            self._send(b"")


class FakeNISServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address, seed: int = 42):
        self.ups = MockUPS(seed=seed)
        super().__init__(address, _NISHandler)


def run_fake_server(host: str = "127.0.0.1", port: int = 3551):
    server = FakeNISServer((host, port))
    print(f"Fake apcupsd NIS server running at {host}:{port}")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
