"""
UPS status snapshot.

Mirrors the fields apcupsd reports through its Network Information
Server (the same text `apcaccess status` prints). Only the values we
export as metrics are kept.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class UPSStatus:
    """A single point-in-time reading from apcupsd."""

    # Identity
    ups_name: str = ""
    hostname: str = ""
    model: str = ""

    # Space-delimited flags, e.g. "ONLINE" or "ONBATT LOWBATT"
    status: str = ""

    # Load / charge (0 - 100)
    load_percent: float = 0.0
    battery_charge_percent: float = 0.0

    # Voltages
    line_voltage: float = 0.0
    nominal_input_voltage: float = 0.0
    output_voltage: float = 0.0
    battery_voltage: float = 0.0
    nominal_battery_voltage: float = 0.0

    # Battery usage
    number_transfers: int = 0
    time_left: timedelta = timedelta(0)
    time_on_battery: timedelta = timedelta(0)
    cumulative_time_on_battery: timedelta = timedelta(0)

    # Transfer / self-test times, None when apcupsd reports N/A
    x_on_battery: Optional[datetime] = None
    x_off_battery: Optional[datetime] = None
    last_selftest: Optional[datetime] = None

    nominal_power: int = 0
    internal_temp: float = 0.0
