"""
Mock UPS status generator.

Produces fake but realistic readings so we can develop and test without
a UPS on the desk. Numbers are loosely based on a Back-UPS XS 1500 with
a couple of servers plugged in, on 120V mains that drops out now and then.
"""

import random
from datetime import datetime, timedelta, timezone

from apcupsd_exporter.status import UPSStatus


class MockUPS:

    def __init__(self, seed: int = 42, ups_name: str = "mock-ups", hostname: str = "localhost"):
        self._rng = random.Random(seed)
        self._tick = 0
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._on_battery_ticks = 0
        self._transfers = 0
        self._cumulative_on_battery = timedelta(0)
        self._charge = 100.0
        self._x_on_battery = None
        self._x_off_battery = None
        self.ups_name = ups_name
        self.hostname = hostname
        self.model = "Back-UPS XS 1500G"
        self.nominal_power = 865
        self.nominal_input_voltage = 120.0
        self.nominal_battery_voltage = 24.0
        self.tick_seconds = 15

    def snapshot(self) -> UPSStatus:
        """Generate one reading, advancing the simulation clock."""
        self._tick += 1
        self._clock += timedelta(seconds=self.tick_seconds)

        # ~3% chance per tick of an outage; outages last 2-8 ticks
        if self._on_battery_ticks == 0 and self._rng.random() > 0.97:
            self._on_battery_ticks = self._rng.randint(2, 8)
            self._transfers += 1
            self._x_on_battery = self._clock

        on_battery = self._on_battery_ticks > 0
        load = max(5.0, min(95.0, 22 + self._rng.gauss(0, 3)))

        if on_battery:
            self._on_battery_ticks -= 1
            self._cumulative_on_battery += timedelta(seconds=self.tick_seconds)
            # Heavier load drains faster
            self._charge = max(0.0, self._charge - load * 0.08)
            line_voltage = 0.0
            if self._on_battery_ticks == 0:
                self._x_off_battery = self._clock
        else:
            self._charge = min(100.0, self._charge + 0.5)
            line_voltage = self.nominal_input_voltage + self._rng.gauss(0, 1.5)

        flags = ["ONBATT"] if on_battery else ["ONLINE"]
        if self._charge < 10:
            flags.append("LOWBATT")

        # Runtime at full charge is ~45 min at 22% load
        full_runtime_min = 45 * 22 / load
        time_left = timedelta(minutes=round(full_runtime_min * self._charge / 100, 1))
        time_on_battery = (
            self._clock - self._x_on_battery if on_battery and self._x_on_battery else timedelta(0)
        )

        battery_voltage = self.nominal_battery_voltage * (0.92 + 0.1 * self._charge / 100)

        return UPSStatus(
            ups_name=self.ups_name,
            hostname=self.hostname,
            model=self.model,
            status=" ".join(flags),
            load_percent=round(load, 1),
            battery_charge_percent=round(self._charge, 1),
            line_voltage=round(line_voltage, 1),
            nominal_input_voltage=self.nominal_input_voltage,
            output_voltage=round(line_voltage if not on_battery else self.nominal_input_voltage, 1),
            battery_voltage=round(battery_voltage, 1),
            nominal_battery_voltage=self.nominal_battery_voltage,
            number_transfers=self._transfers,
            time_left=time_left,
            time_on_battery=time_on_battery,
            cumulative_time_on_battery=self._cumulative_on_battery,
            x_on_battery=self._x_on_battery,
            x_off_battery=self._x_off_battery,
            last_selftest=None,
            nominal_power=self.nominal_power,
            internal_temp=round(29 + self._rng.gauss(0, 0.5), 1),
        )
