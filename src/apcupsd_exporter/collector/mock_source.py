"""
Status source backed by the mock UPS simulator.
Used for local development on machines without a UPS.
"""

from apcupsd_exporter.collector.base import StatusSource
from apcupsd_exporter.mock.generator import MockUPS
from apcupsd_exporter.status import UPSStatus


class MockStatusSource(StatusSource):
    """Wraps the mock generator as a standard status source."""

    def __init__(self, seed: int = 42):
        self._ups = MockUPS(seed=seed)

    def fetch(self) -> UPSStatus:
        return self._ups.snapshot()

    def name(self) -> str:
        return "Mock apcupsd (Back-UPS XS 1500G, simulated)"
