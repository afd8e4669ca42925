"""
Base status source interface.

A status source is anything that can produce a UPSStatus. This keeps
the Prometheus collector decoupled from where the data actually comes
from (apcupsd over the network, the mock simulator, a test stub).
"""

from abc import ABC, abstractmethod

from apcupsd_exporter.status import UPSStatus


class StatusSourceError(Exception):
    """Raised when a status source can't produce a snapshot."""


class StatusSource(ABC):
    """Interface for all UPS status sources."""

    @abstractmethod
    def fetch(self) -> UPSStatus:
        """Fetch one snapshot of current UPS status."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...
