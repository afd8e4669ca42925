"""
Prometheus collector for APC UPS metrics.

Each scrape fetches one UPSStatus and maps it onto a fixed set of
metric families. describe() and collect() both walk DESCRIPTORS, so
every sample we emit belongs to a family we advertised at registration.

Metric names and help texts are relied on by existing dashboards.
Don't change them.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional, Tuple

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric
from prometheus_client.registry import Collector

from apcupsd_exporter import NAMESPACE
from apcupsd_exporter.collector.base import StatusSource
from apcupsd_exporter.status import UPSStatus

log = logging.getLogger(__name__)


LABELS = ("ups_name", "hostname", "model")

# apcupsd status flags. Matched by substring, so "SLAVEDOWN" also
# lights up "SLAVE".
STATUS_FLAGS = (
    "CAL",            # Calibration mode
    "TRIM",           # Smart trim active
    "BOOST",          # Smart boost active
    "ONLINE",         # UPS is online
    "ONBATT",         # UPS is on battery
    "OVERLOAD",       # UPS is overloaded
    "LOWBATT",        # UPS has a low battery
    "REPLACEBATT",    # UPS battery needs to be replaced
    "NOBATT",         # UPS has no battery
    "SLAVE",          # UPS is a slave
    "SLAVEDOWN",      # UPS is a slave and is down
    "COMMLOST",       # Communication has been lost
    "SHUTTING DOWN",  # UPS is shutting down
)


class CollectionError(Exception):
    """The status fetch failed, so no metrics were produced this scrape.

    `metric` is the name of the family the failure is reported against
    (the info metric) and `error` is the underlying exception.
    """

    def __init__(self, metric: str, error: BaseException):
        self.metric = metric
        self.error = error
        super().__init__(f"{metric}: {error}")


def flag_value(status_text: str, flag: str) -> float:
    return 1.0 if flag in status_text else 0.0


def seconds(duration: timedelta) -> float:
    return duration.total_seconds()


def timestamp_seconds(ts: Optional[datetime]) -> float:
    """Unix time in whole seconds. Unset (None or datetime.min) -> 0."""
    if ts is None or ts.replace(tzinfo=None) == datetime.min:
        return 0.0
    return float(math.floor(ts.timestamp()))


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    help_text: str
    metric_type: str = "gauge"  # "gauge" or "counter"
    value: Optional[Callable[[UPSStatus], float]] = None
    extra_labels: Tuple[str, ...] = field(default=())

    @property
    def full_name(self) -> str:
        return f"{NAMESPACE}_{self.name}"

    @property
    def label_names(self) -> Tuple[str, ...]:
        return LABELS + self.extra_labels

    def family(self) -> Metric:
        """An empty metric family for this descriptor."""
        cls = CounterMetricFamily if self.metric_type == "counter" else GaugeMetricFamily
        return cls(self.full_name, self.help_text, labels=list(self.label_names))


INFO = MetricDescriptor(
    "info",
    "Metadata about a given UPS.",
    value=lambda s: 1.0,
)

STATUS = MetricDescriptor(
    "status",
    "Current UPS status.",
    extra_labels=("status",),
)

DESCRIPTORS: Tuple[MetricDescriptor, ...] = (
    INFO,
    STATUS,
    MetricDescriptor(
        "ups_load_percent",
        "Current UPS load percentage.",
        value=lambda s: s.load_percent,
    ),
    MetricDescriptor(
        "battery_charge_percent",
        "Current UPS battery charge percentage.",
        value=lambda s: s.battery_charge_percent,
    ),
    MetricDescriptor(
        "line_volts",
        "Current AC input line voltage.",
        value=lambda s: s.line_voltage,
    ),
    MetricDescriptor(
        "line_nominal_volts",
        "Nominal AC input line voltage.",
        value=lambda s: s.nominal_input_voltage,
    ),
    MetricDescriptor(
        "output_volts",
        "Current AC output voltage.",
        value=lambda s: s.output_voltage,
    ),
    MetricDescriptor(
        "battery_volts",
        "Current UPS battery voltage.",
        value=lambda s: s.battery_voltage,
    ),
    MetricDescriptor(
        "battery_nominal_volts",
        "Nominal UPS battery voltage.",
        value=lambda s: s.nominal_battery_voltage,
    ),
    MetricDescriptor(
        "battery_number_transfers_total",
        "Total number of transfers to UPS battery power.",
        metric_type="counter",
        value=lambda s: float(s.number_transfers),
    ),
    MetricDescriptor(
        "battery_time_left_seconds",
        "Number of seconds remaining of UPS battery power.",
        value=lambda s: seconds(s.time_left),
    ),
    MetricDescriptor(
        "battery_time_on_seconds",
        "Number of seconds the UPS has been providing battery power due to an AC input line outage.",
        value=lambda s: seconds(s.time_on_battery),
    ),
    MetricDescriptor(
        "battery_cumulative_time_on_seconds_total",
        "Total number of seconds the UPS has provided battery power due to AC input line outages.",
        metric_type="counter",
        value=lambda s: seconds(s.cumulative_time_on_battery),
    ),
    MetricDescriptor(
        "last_transfer_on_battery_time_seconds",
        "UNIX timestamp of last transfer to battery since apcupsd startup.",
        value=lambda s: timestamp_seconds(s.x_on_battery),
    ),
    MetricDescriptor(
        "last_transfer_off_battery_time_seconds",
        "UNIX timestamp of last transfer from battery since apcupsd startup.",
        value=lambda s: timestamp_seconds(s.x_off_battery),
    ),
    MetricDescriptor(
        "last_selftest_time_seconds",
        "UNIX timestamp of last selftest since apcupsd startup.",
        value=lambda s: timestamp_seconds(s.last_selftest),
    ),
    MetricDescriptor(
        "nominal_power_watts",
        "Nominal power output in watts.",
        value=lambda s: float(s.nominal_power),
    ),
    MetricDescriptor(
        "internal_temperature_celsius",
        "Internal temperature in °C.",
        value=lambda s: s.internal_temp,
    ),
)


class UPSCollector(Collector):
    """Register with a prometheus_client CollectorRegistry."""

    def __init__(self, source: StatusSource):
        self._source = source

    def describe(self) -> Iterator[Metric]:
        for descriptor in DESCRIPTORS:
            yield descriptor.family()

    def collect(self) -> Iterator[Metric]:
        """Fetch once, then yield one family per descriptor.

        Raises CollectionError (before yielding anything) if the fetch
        fails. Retrying is left to whoever scrapes us.
        """
        try:
            status = self._source.fetch()
        except Exception as e:
            log.error("failed collecting UPS metrics: %s", e)
            raise CollectionError(INFO.full_name, e) from e

        labels = [status.ups_name, status.hostname, status.model]

        for descriptor in DESCRIPTORS:
            family = descriptor.family()
            if descriptor is STATUS:
                for flag in STATUS_FLAGS:
                    family.add_metric(labels + [flag], flag_value(status.status, flag))
            else:
                family.add_metric(labels, descriptor.value(status))
            yield family
