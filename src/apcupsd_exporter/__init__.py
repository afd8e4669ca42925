"""apcupsd-exporter - Prometheus metrics for APC UPS devices via apcupsd."""

__version__ = "0.3.0"

# Prefix shared by every exported metric name
NAMESPACE = "apcupsd"
