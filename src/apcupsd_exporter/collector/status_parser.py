"""
Parser for apcupsd status text (the `apcaccess status` format).

Each line is "KEY : value", with the key padded to a fixed width:

    UPSNAME  : ups-rack-1
    LINEV    : 121.0 Volts
    TIMELEFT : 46.0 Minutes
    XONBATT  : 2016-09-06 22:13:28 -0400

Values carry their units as a trailing word. apcupsd prints "N/A" for
things it doesn't know (e.g. a UPS that never transferred to battery).
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional, Union

import dateutil.parser

from apcupsd_exporter.collector.base import StatusSourceError
from apcupsd_exporter.status import UPSStatus


class StatusParseError(StatusSourceError):
    """Raised when a known key carries a value we can't interpret."""

    def __init__(self, key: str, value: str, reason: str = ""):
        self.key = key
        self.value = value
        msg = f"invalid value for {key}: {value!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


# Key is uppercase letters/digits/spaces, padded before the colon
_LINE_RE = re.compile(r"^\s*([A-Z0-9 ]+?)\s*:\s?(.*?)\s*$")

_DURATION_UNITS = {
    "seconds": 1,
    "minutes": 60,
    "hours": 3600,
}

_UNSET = ("", "N/A")


def parse_lines(text: Union[str, Iterable[str]]) -> Dict[str, str]:
    """Split status text into a {KEY: value} dict.

    Accepts either the whole text or an iterable of lines (the NIS
    protocol hands us one line per message). Lines that don't look like
    "KEY : value" are skipped.
    """
    lines = text.splitlines() if isinstance(text, str) else text
    values: Dict[str, str] = {}

    for line in lines:
        match = _LINE_RE.match(line)
        if not match:
            continue
        values[match.group(1)] = match.group(2)

    return values


def parse_float(key: str, value: str) -> float:
    """First token as a float: "121.0 Volts" -> 121.0."""
    try:
        return float(value.split()[0])
    except (IndexError, ValueError):
        raise StatusParseError(key, value, "expected a number") from None


def parse_int(key: str, value: str) -> int:
    """First token as an int. Some firmwares print "865.0 Watts"."""
    return int(parse_float(key, value))


def parse_duration(key: str, value: str) -> timedelta:
    """"46.0 Minutes" -> timedelta(minutes=46)."""
    parts = value.split()
    if len(parts) != 2:
        raise StatusParseError(key, value, "expected '<number> <unit>'")

    amount, unit = parts
    multiplier = _DURATION_UNITS.get(unit.lower())
    if multiplier is None:
        raise StatusParseError(key, value, f"unknown duration unit {unit!r}")

    try:
        return timedelta(seconds=float(amount) * multiplier)
    except ValueError:
        raise StatusParseError(key, value, "expected a number") from None


def parse_timestamp(key: str, value: str) -> Optional[datetime]:
    """"2016-09-06 22:13:28 -0400" -> aware datetime. N/A -> None."""
    if value in _UNSET:
        return None
    try:
        return dateutil.parser.parse(value)
    except (ValueError, OverflowError):
        raise StatusParseError(key, value, "expected a timestamp") from None


def _text(key: str, value: str) -> str:
    return value


# apcupsd key -> (UPSStatus field, converter)
_FIELDS: Dict[str, tuple] = {
    "UPSNAME": ("ups_name", _text),
    "HOSTNAME": ("hostname", _text),
    "MODEL": ("model", _text),
    "STATUS": ("status", _text),
    "LOADPCT": ("load_percent", parse_float),
    "BCHARGE": ("battery_charge_percent", parse_float),
    "LINEV": ("line_voltage", parse_float),
    "NOMINV": ("nominal_input_voltage", parse_float),
    "OUTPUTV": ("output_voltage", parse_float),
    "BATTV": ("battery_voltage", parse_float),
    "NOMBATTV": ("nominal_battery_voltage", parse_float),
    "NUMXFERS": ("number_transfers", parse_int),
    "TIMELEFT": ("time_left", parse_duration),
    "TONBATT": ("time_on_battery", parse_duration),
    "CUMONBATT": ("cumulative_time_on_battery", parse_duration),
    "XONBATT": ("x_on_battery", parse_timestamp),
    "XOFFBATT": ("x_off_battery", parse_timestamp),
    "LASTSTEST": ("last_selftest", parse_timestamp),
    "NOMPOWER": ("nominal_power", parse_int),
    "ITEMP": ("internal_temp", parse_float),
}


def parse_status(text: Union[str, Iterable[str]]) -> UPSStatus:
    """Build a UPSStatus from apcupsd status text.

    Unknown keys are ignored and missing keys keep their defaults, since
    the set of reported keys varies by UPS model and driver.
    """
    raw = parse_lines(text)
    kwargs = {}

    for key, (field_name, convert) in _FIELDS.items():
        value = raw.get(key)
        if value is None:
            continue
        if convert is not _text and value in _UNSET:
            continue
        kwargs[field_name] = convert(key, value)

    return UPSStatus(**kwargs)
