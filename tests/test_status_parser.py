"""Tests for the apcupsd status text parser."""

from datetime import timedelta, timezone

import pytest

from apcupsd_exporter.collector.status_parser import (
    StatusParseError,
    parse_duration,
    parse_lines,
    parse_status,
    parse_timestamp,
)

SAMPLE_APCACCESS_OUTPUT = """\
APC      : 001,036,0879
DATE     : 2016-09-06 22:20:28 -0400
HOSTNAME : nerr-nas
VERSION  : 3.14.14 (31 May 2016) debian
UPSNAME  : ups-rack-1
CABLE    : USB Cable
DRIVER   : USB UPS Driver
UPSMODE  : Stand Alone
STARTTIME: 2016-09-06 22:13:20 -0400
MODEL    : Back-UPS XS 1500G
STATUS   : ONLINE
LINEV    : 121.0 Volts
LOADPCT  : 12.5 Percent
BCHARGE  : 100.0 Percent
TIMELEFT : 46.0 Minutes
MBATTCHG : 5 Percent
MINTIMEL : 3 Minutes
MAXTIME  : 0 Seconds
SENSE    : Medium
LOTRANS  : 88.0 Volts
HITRANS  : 139.0 Volts
ALARMDEL : 30 Seconds
OUTPUTV  : 120.0 Volts
ITEMP    : 29.2 C
BATTV    : 27.3 Volts
NOMBATTV : 24.0 Volts
LASTXFER : Unacceptable line voltage changes
NUMXFERS : 1
XONBATT  : 2016-09-06 22:13:28 -0400
TONBATT  : 0 Seconds
CUMONBATT: 8 Seconds
XOFFBATT : 2016-09-06 22:13:36 -0400
LASTSTEST: N/A
SELFTEST : NO
STATFLAG : 0x05000008
SERIALNO : 3B1234X56789
BATTDATE : 2016-01-07
NOMINV   : 120 Volts
NOMPOWER : 865 Watts
FIRMWARE : 926.T2 .I USB FW:T2
END APC  : 2016-09-06 22:20:30 -0400
"""


def test_parse_lines_keys_and_values():
    values = parse_lines(SAMPLE_APCACCESS_OUTPUT)
    assert values["UPSNAME"] == "ups-rack-1"
    assert values["LINEV"] == "121.0 Volts"
    assert values["FIRMWARE"] == "926.T2 .I USB FW:T2"


def test_parse_lines_keeps_colons_in_values():
    values = parse_lines(SAMPLE_APCACCESS_OUTPUT)
    assert values["XONBATT"] == "2016-09-06 22:13:28 -0400"


def test_parse_lines_keys_with_spaces_and_no_padding():
    values = parse_lines(SAMPLE_APCACCESS_OUTPUT)
    assert values["END APC"] == "2016-09-06 22:20:30 -0400"
    assert values["CUMONBATT"] == "8 Seconds"


def test_parse_lines_accepts_nis_messages():
    values = parse_lines(["UPSNAME  : ups-1\n", "STATUS   : ONBATT LOWBATT \n"])
    assert values == {"UPSNAME": "ups-1", "STATUS": "ONBATT LOWBATT"}


def test_parse_lines_skips_garbage():
    assert parse_lines("not a status line\n\n") == {}


def test_parse_status_identity():
    status = parse_status(SAMPLE_APCACCESS_OUTPUT)
    assert status.ups_name == "ups-rack-1"
    assert status.hostname == "nerr-nas"
    assert status.model == "Back-UPS XS 1500G"
    assert status.status == "ONLINE"


def test_parse_status_numbers():
    status = parse_status(SAMPLE_APCACCESS_OUTPUT)
    assert status.line_voltage == 121.0
    assert status.load_percent == 12.5
    assert status.battery_charge_percent == 100.0
    assert status.output_voltage == 120.0
    assert status.battery_voltage == 27.3
    assert status.nominal_battery_voltage == 24.0
    assert status.nominal_input_voltage == 120.0
    assert status.internal_temp == 29.2
    assert status.number_transfers == 1
    assert status.nominal_power == 865


def test_parse_status_durations():
    status = parse_status(SAMPLE_APCACCESS_OUTPUT)
    assert status.time_left == timedelta(minutes=46)
    assert status.time_on_battery == timedelta(0)
    assert status.cumulative_time_on_battery == timedelta(seconds=8)


def test_parse_status_timestamps():
    status = parse_status(SAMPLE_APCACCESS_OUTPUT)
    assert status.x_on_battery.utcoffset() == timedelta(hours=-4)
    assert status.x_on_battery.astimezone(timezone.utc).hour == 2
    assert (status.x_off_battery - status.x_on_battery) == timedelta(seconds=8)


def test_parse_status_na_timestamp_is_unset():
    status = parse_status(SAMPLE_APCACCESS_OUTPUT)
    assert status.last_selftest is None


def test_parse_status_missing_keys_use_defaults():
    status = parse_status("UPSNAME  : bare\n")
    assert status.ups_name == "bare"
    assert status.load_percent == 0.0
    assert status.time_left == timedelta(0)
    assert status.x_on_battery is None


def test_parse_status_na_number_uses_default():
    status = parse_status("ITEMP    : N/A\n")
    assert status.internal_temp == 0.0


def test_parse_status_empty_input():
    status = parse_status("")
    assert status.ups_name == ""
    assert status.status == ""


def test_parse_status_bad_number_raises():
    with pytest.raises(StatusParseError) as exc:
        parse_status("LINEV    : lots Volts\n")
    assert exc.value.key == "LINEV"


def test_parse_duration_units():
    assert parse_duration("TONBATT", "90 Seconds").total_seconds() == 90.0
    assert parse_duration("TIMELEFT", "1.5 Minutes") == timedelta(seconds=90)
    assert parse_duration("X", "2 Hours") == timedelta(hours=2)


def test_parse_duration_unknown_unit():
    with pytest.raises(StatusParseError):
        parse_duration("TIMELEFT", "3 Fortnights")


def test_parse_timestamp_garbage():
    with pytest.raises(StatusParseError):
        parse_timestamp("XONBATT", "sometime last week")
