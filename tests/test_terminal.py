"""Tests for the Rich status view."""

from rich.console import Console

from apcupsd_exporter.collector.base import StatusSource
from apcupsd_exporter.collector.ups_collector import UPSCollector
from apcupsd_exporter.dashboard.terminal import active_flags, build_status_table, print_status
from apcupsd_exporter.status import UPSStatus


class _FixedSource(StatusSource):
    def __init__(self, status):
        self._status = status

    def fetch(self):
        return self._status

    def name(self):
        return "fixed"


def _families(status_text: str):
    status = UPSStatus(ups_name="ups-1", hostname="nas", model="SMT1500", status=status_text)
    return list(UPSCollector(_FixedSource(status)).collect())


def test_active_flags_in_vocabulary_order():
    assert active_flags(_families("LOWBATT ONBATT")) == ["ONBATT", "LOWBATT"]


def test_active_flags_none_set():
    assert active_flags(_families("")) == []


def test_table_hides_unset_flags():
    table = build_status_table(_families("ONLINE"), "fixed")
    # 17 single-sample families plus the one set flag
    assert table.row_count == 18


def test_print_status_header():
    console = Console(width=200, record=True)
    print_status(_families("ONBATT"), "fixed", console=console)
    text = console.export_text()
    assert "ups-1" in text
    assert "SMT1500 on nas" in text
    assert "ONBATT" in text


def _families_for(**fields):
    return list(UPSCollector(_FixedSource(UPSStatus(**fields))).collect())


def test_print_status_keeps_bracketed_labels():
    console = Console(width=200, record=True)
    families = _families_for(ups_name="[ups1]", hostname="rack[/b]", model="[bold]x", status="ONLINE")
    print_status(families, "fixed", console=console)
    text = console.export_text()
    assert "[ups1]" in text
    assert "rack[/b]" in text
    assert "[bold]x" in text


def test_table_shows_non_finite_values():
    families = _families_for(ups_name="ups-1", internal_temp=float("nan"), load_percent=float("inf"))
    console = Console(width=200, record=True)
    console.print(build_status_table(families, "fixed"))
    text = console.export_text()
    assert "nan" in text
    assert "inf" in text
