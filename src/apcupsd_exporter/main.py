"""
apcupsd-exporter entry point.

Usage:
    apcupsd-exporter                                  Serve metrics for apcupsd on localhost:3551
    apcupsd-exporter --apcupsd-addr ups-host:3551      Serve metrics for a remote apcupsd
    apcupsd-exporter --mock                           Serve metrics for a simulated UPS
    apcupsd-exporter status                           Print one scrape and exit
"""

from __future__ import annotations

import logging

import click
from prometheus_client import CollectorRegistry

from apcupsd_exporter import __version__
from apcupsd_exporter.collector.mock_source import MockStatusSource
from apcupsd_exporter.collector.nis_client import DEFAULT_ADDR, NISClient
from apcupsd_exporter.collector.ups_collector import CollectionError, UPSCollector
from apcupsd_exporter.server import build_app, serve


log = logging.getLogger("apcupsd_exporter")


def _make_source(ctx):
    if ctx.obj["mock"]:
        return MockStatusSource()
    try:
        return NISClient(addr=ctx.obj["apcupsd_addr"], timeout_seconds=ctx.obj["timeout"])
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--apcupsd-addr")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="apcupsd-exporter")
@click.option("--apcupsd-addr", default=DEFAULT_ADDR, envvar="APCUPSD_ADDR", show_default=True,
              help="host:port of the apcupsd NIS server")
@click.option("--telemetry-addr", default=":9162", envvar="TELEMETRY_ADDR", show_default=True,
              help="host:port to serve metrics on (empty host = all interfaces)")
@click.option("--telemetry-path", default="/metrics", envvar="TELEMETRY_PATH", show_default=True,
              help="URL path for metrics")
@click.option("--timeout", default=5.0, envvar="APCUPSD_TIMEOUT", show_default=True,
              help="apcupsd connection timeout in seconds")
@click.option("--mock", is_flag=True, default=False, help="Use a simulated UPS instead of apcupsd")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, apcupsd_addr: str, telemetry_addr: str, telemetry_path: str, timeout: float,
        mock: bool, verbose: bool):
    """apcupsd-exporter - Prometheus metrics for APC UPS devices."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["apcupsd_addr"] = apcupsd_addr
    ctx.obj["telemetry_addr"] = telemetry_addr
    ctx.obj["telemetry_path"] = telemetry_path
    ctx.obj["timeout"] = timeout
    ctx.obj["mock"] = mock

    # No subcommand: run the exporter
    if ctx.invoked_subcommand is None:
        if not telemetry_path.startswith("/"):
            raise click.BadParameter("must start with '/'", param_hint="--telemetry-path")

        source = _make_source(ctx)
        log.debug("Status source: %s", source.name())
        registry = CollectorRegistry()
        registry.register(UPSCollector(source))
        app = build_app(registry, telemetry_path=telemetry_path)

        click.echo(f"Exporting {source.name()} at http://{telemetry_addr}{telemetry_path}")
        click.echo("Press Ctrl+C to stop.")
        try:
            serve(app, telemetry_addr)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--telemetry-addr")
        except OSError as e:
            raise click.ClickException(f"cannot listen on {telemetry_addr}: {e}")


@cli.command()
@click.pass_context
def status(ctx):
    """Take a single scrape and print it."""
    from apcupsd_exporter.dashboard.terminal import print_status

    source = _make_source(ctx)
    collector = UPSCollector(source)

    try:
        families = list(collector.collect())
    except CollectionError as e:
        click.echo(f"Error: {e.error}", err=True)
        raise SystemExit(1)

    print_status(families, source.name())


if __name__ == "__main__":
    cli()
