"""
HTTP exposition for the exporter. A plain WSGI app served by wsgiref:
the telemetry path renders the registry, "/" links to it.
"""

from __future__ import annotations

import logging
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app

from apcupsd_exporter.addr import split_host_port
from apcupsd_exporter.collector.ups_collector import CollectionError

log = logging.getLogger(__name__)

_INDEX = """<html>
<head><title>apcupsd Exporter</title></head>
<body>
<h1>apcupsd Exporter</h1>
<p><a href="{path}">Metrics</a></p>
</body>
</html>
"""


def build_app(registry: CollectorRegistry, telemetry_path: str = "/metrics"):
    metrics_app = make_wsgi_app(registry)

    def app(environ, start_response):
        path = environ.get("PATH_INFO") or "/"

        if path == telemetry_path:
            try:
                return metrics_app(environ, start_response)
            except CollectionError as e:
                body = f"An error has occurred while serving metrics:\n\n{e}\n".encode()
                start_response("500 Internal Server Error", [
                    ("Content-Type", "text/plain; charset=utf-8"),
                    ("Content-Length", str(len(body))),
                ])
                return [body]

        if path == "/":
            body = _INDEX.format(path=telemetry_path).encode()
            start_response("200 OK", [
                ("Content-Type", "text/html; charset=utf-8"),
                ("Content-Length", str(len(body))),
            ])
            return [body]

        body = b"404 page not found\n"
        start_response("404 Not Found", [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("Content-Length", str(len(body))),
        ])
        return [body]

    return app


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        pass  # Suppress per-scrape request logging


def make_http_server(app, addr: str) -> WSGIServer:
    host, port = split_host_port(addr)
    return make_server(host, port, app, handler_class=_QuietHandler)


def serve(app, addr: str):
    """Serve `app` on addr ("host:port", empty host = all interfaces) until Ctrl+C."""
    server = make_http_server(app, addr)
    log.info("Listening on %s", addr)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
