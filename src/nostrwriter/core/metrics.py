"""
Prometheus metrics collection and HTTP exposition.

Module-level metric objects shared by the pool and the coordinator. The
[Writer][nostrwriter.services.writer.Writer] records relay counts and
publish outcomes through ``set_gauge()`` / ``inc_counter()`` when
``MetricsConfig.enabled`` is true, and can expose them on an aiohttp
``/metrics`` endpoint for long-running hosts.

Labels:
    gauge:   relays_connected, relays_total
    counter: publish_success, publish_failed, relay_{status}
"""

from __future__ import annotations

from aiohttp import web
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from pydantic import BaseModel, Field


class MetricsConfig(BaseModel):
    """Configuration for metrics collection and the optional endpoint.

    Metrics are neither recorded nor served unless ``enabled`` is True.
    """

    enabled: bool = Field(default=False, description="Enable metrics collection")
    serve: bool = Field(default=False, description="Expose an HTTP /metrics endpoint")
    port: int = Field(default=8000, ge=1024, le=65535, description="Metrics HTTP port")
    host: str = Field(default="127.0.0.1", description="Metrics HTTP bind address")
    path: str = Field(default="/metrics", description="Metrics endpoint path")


WRITER_GAUGE = Gauge(
    "nostrwriter_gauge",
    "Writer gauge values (point-in-time state)",
    ["name"],
)

WRITER_COUNTER = Counter(
    "nostrwriter_counter",
    "Writer counter values (cumulative totals)",
    ["name"],
)

PUBLISH_DURATION_SECONDS = Histogram(
    "nostrwriter_publish_duration_seconds",
    "Duration of one fan-out publish in seconds",
    buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
)


class MetricsServer:
    """Async HTTP server exposing a Prometheus-compatible endpoint.

    Example:
        server = MetricsServer(MetricsConfig(enabled=True, serve=True, port=8001))
        await server.start()
        # ... writer runs ...
        await server.stop()
    """

    def __init__(self, config: MetricsConfig) -> None:
        self._config = config
        self._runner: web.AppRunner | None = None

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        """Start listening for scrape requests.

        No-op unless both ``enabled`` and ``serve`` are set.

        Raises:
            OSError: If the port is already in use or binding fails.
        """
        if not (self._config.enabled and self._config.serve) or self._runner is not None:
            return

        app = web.Application()
        app.router.add_get(self._config.path, self._handle_metrics)

        runner = web.AppRunner(app, access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self._config.host, self._config.port)
        await site.start()
        self._runner = runner

    async def stop(self) -> None:
        """Stop the HTTP server. Idempotent."""
        if self._runner is not None:
            runner, self._runner = self._runner, None
            await runner.cleanup()

    @staticmethod
    async def _handle_metrics(_request: web.Request) -> web.Response:
        return web.Response(
            body=generate_latest(),
            headers={"Content-Type": CONTENT_TYPE_LATEST},
        )
