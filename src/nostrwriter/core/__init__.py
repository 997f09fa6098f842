"""Core layer: relay pool, published log, logging, metrics and YAML loading.

Depends on ``nostrwriter.models``, ``nostrwriter.exceptions`` and the
transport primitives in ``nostrwriter.utils``. Only ``nostrwriter.services``
depends on it.

Attributes:
    RelayPool: Concurrent relay connections with per-relay connect
        timeouts and status listeners.
        See [RelayPool][nostrwriter.core.pool.RelayPool].
    PublishedLog: Append-only JSON array of published long-form events,
        written atomically. See [PublishedLog][nostrwriter.core.store.PublishedLog].
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][nostrwriter.core.logger.Logger].
    MetricsServer: Prometheus ``/metrics`` HTTP endpoint.
        See [MetricsServer][nostrwriter.core.metrics.MetricsServer].
    YAML: Safe YAML loading with ``yaml.safe_load()``.
        See [load_yaml()][nostrwriter.core.yaml.load_yaml].

Examples:
    ```python
    from nostrwriter.core import RelayPool, RelayPoolConfig

    async with RelayPool(RelayPoolConfig(), relays=["wss://nos.lol"]) as pool:
        print(pool.status().summary())
    ```
"""

from .logger import Logger, StructuredFormatter, format_kv_pairs
from .metrics import (
    PUBLISH_DURATION_SECONDS,
    WRITER_COUNTER,
    WRITER_GAUGE,
    MetricsConfig,
    MetricsServer,
)
from .pool import PoolStatus, RelayConnection, RelayPool, RelayPoolConfig
from .store import PublishedLog
from .yaml import load_yaml


__all__ = [
    "PUBLISH_DURATION_SECONDS",
    "WRITER_COUNTER",
    "WRITER_GAUGE",
    "Logger",
    "MetricsConfig",
    "MetricsServer",
    "PoolStatus",
    "PublishedLog",
    "RelayConnection",
    "RelayPool",
    "RelayPoolConfig",
    "StructuredFormatter",
    "format_kv_pairs",
    "load_yaml",
]
