"""High-level publishing facade.

[Writer][nostrwriter.services.writer.Writer] wires the relay pool, the
publisher, the published log and the metrics server together from one
[WriterConfig][nostrwriter.services.configs.WriterConfig]. It is what the
CLI drives and what an embedding application would use.

Warning:
    Writer holds the loaded signing keys. Never log or serialize
    ``config.keys`` or any ``ProfileConfig.keys``.

Examples:
    ```python
    writer = Writer.from_yaml("config/writer.yaml")
    async with writer:
        result = await writer.publish_document("notes/hello.md", summary="Hi")
        for url in result.published_relays:
            print("sent to", url)
    ```
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from nostrwriter.core.logger import Logger
from nostrwriter.core.metrics import (
    PUBLISH_DURATION_SECONDS,
    WRITER_COUNTER,
    WRITER_GAUGE,
    MetricsServer,
)
from nostrwriter.core.pool import PoolStatus, RelayPool
from nostrwriter.core.store import PublishedLog
from nostrwriter.core.yaml import load_yaml
from nostrwriter.exceptions import ConfigurationError, InvalidKeyEncodingError
from nostrwriter.models import DEFAULT_PROFILE, EventKind, PublishRequest
from nostrwriter.nips.event_builders import build_event, identifier_from_path
from nostrwriter.utils.keys import resolve_profile_name, select_profile

from .configs import WriterConfig
from .publisher import Publisher


if TYPE_CHECKING:
    from nostr_sdk import Keys

    from nostrwriter.models import PublishResult, SignedEvent
    from nostrwriter.utils.transport import RelayTransport


class Writer:
    """Connects to relays, builds events and publishes them.

    Args:
        config: Writer configuration (defaults read ``NOSTR_PRIVATE_KEY``).
        transport: Relay transport override, mainly for tests.
        store: Published log override; defaults to ``config.log_path``.
    """

    SERVICE_NAME = "writer"

    def __init__(
        self,
        config: WriterConfig | None = None,
        *,
        transport: RelayTransport | None = None,
        store: PublishedLog | None = None,
    ) -> None:
        self._config = config if config is not None else WriterConfig()
        self._logger = Logger(self.SERVICE_NAME)
        self._pool = RelayPool(self._config.pool, transport=transport, relays=self._config.relays)
        self._store = store if store is not None else PublishedLog(self._config.log_path)
        self._publisher = Publisher(self._pool, self._store, timeout=self._config.publish_timeout)
        self._metrics_server = MetricsServer(self._config.metrics)
        self._pool.add_status_listener(self._on_status)

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_yaml(cls, config_path: str | Path, **kwargs: Any) -> Writer:
        """Create a Writer from a YAML configuration file.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the YAML or its values are invalid.
        """
        return cls.from_dict(load_yaml(config_path), **kwargs)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any], **kwargs: Any) -> Writer:
        """Create a Writer from a configuration dictionary.

        Raises:
            ConfigurationError: If validation fails, including a missing or
                malformed signing key.
        """
        try:
            config = WriterConfig.model_validate(config_dict)
        except (ValidationError, ValueError, InvalidKeyEncodingError) as e:
            raise ConfigurationError(f"Invalid writer configuration: {e}") from e
        return cls(config, **kwargs)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def config(self) -> WriterConfig:
        """The writer configuration (read-only)."""
        return self._config

    @property
    def pool(self) -> RelayPool:
        return self._pool

    @property
    def store(self) -> PublishedLog:
        return self._store

    @property
    def publisher(self) -> Publisher:
        return self._publisher

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> PoolStatus:
        """Start the metrics endpoint (if enabled) and connect to every relay."""
        await self._metrics_server.start()
        if self._metrics_server.running:
            metrics = self._config.metrics
            self._logger.info(
                "metrics_server_started", host=metrics.host, port=metrics.port, path=metrics.path
            )
        return await self._pool.connect()

    async def reconnect(self, relays: Iterable[str] | None = None) -> PoolStatus:
        """Drop every connection and dial the relays again."""
        self._logger.info("reconnect_requested")
        return await self._pool.connect(relays)

    async def stop(self) -> None:
        """Close relay connections and the metrics endpoint. Idempotent."""
        await self._pool.shutdown()
        if self._metrics_server.running:
            await self._metrics_server.stop()
            self._logger.info("metrics_server_stopped")

    async def __aenter__(self) -> Writer:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any | None,
    ) -> None:
        await self.stop()

    def status(self) -> PoolStatus:
        return self._pool.status()

    def _on_status(self, status: PoolStatus) -> None:
        self._logger.debug("relay_status", summary=status.summary())
        self.set_gauge("relays_connected", status.connected)
        self.set_gauge("relays_total", status.total)

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def keys_for(self, profile: str | None = None) -> Keys:
        """Signing keys for *profile*, falling back to the default identity."""
        return select_profile(
            profile,
            self._config.profiles,
            self._config.keys.keys,
            multiple_profiles_enabled=self._config.multiple_profiles_enabled,
        )

    def profile_name(self, profile: str | None = None) -> str:
        """Nickname of the profile that signs for *profile*.

        ``DEFAULT_PROFILE`` when profiles are disabled or *profile* is unknown.
        """
        return resolve_profile_name(
            profile,
            self._config.profiles,
            multiple_profiles_enabled=self._config.multiple_profiles_enabled,
        )

    def public_key(self, profile: str | None = None) -> str:
        """The ``npub1`` public key used for *profile*."""
        return str(self.keys_for(profile).public_key().to_bech32())

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    def build(self, request: PublishRequest, *, created_at: int | None = None) -> SignedEvent:
        """Sign the event for *request* with the keys of its profile.

        Raises:
            EmptyContentError: If the content is blank.
        """
        identifier = request.identifier
        if identifier is None and self._config.stable_identifiers and request.source_path:
            identifier = identifier_from_path(request.source_path)
        return build_event(
            request,
            self.keys_for(request.profile_nickname),
            created_at=created_at,
            identifier=identifier,
        )

    async def publish(
        self, request: PublishRequest, *, event: SignedEvent | None = None
    ) -> PublishResult:
        """Build, sign and fan out *request*.

        *event* is a signed event already built from *request* with
        [build()][nostrwriter.services.writer.Writer.build], for callers
        that validate content before connecting.

        Raises:
            EmptyContentError: If the content is blank. Relay faults never
                raise; inspect the returned result instead.
        """
        if event is None:
            event = self.build(request)
        if self._config.metrics.enabled:
            with PUBLISH_DURATION_SECONDS.time():
                result = await self._publish_event(event, request)
        else:
            result = await self._publish_event(event, request)

        self.inc_counter("publish_success" if result.success else "publish_failed")
        for outcome in result.outcomes:
            self.inc_counter(f"relay_{outcome.status}")
        return result

    async def _publish_event(self, event: SignedEvent, request: PublishRequest) -> PublishResult:
        profile = self.profile_name(request.profile_nickname)
        if profile != request.profile_nickname:
            self._logger.warning(
                "profile_fallback", requested=request.profile_nickname, used=profile
            )
        return await self._publisher.publish(
            event,
            source_path=request.source_path,
            profile_nickname=profile,
        )

    async def document_request(  # noqa: PLR0913
        self,
        path: str | Path,
        *,
        title: str | None = None,
        summary: str | None = None,
        image: str | None = None,
        tags: Iterable[str] | None = None,
        profile: str = DEFAULT_PROFILE,
    ) -> PublishRequest:
        """Read the file at *path* into a long-form publish request.

        Raises:
            FileNotFoundError: If *path* does not exist.
        """
        content = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        return PublishRequest(
            content=content,
            kind=EventKind.LONG_FORM,
            title=title,
            summary=summary,
            image=image,
            tags=tuple(tags) if tags is not None else None,
            source_path=str(path),
            profile_nickname=profile,
        )

    @staticmethod
    def note_request(content: str, *, profile: str = DEFAULT_PROFILE) -> PublishRequest:
        return PublishRequest(content=content, kind=EventKind.TEXT_NOTE, profile_nickname=profile)

    async def publish_document(  # noqa: PLR0913
        self,
        path: str | Path,
        *,
        title: str | None = None,
        summary: str | None = None,
        image: str | None = None,
        tags: Iterable[str] | None = None,
        profile: str = DEFAULT_PROFILE,
    ) -> PublishResult:
        """Publish the file at *path* as a long-form article.

        Raises:
            FileNotFoundError: If *path* does not exist.
            EmptyContentError: If the file is blank.
        """
        request = await self.document_request(
            path, title=title, summary=summary, image=image, tags=tags, profile=profile
        )
        return await self.publish(request)

    async def publish_note(self, content: str, *, profile: str = DEFAULT_PROFILE) -> PublishResult:
        """Publish *content* as a short text note. Notes are not logged."""
        return await self.publish(self.note_request(content, profile=profile))

    async def published(self) -> list[dict[str, Any]]:
        """Entries of the published log, oldest first."""
        return await self._store.read()

    # -------------------------------------------------------------------------
    # Metrics
    # -------------------------------------------------------------------------

    def set_gauge(self, name: str, value: float) -> None:
        """Set a writer gauge; no-op when metrics are disabled."""
        if not self._config.metrics.enabled:
            return
        WRITER_GAUGE.labels(name=name).set(value)

    def inc_counter(self, name: str, value: float = 1) -> None:
        """Increment a writer counter; no-op when metrics are disabled."""
        if not self._config.metrics.enabled:
            return
        WRITER_COUNTER.labels(name=name).inc(value)

    def __repr__(self) -> str:
        return f"Writer(relays={len(self._config.relays)}, status={self.status().summary()!r})"
