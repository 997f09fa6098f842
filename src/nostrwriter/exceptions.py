"""nostr-writer exception hierarchy.

A leaf module: it imports nothing from the package, so every layer can
raise these without creating an import cycle.

Provides typed exceptions for every error category so callers can tell
fatal validation errors apart from per-relay faults, which the coordinator
absorbs into outcomes.

Exception hierarchy:

```text
NostrWriterError (base -- never raised directly)
├── ConfigurationError                    -- config validation, missing keys, bad YAML
├── InvalidKeyEncodingError               -- malformed nsec/npub/hex key material
├── EmptyContentError                     -- nothing to publish
├── ConnectivityError                     -- relay dial failures (absorbed by the pool)
│   ├── RelayConnectTimeoutError          -- dial did not finish in time
│   └── RelayConnectError                 -- dial failed or relay closed during handshake
├── PublishingError                       -- per-relay publish failures (absorbed by the coordinator)
│   ├── RelayPublishTimeoutError          -- no OK before the deadline
│   ├── RelayPublishRejectedError         -- relay answered OK false
│   ├── RelayDisconnectedDuringPublishError
│   └── NoRelaysAcceptedError             -- aggregate failure, opt-in via ensure_accepted()
└── LogCorruptError                       -- unreadable published log (recovered locally)
```

See Also:
    [RelayPool][nostrwriter.core.pool.RelayPool]: Converts connectivity
        errors into exclusion from the connected set.
    [Publisher][nostrwriter.services.publisher.Publisher]: Converts
        publishing errors into [RelayOutcome][nostrwriter.models.result.RelayOutcome]
        values.
    [PublishedLog][nostrwriter.core.store.PublishedLog]: Recovers from
        [LogCorruptError][nostrwriter.exceptions.LogCorruptError] by
        starting a fresh log.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence

    from nostrwriter.models.result import RelayOutcome


class NostrWriterError(Exception):
    """Base exception for all nostr-writer errors.

    Never raised directly -- always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Configuration and input validation
# ---------------------------------------------------------------------------


class ConfigurationError(NostrWriterError):
    """Invalid or missing configuration (YAML, env vars, CLI flags)."""


class InvalidKeyEncodingError(NostrWriterError):
    """Key material could not be decoded.

    Fatal to the publish attempt; raised before any network activity.
    """


class EmptyContentError(NostrWriterError):
    """The content to publish is empty or whitespace only."""


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------


class ConnectivityError(NostrWriterError):
    """Base for relay connection failures.

    Never surfaced to the caller: the pool logs them and leaves the relay
    out of the connected set.
    """

    def __init__(self, url: str, message: str = "") -> None:
        self.url = url
        super().__init__(f"{url}: {message}" if message else url)


class RelayConnectTimeoutError(ConnectivityError):
    """The relay did not complete the handshake before the connect timeout."""


class RelayConnectError(ConnectivityError):
    """The relay refused, errored, or closed before the handshake completed."""


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------


class PublishingError(NostrWriterError):
    """Base for publish failures."""


class RelayPublishError(PublishingError):
    """Base for failures of one relay within one publish call."""

    def __init__(self, url: str, message: str = "") -> None:
        self.url = url
        super().__init__(f"{url}: {message}" if message else url)


class RelayPublishTimeoutError(RelayPublishError):
    """The relay did not answer before the per-relay publish deadline."""


class RelayPublishRejectedError(RelayPublishError):
    """The relay answered ``OK`` with ``false``.

    Attributes:
        reason: The relay-supplied message (e.g. ``"blocked: banned"``).
    """

    def __init__(self, url: str, reason: str = "") -> None:
        self.reason = reason
        super().__init__(url, reason or "rejected")


class RelayDisconnectedDuringPublishError(RelayPublishError):
    """The connection dropped before the relay answered."""


class NoRelaysAcceptedError(PublishingError):
    """No relay accepted the event.

    Attributes:
        outcomes: Every per-relay outcome of the failed publish.
    """

    def __init__(self, outcomes: Sequence[RelayOutcome] = ()) -> None:
        self.outcomes = tuple(outcomes)
        super().__init__(f"No relay accepted the event ({len(self.outcomes)} attempted)")


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class LogCorruptError(NostrWriterError):
    """The published log exists but is not a JSON array.

    Handled inside [PublishedLog][nostrwriter.core.store.PublishedLog];
    never propagated to callers.
    """
