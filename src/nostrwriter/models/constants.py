"""Shared constants for the models layer.

Defines enumerations used across multiple model modules and by the layers
above. Placing them here avoids circular dependencies between the models,
core and services layers.

See Also:
    [nostrwriter.models.request][]: Uses [EventKind][nostrwriter.models.constants.EventKind]
        to discriminate short notes from long-form documents.
    [nostrwriter.core.pool][]: Tracks each relay connection with a
        [ConnectionState][nostrwriter.models.constants.ConnectionState].
    [nostrwriter.models.result][]: Reports per-relay results as
        [OutcomeStatus][nostrwriter.models.constants.OutcomeStatus] values.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


DEFAULT_PROFILE = "default"

DEFAULT_RELAYS: tuple[str, ...] = (
    "wss://nos.lol",
    "wss://relay.damus.io",
    "wss://relay.nostr.band",
    "wss://relayable.org",
    "wss://nostr.rocks",
    "wss://nostr.fmt.wiz.biz",
)


class EventKind(IntEnum):
    """Nostr event kinds produced by the writer.

    Attributes:
        TEXT_NOTE: Kind 1 -- short text note (NIP-01).
        LONG_FORM: Kind 30023 -- long-form article (NIP-23), addressable
            by its ``d`` tag.

    See Also:
        [build_event][nostrwriter.nips.event_builders.build_event]: Selects
            the tag layout from the kind.
    """

    TEXT_NOTE = 1
    LONG_FORM = 30_023


class ConnectionState(StrEnum):
    """Lifecycle of a single relay connection.

    A connection starts in ``CONNECTING`` and reaches exactly one of the
    other two states per attempt. ``CONNECTED`` can later drop to
    ``DISCONNECTED``; it never goes back.

    Attributes:
        CONNECTING: Dial in progress.
        CONNECTED: Handshake succeeded; eligible for publishing.
        DISCONNECTED: Failed, timed out, closed by the relay, or shut down.
    """

    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class OutcomeStatus(StrEnum):
    """Terminal result of publishing one event to one relay.

    Attributes:
        ACCEPTED: Relay answered ``OK`` with ``true``.
        REJECTED: Relay answered ``OK`` with ``false`` (reason kept).
        TIMEOUT: No answer before the per-relay deadline.
        DISCONNECTED: Connection dropped before an answer arrived.
        SKIPPED: Connection was no longer connected at dispatch time.
    """

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    TIMEOUT = "timeout"
    DISCONNECTED = "disconnected"
    SKIPPED = "skipped"
