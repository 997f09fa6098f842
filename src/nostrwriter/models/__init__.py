"""Pure frozen dataclasses with zero I/O for relays, events and publish results.

The models layer is the foundation of the package, alongside the
``nostrwriter.exceptions`` leaf. It has no dependencies on any other
nostr-writer package. Every model uses
``@dataclass(frozen=True, slots=True)`` and validates in ``__post_init__``
so invalid instances never escape the constructor.

Attributes:
    Relay: Validated ``ws://``/``wss://`` relay endpoint with RFC 3986 parsing.
    SignedEvent: Immutable wrapper around ``nostr_sdk.Event`` that checks the
        event id against the NIP-01 hash of its fields.
    PublishRequest: Content and metadata submitted for publishing.
    RelayOutcome: Terminal result of one relay's publish race.
    PublishResult: Aggregate result (success iff any relay accepted).
    PublishedRecord: Published-log entry pairing an event with its relays.
"""

from .constants import (
    DEFAULT_PROFILE,
    DEFAULT_RELAYS,
    ConnectionState,
    EventKind,
    OutcomeStatus,
)
from .event import EventFields, SignedEvent, compute_event_id, serialize_for_id
from .record import PublishedRecord
from .relay import Relay, parse_relays
from .request import PublishRequest
from .result import PublishResult, RelayOutcome


__all__ = [
    "DEFAULT_PROFILE",
    "DEFAULT_RELAYS",
    "ConnectionState",
    "EventFields",
    "EventKind",
    "OutcomeStatus",
    "PublishRequest",
    "PublishResult",
    "PublishedRecord",
    "Relay",
    "RelayOutcome",
    "SignedEvent",
    "compute_event_id",
    "parse_relays",
    "serialize_for_id",
]
