"""
Immutable signed Nostr event.

Wraps ``nostr_sdk.Event`` in a frozen dataclass that caches the canonical
fields as plain Python values and checks, at construction time, that the
event id really is the NIP-01 hash of those fields.

See Also:
    [nostrwriter.nips.event_builders][]: Builds and signs the events
        wrapped here.
    [nostrwriter.models.record][]: Pairs a signed event with the relays
        that accepted it.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from nostr_sdk import Event as NostrEvent

from ._validation import validate_instance


def serialize_for_id(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> bytes:
    """Return the NIP-01 canonical serialization used for event ids.

    The array ``[0, pubkey, created_at, kind, tags, content]`` is encoded as
    compact JSON without ASCII escaping, then UTF-8 encoded.
    """
    payload = [0, pubkey, created_at, kind, [list(tag) for tag in tags], content]
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def compute_event_id(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> str:
    """Compute the content-addressed event id (hex SHA-256).

    Deterministic for identical inputs; a change to any single field
    produces a different id.

    Examples:
        ```python
        compute_event_id("ab" * 32, 1700000000, 1, [["t", "nostr"]], "hi")
        # '5c0c...'
        ```
    """
    return hashlib.sha256(serialize_for_id(pubkey, created_at, kind, tags, content)).hexdigest()


class EventFields(NamedTuple):
    """Plain-value view of a signed event, in NIP-01 field order.

    Attributes:
        id: Event id as 64-char hex.
        pubkey: Author public key as 64-char hex.
        created_at: Unix timestamp in seconds.
        kind: Integer event kind.
        tags: Tag arrays, order preserved.
        content: Raw event content.
        sig: Schnorr signature as 128-char hex.
    """

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: tuple[tuple[str, ...], ...]
    content: str
    sig: str


@dataclass(frozen=True, slots=True)
class SignedEvent:
    """Immutable signed event with cached plain-value fields.

    Args:
        _nostr_event: The underlying ``nostr_sdk.Event`` instance.

    Raises:
        TypeError: If the wrapped value is not a ``nostr_sdk.Event``.
        ValueError: If the event id does not match the hash of its fields.

    Examples:
        ```python
        event = SignedEvent(nostr_event)
        event.id          # '3f1c...'
        event.tags        # (('d', 'k3j9a0xz'), ('t', 'nostr'))
        event.to_dict()   # NIP-01 JSON object
        ```
    """

    _nostr_event: NostrEvent
    _fields: EventFields = field(
        default=None,
        init=False,
        repr=False,
        compare=False,
        hash=False,  # type: ignore[assignment]
    )

    def __post_init__(self) -> None:
        validate_instance(self._nostr_event, NostrEvent, "_nostr_event")
        inner = self._nostr_event
        fields = EventFields(
            id=inner.id().to_hex(),
            pubkey=inner.author().to_hex(),
            created_at=inner.created_at().as_secs(),
            kind=inner.kind().as_u16(),
            tags=tuple(tuple(tag.as_vec()) for tag in inner.tags().to_vec()),
            content=inner.content(),
            sig=inner.signature(),
        )
        expected = compute_event_id(
            fields.pubkey, fields.created_at, fields.kind, fields.tags, fields.content
        )
        if expected != fields.id:
            raise ValueError(f"Event id mismatch: {fields.id[:16]}... != {expected[:16]}...")
        object.__setattr__(self, "_fields", fields)

    @property
    def id(self) -> str:
        return self._fields.id

    @property
    def pubkey(self) -> str:
        return self._fields.pubkey

    @property
    def created_at(self) -> int:
        return self._fields.created_at

    @property
    def kind(self) -> int:
        return self._fields.kind

    @property
    def tags(self) -> tuple[tuple[str, ...], ...]:
        return self._fields.tags

    @property
    def content(self) -> str:
        return self._fields.content

    @property
    def sig(self) -> str:
        return self._fields.sig

    @property
    def nostr_event(self) -> NostrEvent:
        """The wrapped ``nostr_sdk.Event``."""
        return self._nostr_event

    def tag_values(self, name: str) -> list[str]:
        """Return the first value of every tag called *name*, in order."""
        return [tag[1] for tag in self.tags if len(tag) > 1 and tag[0] == name]

    def verify(self) -> bool:
        """Verify id and Schnorr signature against the author public key."""
        return bool(self._nostr_event.verify())

    def to_dict(self) -> dict[str, Any]:
        """Return the NIP-01 JSON object for this event."""
        f = self._fields
        return {
            "id": f.id,
            "pubkey": f.pubkey,
            "created_at": f.created_at,
            "kind": f.kind,
            "tags": [list(tag) for tag in f.tags],
            "content": f.content,
            "sig": f.sig,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignedEvent:
        """Reconstruct a signed event from its NIP-01 JSON object.

        Only the seven NIP-01 keys are read; extra keys (as found in
        published-log records) are ignored.
        """
        keys = ("id", "pubkey", "created_at", "kind", "tags", "content", "sig")
        payload = {k: data[k] for k in keys}
        return cls(NostrEvent.from_json(json.dumps(payload)))
