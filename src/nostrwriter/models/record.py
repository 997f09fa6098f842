"""
Published-log record linking a signed event to the relays that accepted it.

The on-disk shape is the flattened NIP-01 event plus three extra keys
(``filepath``, ``publishedToRelays``, ``profileNickname``), which is what
the published-notes view reads.

See Also:
    [PublishedLog][nostrwriter.core.store.PublishedLog]: The append-only
        JSON store holding these records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ._validation import (
    validate_instance,
    validate_optional_str,
    validate_str_no_null,
    validate_str_not_empty,
)
from .constants import DEFAULT_PROFILE
from .event import SignedEvent


@dataclass(frozen=True, slots=True)
class PublishedRecord:
    """Immutable published-log entry.

    Attributes:
        event: The signed event that was published.
        published_relays: URLs that accepted the event, in publish order.
        filepath: Source document path, ``None`` when there is none.
        profile_nickname: Profile the event was signed with.

    Raises:
        TypeError: On wrongly typed fields.
        ValueError: If ``published_relays`` is empty (only successful
            publishes are recorded).
    """

    event: SignedEvent
    published_relays: tuple[str, ...]
    filepath: str | None = None
    profile_nickname: str = DEFAULT_PROFILE

    def __post_init__(self) -> None:
        validate_instance(self.event, SignedEvent, "event")
        relays = tuple(self.published_relays)
        for url in relays:
            validate_str_not_empty(url, "published_relays[]")
        if not relays:
            raise ValueError("published_relays must not be empty")
        object.__setattr__(self, "published_relays", relays)
        validate_optional_str(self.filepath, "filepath")
        validate_str_no_null(self.profile_nickname, "profile_nickname")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the flattened on-disk JSON object."""
        return {
            **self.event.to_dict(),
            "filepath": self.filepath,
            "publishedToRelays": list(self.published_relays),
            "profileNickname": self.profile_nickname,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PublishedRecord:
        """Rebuild a record from its on-disk JSON object.

        Raises:
            KeyError: If a required key is missing.
            ValueError: If the embedded event fails id verification.
            NostrSdkError: If an event field is not valid NIP-01 JSON.
        """
        return cls(
            event=SignedEvent.from_dict(data),
            published_relays=tuple(data["publishedToRelays"]),
            filepath=data.get("filepath"),
            profile_nickname=data.get("profileNickname") or DEFAULT_PROFILE,
        )
