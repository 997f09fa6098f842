"""Nostr Implementation Possibilities -- event construction for publishing.

The NIPs layer sits above the leaves and depends only on
[nostrwriter.models][nostrwriter.models] and
[nostrwriter.exceptions][nostrwriter.exceptions].

Attributes:
    build_event: Build and sign a NIP-23 long-form article (Kind 30023) or a
        NIP-01 text note (Kind 1) from a
        [PublishRequest][nostrwriter.models.request.PublishRequest].
    build_tags: The ordered ``d`` / ``summary`` / ``image`` /
        ``published_at`` / ``t`` / ``title`` tag layout.
    extract_hashtags: ``#word`` topics found in content.
    generate_identifier, identifier_from_path: ``d`` tag values.
"""

from nostrwriter.nips.event_builders import (
    IDENTIFIER_LENGTH,
    build_event,
    build_tags,
    compute_event_id,
    extract_hashtags,
    generate_identifier,
    identifier_from_path,
)


__all__ = [
    "IDENTIFIER_LENGTH",
    "build_event",
    "build_tags",
    "compute_event_id",
    "extract_hashtags",
    "generate_identifier",
    "identifier_from_path",
]
