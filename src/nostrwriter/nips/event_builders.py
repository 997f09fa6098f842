"""Nostr event builders for long-form articles (Kind 30023) and text notes (Kind 1).

Turns a [PublishRequest][nostrwriter.models.request.PublishRequest] into a
signed [SignedEvent][nostrwriter.models.event.SignedEvent]. Signing is done
by ``nostr_sdk``; the resulting id is re-checked against
[compute_event_id()][nostrwriter.models.event.compute_event_id] when the
event is wrapped.

Tag layout, in this order:

```text
["d", <identifier>]
["summary", <summary>]          when given
["image", <url>]                when given
["published_at", <created_at>]  long-form only
["t", <topic>] ...              explicit topics, else content hashtags
["title", <title>]              explicit title, else source file stem
```

See Also:
    [nostrwriter.services.publisher][nostrwriter.services.publisher]:
        Fans the built events out to the relay pool.
"""

from __future__ import annotations

import hashlib
import re
import secrets
import string
import time
from pathlib import PurePath
from typing import TYPE_CHECKING

from nostr_sdk import EventBuilder, Kind, Tag, Timestamp

from nostrwriter.exceptions import EmptyContentError
from nostrwriter.models.event import SignedEvent, compute_event_id


if TYPE_CHECKING:
    from nostr_sdk import Keys

    from nostrwriter.models.request import PublishRequest


# =============================================================================
# Constants
# =============================================================================

IDENTIFIER_LENGTH = 8

_IDENTIFIER_ALPHABET = string.ascii_lowercase + string.digits
_PATH_IDENTIFIER_LENGTH = 16
_HASHTAG = re.compile(r"#(\w+)")


# =============================================================================
# Helpers
# =============================================================================


def extract_hashtags(text: str) -> list[str]:
    """Return hashtags in *text* without the ``#``, first occurrence order, deduplicated.

    Examples:
        ```python
        extract_hashtags("Hello #nostr #test #nostr")   # ['nostr', 'test']
        ```
    """
    return list(dict.fromkeys(_HASHTAG.findall(text)))


def generate_identifier(length: int = IDENTIFIER_LENGTH) -> str:
    """Random lowercase alphanumeric token for the ``d`` tag."""
    return "".join(secrets.choice(_IDENTIFIER_ALPHABET) for _ in range(length))


def identifier_from_path(path: str) -> str:
    """Stable ``d`` tag value derived from a document path.

    Republishing the same document yields the same identifier, so relays
    treat the new event as a replacement of the previous one.
    """
    digest = hashlib.sha256(PurePath(path).as_posix().encode("utf-8")).hexdigest()
    return digest[:_PATH_IDENTIFIER_LENGTH]


def build_tags(request: PublishRequest, *, identifier: str, created_at: int) -> list[list[str]]:
    """Assemble the ordered tag arrays for *request*."""
    tags: list[list[str]] = [["d", identifier]]

    if request.summary:
        tags.append(["summary", request.summary])
    if request.image:
        tags.append(["image", request.image])
    if request.is_long_form:
        tags.append(["published_at", str(created_at)])

    topics = request.tags if request.tags is not None else extract_hashtags(request.content)
    tags.extend(["t", topic.removeprefix("#")] for topic in dict.fromkeys(topics) if topic)

    title = request.title or request.source_stem
    if title:
        tags.append(["title", title])

    return tags


# =============================================================================
# Builder
# =============================================================================


def build_event(
    request: PublishRequest,
    keys: Keys,
    *,
    created_at: int | None = None,
    identifier: str | None = None,
) -> SignedEvent:
    """Build and sign the event described by *request*.

    Args:
        request: Content and metadata to publish.
        keys: Signing key pair.
        created_at: Unix timestamp in seconds; defaults to now.
        identifier: ``d`` tag value; defaults to ``request.identifier``,
            else a fresh random token.

    Raises:
        EmptyContentError: If the content is empty or whitespace only.
    """
    if not request.content.strip():
        raise EmptyContentError("Content must not be empty")

    ts = int(time.time()) if created_at is None else created_at
    d = identifier or request.identifier or generate_identifier()
    tags = build_tags(request, identifier=d, created_at=ts)

    builder = (
        EventBuilder(Kind(int(request.kind)), request.content)
        .tags([Tag.parse(tag) for tag in tags])
        .custom_created_at(Timestamp.from_secs(ts))
    )
    return SignedEvent(builder.sign_with_keys(keys))


__all__ = [
    "IDENTIFIER_LENGTH",
    "build_event",
    "build_tags",
    "compute_event_id",
    "extract_hashtags",
    "generate_identifier",
    "identifier_from_path",
]
