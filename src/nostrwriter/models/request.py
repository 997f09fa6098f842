"""
Publish request submitted by a caller.

A [PublishRequest][nostrwriter.models.request.PublishRequest] carries the
user content and metadata that the event builder turns into a signed event.
It performs type checks only; content emptiness is checked by the builder so
that it can raise the dedicated
[EmptyContentError][nostrwriter.exceptions.EmptyContentError].
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePath

from ._validation import validate_instance, validate_optional_str, validate_str_no_null
from .constants import DEFAULT_PROFILE, EventKind


@dataclass(frozen=True, slots=True)
class PublishRequest:
    """Immutable description of what to publish.

    Attributes:
        content: Event content (markdown for long-form, text for notes).
        kind: [EventKind][nostrwriter.models.constants.EventKind] discriminator.
        title: Explicit title; falls back to the source file base name.
        summary: Optional summary tag value.
        image: Optional image URL tag value.
        tags: Explicit topic list. ``None`` means "extract hashtags from
            the content"; an empty tuple means "no topics".
        source_path: Path of the source document, ``None`` for short notes.
        profile_nickname: Profile to sign with.
        identifier: Explicit ``d`` tag value; generated when ``None``.
    """

    content: str
    kind: EventKind = EventKind.LONG_FORM
    title: str | None = None
    summary: str | None = None
    image: str | None = None
    tags: tuple[str, ...] | None = None
    source_path: str | None = None
    profile_nickname: str = DEFAULT_PROFILE
    identifier: str | None = field(default=None)

    def __post_init__(self) -> None:
        validate_str_no_null(self.content, "content")
        validate_instance(self.kind, EventKind, "kind")
        validate_optional_str(self.title, "title")
        validate_optional_str(self.summary, "summary")
        validate_optional_str(self.image, "image")
        validate_optional_str(self.source_path, "source_path")
        validate_optional_str(self.identifier, "identifier")
        validate_str_no_null(self.profile_nickname, "profile_nickname")
        if self.tags is not None:
            # Accept any iterable of strings, store as a tuple
            tags = tuple(self.tags)
            for tag in tags:
                validate_str_no_null(tag, "tags[]")
            object.__setattr__(self, "tags", tags)

    @property
    def is_long_form(self) -> bool:
        return self.kind == EventKind.LONG_FORM

    @property
    def source_stem(self) -> str | None:
        """Base name of the source document without its extension."""
        if not self.source_path:
            return None
        return PurePath(self.source_path).stem or None
