"""
Per-relay and aggregate publish results.

The coordinator produces one
[RelayOutcome][nostrwriter.models.result.RelayOutcome] per relay in the
connected snapshot and reduces them into a single
[PublishResult][nostrwriter.models.result.PublishResult].
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import NamedTuple

from .constants import OutcomeStatus


class RelayOutcome(NamedTuple):
    """Terminal outcome of one relay's publish race.

    Attributes:
        url: Normalized relay URL.
        status: [OutcomeStatus][nostrwriter.models.constants.OutcomeStatus].
        reason: Relay-supplied or locally generated explanation, empty on
            acceptance.
    """

    url: str
    status: OutcomeStatus
    reason: str = ""

    @property
    def accepted(self) -> bool:
        return self.status == OutcomeStatus.ACCEPTED


@dataclass(frozen=True, slots=True)
class PublishResult:
    """Aggregate result of one publish call.

    Attributes:
        success: ``True`` iff at least one relay accepted the event.
        published_relays: URLs that accepted, in snapshot order.
        outcomes: Every per-relay outcome, in snapshot order.
        event_id: Id of the published event.
    """

    success: bool
    published_relays: tuple[str, ...]
    outcomes: tuple[RelayOutcome, ...] = ()
    event_id: str = ""

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[RelayOutcome], event_id: str = "") -> PublishResult:
        """Reduce per-relay outcomes: success iff any relay accepted."""
        outcomes = tuple(outcomes)
        published = tuple(o.url for o in outcomes if o.accepted)
        return cls(
            success=bool(published),
            published_relays=published,
            outcomes=outcomes,
            event_id=event_id,
        )

    @property
    def failures(self) -> tuple[RelayOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.accepted)
