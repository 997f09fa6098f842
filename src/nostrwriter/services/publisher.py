"""Fan-out of one signed event to every connected relay.

[Publisher][nostrwriter.services.publisher.Publisher] takes the pool's
connected snapshot once per call and races every relay independently. Each
race ends in exactly one
[RelayOutcome][nostrwriter.models.result.RelayOutcome]; the call succeeds
when at least one relay accepted.

Note:
    Per-relay faults (reject, timeout, disconnect) are logged and turned
    into outcomes, never raised. Callers that prefer an exception use
    [ensure_accepted()][nostrwriter.services.publisher.ensure_accepted].

    There are no retries: a relay that failed is reported as failed and
    the caller decides whether to publish again.

See Also:
    [RelayConnection.send_event()][nostrwriter.core.pool.RelayConnection.send_event]:
        The single-relay race.
    [PublishedLog][nostrwriter.core.store.PublishedLog]: Receives a record
        for every successful long-form publish.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from nostrwriter.exceptions import (
    NoRelaysAcceptedError,
    RelayDisconnectedDuringPublishError,
    RelayPublishRejectedError,
    RelayPublishTimeoutError,
)
from nostrwriter.core.logger import Logger
from nostrwriter.models import (
    DEFAULT_PROFILE,
    EventKind,
    OutcomeStatus,
    PublishedRecord,
    PublishResult,
    RelayOutcome,
)


if TYPE_CHECKING:
    from nostrwriter.core.pool import RelayConnection, RelayPool
    from nostrwriter.core.store import PublishedLog
    from nostrwriter.models import SignedEvent


DEFAULT_PUBLISH_TIMEOUT = 5.0


def ensure_accepted(result: PublishResult) -> PublishResult:
    """Return *result* unchanged, or raise if no relay accepted it.

    Raises:
        NoRelaysAcceptedError: If ``result.success`` is false.
    """
    if not result.success:
        raise NoRelaysAcceptedError(result.outcomes)
    return result


class Publisher:
    """Publish signed events through a [RelayPool][nostrwriter.core.pool.RelayPool].

    Args:
        pool: Source of the connected-relay snapshot.
        store: Log receiving successful long-form publishes; ``None``
            disables persistence.
        timeout: Seconds each relay has to answer.
    """

    def __init__(
        self,
        pool: RelayPool,
        store: PublishedLog | None = None,
        *,
        timeout: float = DEFAULT_PUBLISH_TIMEOUT,
    ) -> None:
        self._pool = pool
        self._store = store
        self._timeout = timeout
        self._logger = Logger("publisher")

    @property
    def timeout(self) -> float:
        return self._timeout

    async def publish(
        self,
        event: SignedEvent,
        *,
        source_path: str | None = None,
        profile_nickname: str = DEFAULT_PROFILE,
    ) -> PublishResult:
        """Send *event* to every connected relay and collect the outcomes.

        Args:
            event: The signed event.
            source_path: Source document path stored with the log record.
            profile_nickname: Profile stored with the log record.

        Returns:
            The aggregate result. ``success`` is false when no relay
            accepted, including when none was connected.
        """
        snapshot = self._pool.connected_set()
        if not snapshot:
            self._logger.warning("publish_no_relays", event_id=event.id)
            return PublishResult.from_outcomes((), event_id=event.id)

        self._logger.info(
            "publish_started", event_id=event.id, kind=event.kind, relays=len(snapshot)
        )
        outcomes = await asyncio.gather(
            *(self._publish_to(connection, event) for connection in snapshot)
        )
        result = PublishResult.from_outcomes(outcomes, event_id=event.id)

        self._logger.info(
            "publish_completed",
            event_id=event.id,
            success=result.success,
            accepted=len(result.published_relays),
            attempted=len(outcomes),
        )

        if result.success and event.kind == EventKind.LONG_FORM and self._store is not None:
            record = PublishedRecord(
                event=event,
                published_relays=result.published_relays,
                filepath=source_path,
                profile_nickname=profile_nickname,
            )
            try:
                await self._store.append(record)
            except OSError as e:
                self._logger.error("log_append_failed", event_id=event.id, error=str(e))

        return result

    async def _publish_to(self, connection: RelayConnection, event: SignedEvent) -> RelayOutcome:
        url = connection.url
        if not connection.is_connected:
            self._logger.debug("relay_skipped", relay=url, state=connection.state)
            return RelayOutcome(url, OutcomeStatus.SKIPPED, "not connected")

        try:
            await connection.send_event(event, self._timeout)
        except RelayPublishRejectedError as e:
            self._logger.warning("relay_rejected", relay=url, reason=e.reason)
            return RelayOutcome(url, OutcomeStatus.REJECTED, e.reason)
        except RelayPublishTimeoutError:
            self._logger.warning("relay_timeout", relay=url, timeout=self._timeout)
            return RelayOutcome(url, OutcomeStatus.TIMEOUT, f"no response within {self._timeout}s")
        except RelayDisconnectedDuringPublishError as e:
            self._logger.warning("relay_disconnected", relay=url, error=str(e))
            return RelayOutcome(url, OutcomeStatus.DISCONNECTED, "connection closed")

        self._logger.debug("relay_accepted", relay=url)
        return RelayOutcome(url, OutcomeStatus.ACCEPTED)
