"""
Concurrent pool of relay connections.

Dials every configured relay in parallel, each attempt raced against its
own connect timeout, and keeps the set of relays that completed the
handshake. A connection that drops later removes itself from the set and
the pool notifies its status listeners.

Each [RelayConnection][nostrwriter.core.pool.RelayConnection] owns one
reader task that routes ``OK`` replies to the publish attempt waiting for
that event id. A waiter settles exactly once: the first of accept, reject,
disconnect or timeout wins and any later reply is dropped.

Example:
    pool = RelayPool(RelayPoolConfig(connect_timeout=5), relays=DEFAULT_RELAYS)
    pool.add_status_listener(lambda status: print(status.summary()))

    async with pool:
        for connection in pool.connected_set():
            print(connection.url)
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable, Iterable
from typing import Any, NamedTuple

from pydantic import BaseModel, Field

from nostrwriter.exceptions import (
    ConnectivityError,
    RelayConnectError,
    RelayConnectTimeoutError,
    RelayDisconnectedDuringPublishError,
    RelayPublishRejectedError,
    RelayPublishTimeoutError,
)
from nostrwriter.models.constants import ConnectionState
from nostrwriter.models.event import SignedEvent  # noqa: TC001
from nostrwriter.models.relay import Relay
from nostrwriter.utils.protocol import (
    OkMessage,
    encode_event_message,
    parse_ok,
    parse_relay_message,
)
from nostrwriter.utils.transport import RelayChannel, RelayTransport, WebSocketTransport

from .logger import Logger


# ---------------------------------------------------------------------------
# Configuration and status
# ---------------------------------------------------------------------------


class RelayPoolConfig(BaseModel):
    """Relay pool settings."""

    connect_timeout: float = Field(
        default=10.0, gt=0, le=120.0, description="Seconds allowed for one relay handshake"
    )


class PoolStatus(NamedTuple):
    """Point-in-time connection counts."""

    connected: int
    total: int

    def summary(self) -> str:
        return f"{self.connected}/{self.total} relays connected"


StatusListener = Callable[[PoolStatus], Any]


# ---------------------------------------------------------------------------
# Single connection
# ---------------------------------------------------------------------------


class RelayConnection:
    """One open channel to one relay.

    Created by the pool once the handshake completed. The state only ever
    moves from ``connected`` to ``disconnected``; reconnecting creates a new
    instance.
    """

    def __init__(
        self,
        relay: Relay,
        channel: RelayChannel,
        on_close: Callable[[RelayConnection], None] | None = None,
    ) -> None:
        self._relay = relay
        self._channel = channel
        self._on_close = on_close
        self._state = ConnectionState.CONNECTED
        self._pending: dict[str, list[asyncio.Future[OkMessage]]] = {}
        self._reader: asyncio.Task[None] | None = None
        self._logger = Logger("relay_connection").bind(relay=relay.url)

    @property
    def relay(self) -> Relay:
        return self._relay

    @property
    def url(self) -> str:
        return self._relay.url

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    def start(self) -> None:
        """Start the reader task. Called once by the pool after the handshake."""
        if self._reader is None:
            self._reader = asyncio.create_task(self._read_loop(), name=f"relay-reader:{self.url}")

    async def _read_loop(self) -> None:
        try:
            while True:
                text = await self._channel.recv()
                if text is None:
                    break
                self._dispatch(text)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._logger.debug("read_failed", error=str(e))
        finally:
            self._mark_disconnected("connection closed")
        await self._channel.close()

    def _dispatch(self, text: str) -> None:
        message = parse_relay_message(text)
        if message is None:
            return

        if message.type == "OK":
            ok = parse_ok(message)
            if ok is None:
                self._logger.debug("malformed_ok", args=message.args)
                return
            waiters = [w for w in self._pending.get(ok.event_id, ()) if not w.done()]
            if not waiters:
                self._logger.debug("unsolicited_ok", event_id=ok.event_id)
            # Concurrent sends of one event share the first verdict.
            for waiter in waiters:
                waiter.set_result(ok)
        elif message.type == "NOTICE":
            notice = message.args[0] if message.args else ""
            self._logger.info("relay_notice", message=notice)

    def _mark_disconnected(self, reason: str) -> None:
        if self._state == ConnectionState.DISCONNECTED:
            return
        self._state = ConnectionState.DISCONNECTED
        self._logger.debug("disconnected", reason=reason, pending=len(self._pending))

        for waiter in (w for waiters in self._pending.values() for w in waiters):
            if not waiter.done():
                waiter.set_exception(RelayDisconnectedDuringPublishError(self.url, reason))
        self._pending.clear()

        if self._on_close is not None:
            self._on_close(self)

    async def send_event(self, event: SignedEvent, timeout: float) -> OkMessage:  # noqa: ASYNC109
        """Send *event* and wait for the relay's verdict.

        Args:
            event: The signed event.
            timeout: Seconds to wait for the ``OK`` reply, send included.

        Returns:
            The accepting ``OK`` reply.

        Raises:
            RelayPublishRejectedError: The relay answered ``OK false``.
            RelayPublishTimeoutError: No answer before *timeout*.
            RelayDisconnectedDuringPublishError: The connection was or
                became closed before the relay answered.
        """
        if not self.is_connected:
            raise RelayDisconnectedDuringPublishError(self.url, "not connected")

        waiter: asyncio.Future[OkMessage] = asyncio.get_running_loop().create_future()
        self._pending.setdefault(event.id, []).append(waiter)
        try:
            async with asyncio.timeout(timeout):
                await self._channel.send(encode_event_message(event.to_dict()))
                ok = await waiter
        except TimeoutError:
            raise RelayPublishTimeoutError(self.url, f"no response within {timeout}s") from None
        except OSError as e:
            self._discard(event.id, waiter)
            self._mark_disconnected(str(e))
            await self.close()
            raise RelayDisconnectedDuringPublishError(self.url, str(e)) from e
        finally:
            self._discard(event.id, waiter)

        if not ok.accepted:
            raise RelayPublishRejectedError(self.url, ok.message)
        return ok

    def _discard(self, event_id: str, waiter: asyncio.Future[OkMessage]) -> None:
        waiters = self._pending.get(event_id)
        if waiters is None or waiter not in waiters:
            return
        waiters.remove(waiter)
        if not waiters:
            del self._pending[event_id]

    async def close(self) -> None:
        """Close the channel and stop the reader. Idempotent, never raises."""
        self._mark_disconnected("closed by client")
        reader, self._reader = self._reader, None
        if reader is not None and not reader.done():
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader
        await self._channel.close()

    def __repr__(self) -> str:
        return f"RelayConnection(url={self.url}, state={self._state})"


# ---------------------------------------------------------------------------
# Pool
# ---------------------------------------------------------------------------


def _coerce_relays(relays: Iterable[Relay | str]) -> tuple[Relay, ...]:
    seen: dict[str, Relay] = {}
    for item in relays:
        relay = item if isinstance(item, Relay) else Relay(item)
        seen.setdefault(relay.url, relay)
    return tuple(seen.values())


class RelayPool:
    """Maintains concurrent connections to a configured set of relays.

    Per-relay connection faults never escape ``connect()``: a relay that
    times out or errors is logged, remembered in ``connect_errors`` and left
    out of the connected set.

    Example:
        pool = RelayPool(transport=WebSocketTransport(), relays=["wss://nos.lol"])
        status = await pool.connect()
        print(status.summary())
        await pool.shutdown()
    """

    def __init__(
        self,
        config: RelayPoolConfig | None = None,
        transport: RelayTransport | None = None,
        relays: Iterable[Relay | str] = (),
    ) -> None:
        self._config = config or RelayPoolConfig()
        self._transport: RelayTransport = transport or WebSocketTransport()
        self._relays = _coerce_relays(relays)
        self._connections: dict[str, RelayConnection] = {}
        self._errors: dict[str, ConnectivityError] = {}
        self._connecting: set[str] = set()
        self._listeners: list[StatusListener] = []
        self._lock = asyncio.Lock()
        self._logger = Logger("relay_pool")

    # -------------------------------------------------------------------------
    # Connection Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self, relays: Iterable[Relay | str] | None = None) -> PoolStatus:
        """(Re)connect to every configured relay concurrently.

        Closes existing connections first. Returns once every attempt has
        settled, connected or not.

        Args:
            relays: Replace the configured relay list before connecting.

        Returns:
            The pool status after all attempts settled.
        """
        async with self._lock:
            if relays is not None:
                self._relays = _coerce_relays(relays)

            await self._close_all()
            self._errors = {}
            self._connecting.clear()

            self._logger.info(
                "connect_started",
                relays=len(self._relays),
                timeout=self._config.connect_timeout,
            )
            await asyncio.gather(*(self._connect_one(relay) for relay in self._relays))

            status = self.status()
            self._logger.info(
                "connect_completed",
                connected=status.connected,
                failed=len(self._errors),
                total=status.total,
            )
            return status

    async def _connect_one(self, relay: Relay) -> None:
        timeout = self._config.connect_timeout
        error: ConnectivityError
        self._connecting.add(relay.url)
        try:
            async with asyncio.timeout(timeout):
                channel = await self._transport.open(relay.url, timeout)
        except TimeoutError:
            error = RelayConnectTimeoutError(relay.url, f"no handshake within {timeout}s")
        except (OSError, ConnectivityError) as e:
            error = RelayConnectError(relay.url, str(e))
        else:
            self._connecting.discard(relay.url)
            connection = RelayConnection(relay, channel, on_close=self._on_connection_closed)
            self._connections[relay.url] = connection
            connection.start()
            self._logger.debug("relay_connected", relay=relay.url)
            self._notify()
            return

        self._connecting.discard(relay.url)
        self._errors[relay.url] = error
        self._logger.warning("relay_connect_failed", relay=relay.url, error=str(error))

    def _on_connection_closed(self, connection: RelayConnection) -> None:
        if self._connections.get(connection.url) is not connection:
            return
        del self._connections[connection.url]
        self._logger.info("relay_disconnected", relay=connection.url)
        self._notify()

    async def _close_all(self) -> None:
        connections = list(self._connections.values())
        self._connections = {}
        if not connections:
            return
        await asyncio.gather(*(connection.close() for connection in connections))
        self._notify()

    async def shutdown(self) -> None:
        """Close every connection. Idempotent, never raises."""
        async with self._lock:
            if self._connections:
                self._logger.info("shutdown", connections=len(self._connections))
            await self._close_all()

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def connected_set(self) -> tuple[RelayConnection, ...]:
        """Snapshot of live connections in configuration order."""
        snapshot = []
        for relay in self._relays:
            connection = self._connections.get(relay.url)
            if connection is not None and connection.is_connected:
                snapshot.append(connection)
        return tuple(snapshot)

    def status(self) -> PoolStatus:
        return PoolStatus(connected=len(self.connected_set()), total=len(self._relays))

    def relay_states(self) -> dict[str, ConnectionState]:
        """Current state of every configured relay, keyed by URL."""
        states = {}
        for relay in self._relays:
            connection = self._connections.get(relay.url)
            if relay.url in self._connecting:
                states[relay.url] = ConnectionState.CONNECTING
            elif connection is not None:
                states[relay.url] = connection.state
            else:
                states[relay.url] = ConnectionState.DISCONNECTED
        return states

    def add_status_listener(self, listener: StatusListener) -> None:
        """Register a callback invoked with the new status on every change."""
        self._listeners.append(listener)

    def remove_status_listener(self, listener: StatusListener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    def _notify(self) -> None:
        status = self.status()
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception as e:
                self._logger.error("status_listener_failed", error=str(e))

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def config(self) -> RelayPoolConfig:
        """The pool configuration (read-only)."""
        return self._config

    @property
    def relays(self) -> tuple[Relay, ...]:
        """Configured relays, in configuration order."""
        return self._relays

    @property
    def connect_errors(self) -> dict[str, ConnectivityError]:
        """Why each unreachable relay failed during the last ``connect()``."""
        return dict(self._errors)

    # -------------------------------------------------------------------------
    # Context Manager
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> RelayPool:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any | None,
    ) -> None:
        await self.shutdown()

    def __repr__(self) -> str:
        status = self.status()
        return f"RelayPool(connected={status.connected}, total={status.total})"
