"""In-memory relay transport used instead of real WebSockets.

A [FakeTransport][] hands out [FakeChannel][] objects. Each channel runs a
*responder* coroutine for every frame the client sends, which is how tests
script relay behavior (accept, reject, stay silent, drop the connection)
with small real delays.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable


Responder = Callable[["FakeChannel", str], Awaitable[None]]


def _event_id(message: str) -> str:
    return json.loads(message)[1]["id"]


def accept_after(delay: float = 0.0) -> Responder:
    """Relay answers ``OK true`` after *delay* seconds."""

    async def respond(channel: FakeChannel, message: str) -> None:
        await asyncio.sleep(delay)
        channel.reply_ok(_event_id(message), True)

    return respond


def reject_after(delay: float = 0.0, reason: str = "blocked") -> Responder:
    """Relay answers ``OK false`` with *reason* after *delay* seconds."""

    async def respond(channel: FakeChannel, message: str) -> None:
        await asyncio.sleep(delay)
        channel.reply_ok(_event_id(message), False, reason)

    return respond


def silent() -> Responder:
    """Relay never answers."""

    async def respond(channel: FakeChannel, message: str) -> None:
        return None

    return respond


def drop_after(delay: float = 0.0) -> Responder:
    """Relay closes the connection after *delay* seconds without answering."""

    async def respond(channel: FakeChannel, message: str) -> None:
        await asyncio.sleep(delay)
        channel.drop()

    return respond


def drop_then_accept(drop_delay: float, accept_delay: float) -> Responder:
    """Relay drops the connection, then a stale ``OK true`` still arrives."""

    async def respond(channel: FakeChannel, message: str) -> None:
        await asyncio.sleep(drop_delay)
        channel.drop()
        await asyncio.sleep(accept_delay)
        channel.reply_ok(_event_id(message), True)

    return respond


class FakeChannel:
    """Scriptable [RelayChannel][nostrwriter.utils.transport.RelayChannel]."""

    def __init__(self, url: str, responder: Responder | None = None) -> None:
        self.url = url
        self.responder = responder or accept_after(0.0)
        self.sent: list[str] = []
        self.closed = False
        self._incoming: asyncio.Queue[str | None] = asyncio.Queue()
        self._tasks: list[asyncio.Task[None]] = []

    async def send(self, message: str) -> None:
        if self.closed:
            raise OSError("channel closed")
        self.sent.append(message)
        self._tasks.append(asyncio.create_task(self.responder(self, message)))

    async def recv(self) -> str | None:
        return await self._incoming.get()

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._incoming.put_nowait(None)
        for task in self._tasks:
            task.cancel()

    def push(self, text: str) -> None:
        """Deliver a raw frame to the client."""
        self._incoming.put_nowait(text)

    def reply_ok(self, event_id: str, accepted: bool, message: str = "") -> None:
        self.push(json.dumps(["OK", event_id, accepted, message]))

    def drop(self) -> None:
        """Close from the relay side."""
        if not self.closed:
            self.closed = True
            self._incoming.put_nowait(None)

    @property
    def sent_events(self) -> list[dict]:
        return [json.loads(m)[1] for m in self.sent]


class FakeTransport:
    """Scriptable [RelayTransport][nostrwriter.utils.transport.RelayTransport].

    Args:
        responders: Per-URL publish behavior; unlisted URLs accept at once.
        refuse: URLs whose dial fails with ``OSError``.
        hang: URLs whose dial never completes.
        connect_delay: Per-URL dial latency in seconds.
    """

    def __init__(
        self,
        responders: dict[str, Responder] | None = None,
        *,
        refuse: set[str] | None = None,
        hang: set[str] | None = None,
        connect_delay: dict[str, float] | None = None,
    ) -> None:
        self.responders = responders or {}
        self.refuse = refuse or set()
        self.hang = hang or set()
        self.connect_delay = connect_delay or {}
        self.opened: list[str] = []
        self.channels: dict[str, FakeChannel] = {}

    async def open(self, url: str, timeout: float) -> FakeChannel:  # noqa: ASYNC109
        self.opened.append(url)
        if url in self.refuse:
            raise OSError(f"Connection refused: {url}")
        if url in self.hang:
            await asyncio.sleep(3600)
        await asyncio.sleep(self.connect_delay.get(url, 0.0))
        channel = FakeChannel(url, self.responders.get(url))
        self.channels[url] = channel
        return channel
