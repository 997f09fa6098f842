"""WebSocket transport primitives for relay connections.

Defines the two small interfaces the connection pool talks to --
[RelayTransport][nostrwriter.utils.transport.RelayTransport] (dial) and
[RelayChannel][nostrwriter.utils.transport.RelayChannel] (text frames) --
and the default aiohttp-backed implementation.

Note:
    The pool and the coordinator only ever see these interfaces, so tests
    substitute in-memory fakes and never open a socket.

Examples:
    ```python
    transport = WebSocketTransport()
    channel = await transport.open("wss://nos.lol", timeout=10.0)
    await channel.send('["EVENT", {...}]')
    reply = await channel.recv()   # None once the relay closes
    await channel.close()
    ```
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import ssl
from typing import Final, Protocol

import aiohttp


DEFAULT_CONNECT_TIMEOUT: Final[float] = 10.0

_WS_CLOSE_TIMEOUT: Final[float] = 5.0
_WS_HEARTBEAT: Final[float] = 30.0


logger = logging.getLogger(__name__)


class RelayChannel(Protocol):
    """An open, bidirectional text channel to one relay."""

    async def send(self, message: str) -> None:
        """Send one text frame. Raises ``OSError`` if the channel is closed."""
        ...

    async def recv(self) -> str | None:
        """Return the next text frame, or ``None`` once the channel closed."""
        ...

    async def close(self) -> None:
        """Close the channel. Must be idempotent and never raise."""
        ...


class RelayTransport(Protocol):
    """Factory for relay channels."""

    async def open(self, url: str, timeout: float) -> RelayChannel:  # noqa: ASYNC109
        """Dial *url*, returning once the WebSocket handshake completed.

        Raises:
            TimeoutError: If the handshake did not finish in time.
            OSError: On any other connection failure.
        """
        ...


class WebSocketChannel:
    """aiohttp WebSocket wrapped as a [RelayChannel][nostrwriter.utils.transport.RelayChannel]."""

    def __init__(
        self,
        ws: aiohttp.ClientWebSocketResponse,
        session: aiohttp.ClientSession,
        close_timeout: float = _WS_CLOSE_TIMEOUT,
    ) -> None:
        self._ws = ws
        self._session = session
        self._close_timeout = close_timeout

    @property
    def closed(self) -> bool:
        return self._ws.closed

    async def send(self, message: str) -> None:
        if self._ws.closed:
            raise OSError("WebSocket is closed")
        try:
            await self._ws.send_str(message)
        except (aiohttp.ClientError, ConnectionResetError) as e:
            raise OSError(f"Send failed: {e}") from e

    async def recv(self) -> str | None:
        while True:
            msg = await self._ws.receive()
            if msg.type == aiohttp.WSMsgType.TEXT:
                return str(msg.data)
            if msg.type == aiohttp.WSMsgType.BINARY:
                return bytes(msg.data).decode("utf-8", errors="replace")
            if msg.type in (aiohttp.WSMsgType.PING, aiohttp.WSMsgType.PONG):
                continue
            # CLOSE, CLOSING, CLOSED, ERROR -> connection terminated
            return None

    async def close(self) -> None:
        # aiohttp can raise ClientError, ServerDisconnectedError, etc.
        # during close; teardown must not fail the caller.
        with contextlib.suppress(Exception):
            await asyncio.wait_for(self._ws.close(), timeout=self._close_timeout)
        with contextlib.suppress(Exception):
            await asyncio.wait_for(self._session.close(), timeout=self._close_timeout)


class WebSocketTransport:
    """Default [RelayTransport][nostrwriter.utils.transport.RelayTransport] built on aiohttp.

    Args:
        heartbeat: Seconds between WebSocket pings; a missed pong closes
            the channel, which the pool reports as a disconnect.
        close_timeout: Upper bound for closing one channel.
        ssl_context: Custom TLS context for ``wss://`` URLs; the system
            default verification is used when ``None``.
    """

    def __init__(
        self,
        *,
        heartbeat: float | None = _WS_HEARTBEAT,
        close_timeout: float = _WS_CLOSE_TIMEOUT,
        ssl_context: ssl.SSLContext | None = None,
    ) -> None:
        self._heartbeat = heartbeat
        self._close_timeout = close_timeout
        self._ssl_context = ssl_context

    async def open(self, url: str, timeout: float = DEFAULT_CONNECT_TIMEOUT) -> WebSocketChannel:  # noqa: ASYNC109
        connector = aiohttp.TCPConnector(ssl=self._ssl_context) if self._ssl_context else None
        session = aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=timeout),
        )

        try:
            ws = await session.ws_connect(url, heartbeat=self._heartbeat)
        except TimeoutError:
            await session.close()
            logger.debug("ws_connect_timeout url=%s", url)
            raise TimeoutError(f"Connection timeout: {url}") from None
        except aiohttp.ClientError as e:
            await session.close()
            logger.debug("ws_connect_failed url=%s error=%s", url, e)
            raise OSError(f"Connection failed: {e}") from e
        except asyncio.CancelledError:
            await session.close()
            raise
        except (ssl.SSLError, OSError) as e:
            await session.close()
            logger.debug("ws_connect_error url=%s error=%s", url, e)
            raise OSError(f"Connection failed: {e}") from e

        return WebSocketChannel(ws, session, close_timeout=self._close_timeout)
