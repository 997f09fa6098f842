"""
Validated Nostr relay endpoint.

Parses, normalizes, and validates WebSocket relay URLs (``ws://`` or
``wss://``). Unlike a browser, the writer keeps the scheme the user chose:
plain ``ws://`` is accepted so local and overlay relays can be targeted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from rfc3986 import uri_reference
from rfc3986.exceptions import UnpermittedComponentError, ValidationError
from rfc3986.validators import Validator


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Relay:
    """Immutable representation of a relay endpoint.

    Validates and normalizes a WebSocket URL on construction.

    Attributes:
        url: Fully normalized URL including scheme.
        scheme: URL scheme (``ws`` or ``wss``).
        host: Hostname or IP address (brackets stripped for IPv6).
        port: Explicit port number, or ``None`` when using the default.
        path: URL path component, or ``None``.

    Raises:
        ValueError: If the URL is malformed, uses an unsupported scheme,
            carries a query string or fragment, or contains null bytes.

    Examples:
        ```python
        relay = Relay("wss://relay.damus.io/")
        relay.url       # 'wss://relay.damus.io'
        relay.scheme    # 'wss'

        Relay("ws://localhost:7777").port   # 7777
        ```
    """

    raw_url: str = field(repr=False)

    # Computed fields (set in __post_init__)
    url: str = field(init=False)
    scheme: str = field(init=False)
    host: str = field(init=False)
    port: int | None = field(init=False)
    path: str | None = field(init=False)

    # Standard default ports for WebSocket schemes
    _PORT_WS: ClassVar[int] = 80
    _PORT_WSS: ClassVar[int] = 443

    def __post_init__(self) -> None:
        """Parse and validate the raw URL, populating all computed fields.

        Raises:
            ValueError: If the URL is invalid or contains null bytes.
        """
        if not isinstance(self.raw_url, str):
            raise TypeError(f"raw_url must be a str, got {type(self.raw_url).__name__}")
        if "\x00" in self.raw_url:
            raise ValueError("Relay URL contains null bytes")

        parsed = self._parse(self.raw_url)

        # Bypass frozen restriction to set computed fields
        object.__setattr__(self, "url", f"{parsed['scheme']}://{parsed['url_without_scheme']}")
        object.__setattr__(self, "scheme", parsed["scheme"])
        object.__setattr__(self, "host", parsed["host"])
        object.__setattr__(self, "port", parsed["port"])
        object.__setattr__(self, "path", parsed["path"])

    def __str__(self) -> str:
        return self.url

    @staticmethod
    def _parse(raw: str) -> dict[str, Any]:
        """Parse and normalize a raw relay URL string.

        Validates the URI structure using RFC 3986, normalizes the path, and
        strips default ports.

        Args:
            raw: Raw URL string (e.g., ``"wss://relay.example.com:8080/path"``).

        Returns:
            Dictionary containing ``url_without_scheme``, ``scheme``,
            ``host``, ``port`` and ``path``.

        Raises:
            ValueError: If the scheme is not ``ws``/``wss`` or the URI is invalid.
        """
        uri = uri_reference(raw.strip()).normalize()

        validator = (
            Validator()
            .require_presence_of("scheme", "host")
            .allow_schemes("ws", "wss")
            .check_validity_of("scheme", "host", "port", "path")
        )

        try:
            validator.validate(uri)
        except UnpermittedComponentError:
            raise ValueError("Invalid scheme: must be ws or wss") from None
        except ValidationError as e:
            raise ValueError(f"Invalid URL: {e}") from None

        if uri.query:
            raise ValueError(f"Relay URL must not contain a query string: ?{uri.query}")
        if uri.fragment:
            raise ValueError(f"Relay URL must not contain a fragment: #{uri.fragment}")

        host = uri.host.strip("[]")
        if not host:
            raise ValueError("Invalid host: ''")

        port = int(uri.port) if uri.port else None
        scheme = uri.scheme

        # Collapse duplicate slashes and strip trailing slash
        path = uri.path or ""
        while "//" in path:
            path = path.replace("//", "/")
        path = path.rstrip("/") or None

        # Re-bracket IPv6 addresses for the final URL
        formatted_host = f"[{host}]" if ":" in host else host

        # Omit the port when it matches the default for the scheme
        default_port = Relay._PORT_WSS if scheme == "wss" else Relay._PORT_WS
        if port and port != default_port:
            url_without_scheme = f"{formatted_host}:{port}{path or ''}"
        else:
            url_without_scheme = f"{formatted_host}{path or ''}"

        return {
            "url_without_scheme": url_without_scheme,
            "scheme": scheme,
            "host": host,
            "port": port,
            "path": path,
        }


def parse_relays(urls: Iterable[str | Relay]) -> list[Relay]:
    """Validate a configured relay list, dropping invalid entries.

    Order is preserved and duplicates (after normalization) are removed.
    Each rejected entry produces one warning log line and is never dialed.

    Args:
        urls: Raw URL strings or already-validated relays.

    Returns:
        The valid relays, in input order.
    """
    relays: list[Relay] = []
    seen: set[str] = set()
    for raw in urls:
        if isinstance(raw, Relay):
            relay = raw
        else:
            try:
                relay = Relay(raw)
            except (ValueError, TypeError) as e:
                logger.warning("relay_url_dropped url=%s error=%s", raw, e)
                continue
        if relay.url in seen:
            continue
        seen.add(relay.url)
        relays.append(relay)
    return relays
