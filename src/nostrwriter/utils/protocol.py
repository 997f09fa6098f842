"""NIP-01 client/relay message framing.

Only the messages a publisher needs are handled: the outgoing ``EVENT``
and the incoming ``OK`` and ``NOTICE``. Anything else a relay sends is
parsed into a generic [RelayMessage][nostrwriter.utils.protocol.RelayMessage]
and ignored by the pool.
"""

from __future__ import annotations

import json
import logging
from typing import Any, NamedTuple


logger = logging.getLogger(__name__)


class OkMessage(NamedTuple):
    """Relay reply to an ``EVENT``: ``["OK", <event id>, <bool>, <message>]``."""

    event_id: str
    accepted: bool
    message: str


class RelayMessage(NamedTuple):
    """Any relay-to-client message: type label plus remaining array items."""

    type: str
    args: tuple[Any, ...]


def encode_event_message(event: dict[str, Any]) -> str:
    """Encode ``["EVENT", <event>]`` as compact JSON."""
    return json.dumps(["EVENT", event], separators=(",", ":"), ensure_ascii=False)


def parse_relay_message(text: str) -> RelayMessage | None:
    """Parse a relay frame into a [RelayMessage][nostrwriter.utils.protocol.RelayMessage].

    Returns:
        The parsed message, or ``None`` if the frame is not a JSON array
        starting with a string label.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        logger.debug("relay_message_not_json length=%s", len(text) if text else 0)
        return None
    if not isinstance(data, list) or not data or not isinstance(data[0], str):
        return None
    return RelayMessage(type=data[0], args=tuple(data[1:]))


def parse_ok(message: RelayMessage) -> OkMessage | None:
    """Interpret a parsed frame as an ``OK`` reply.

    NIP-01 requires all three arguments; a missing message string is
    tolerated and treated as empty.
    """
    if message.type != "OK" or len(message.args) < 2:  # noqa: PLR2004
        return None
    event_id, accepted = message.args[0], message.args[1]
    if not isinstance(event_id, str) or not isinstance(accepted, bool):
        return None
    text = message.args[2] if len(message.args) > 2 and isinstance(message.args[2], str) else ""  # noqa: PLR2004
    return OkMessage(event_id=event_id, accepted=accepted, message=text)
