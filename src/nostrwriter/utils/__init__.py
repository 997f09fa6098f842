"""Nostr key management, WebSocket transport and NIP-01 message framing.

The utils layer sits below core and depends only on
[nostrwriter.models][nostrwriter.models] and on
[nostrwriter.exceptions][nostrwriter.exceptions] only.

Attributes:
    keys: nsec/npub/hex key decoding, key loading from environment
        variables, and per-publish profile selection.
    protocol: Encoding of ``EVENT`` frames and parsing of ``OK`` replies.
    transport: The dial/channel interfaces used by the relay pool and their
        aiohttp WebSocket implementation.

Note:
    This package has no eager imports. Importing
    ``nostrwriter.utils.transport`` from ``nostrwriter.core`` does not load
    the key helpers.

Examples:
    ```python
    from nostrwriter.utils.keys import KeysConfig, resolve_key
    from nostrwriter.utils.transport import WebSocketTransport
    ```
"""
