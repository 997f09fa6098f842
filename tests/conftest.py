"""
Pytest configuration and shared fixtures for nostr-writer tests.

Provides:
- Canonical test keys (hex, nsec and derived ``nostr_sdk.Keys``)
- Environment fixtures that set ``NOSTR_PRIVATE_KEY``
- Sample relays, publish requests and signed events
- A fake in-memory relay transport (see ``fixtures/transport.py``)
"""

from __future__ import annotations

import logging
from typing import Any

import pytest
from fixtures.keys import FIXED_CREATED_AT, OTHER_HEX_KEY, VALID_HEX_KEY, VALID_NSEC_KEY
from fixtures.transport import FakeTransport
from nostr_sdk import Keys

from nostrwriter.models import EventKind, PublishRequest, Relay, SignedEvent
from nostrwriter.nips.event_builders import build_event


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Key Fixtures
# ============================================================================


@pytest.fixture
def keys() -> Keys:
    """Signing keys derived from ``VALID_HEX_KEY``."""
    return Keys.parse(VALID_HEX_KEY)


@pytest.fixture
def other_keys() -> Keys:
    return Keys.parse(OTHER_HEX_KEY)


@pytest.fixture
def env_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set the default and a secondary profile key in the environment."""
    monkeypatch.setenv("NOSTR_PRIVATE_KEY", VALID_NSEC_KEY)
    monkeypatch.setenv("NOSTR_WORK_KEY", OTHER_HEX_KEY)


# ============================================================================
# Model Fixtures
# ============================================================================


@pytest.fixture
def relay() -> Relay:
    return Relay("wss://relay.example.com")


@pytest.fixture
def long_form_request() -> PublishRequest:
    return PublishRequest(
        content="Hello #nostr #test",
        kind=EventKind.LONG_FORM,
        summary="A greeting",
        source_path="notes/hello.md",
        identifier="abcd1234",
    )


@pytest.fixture
def note_request() -> PublishRequest:
    return PublishRequest(content="Just a note #nostr", kind=EventKind.TEXT_NOTE)


@pytest.fixture
def signed_event(long_form_request: PublishRequest, keys: Keys) -> SignedEvent:
    """Long-form event with a fixed timestamp and identifier."""
    return build_event(long_form_request, keys, created_at=FIXED_CREATED_AT)


@pytest.fixture
def signed_note(note_request: PublishRequest, keys: Keys) -> SignedEvent:
    return build_event(note_request, keys, created_at=FIXED_CREATED_AT, identifier="note0001")


# ============================================================================
# Transport Fixtures
# ============================================================================


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Transport where every relay connects and accepts immediately."""
    return FakeTransport()


@pytest.fixture
def writer_config_dict(tmp_path: Any) -> dict[str, Any]:
    """Minimal writer configuration using local relays and a temp log."""
    return {
        "relays": ["wss://a.example.com", "wss://b.example.com"],
        "pool": {"connect_timeout": 0.5},
        "publish_timeout": 0.5,
        "log_path": str(tmp_path / "published.json"),
    }
