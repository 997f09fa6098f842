r"""nostr-writer -- publish documents and notes to many Nostr relays at once.

Builds and signs NIP-23 long-form articles and NIP-01 text notes, fans each
event out to every connected relay in parallel, and keeps a JSON log of
the articles relays accepted.

Architecture is layered and imports flow strictly downward:

```text
              services         Publisher, Writer facade
              /     \
          core        \         Relay pool, published log, logging, metrics
           |           \
          utils       nips      Keys, transport, framing / event builder
              \       /
          models   exceptions   Frozen dataclasses (zero I/O) / error tree
```

Attributes:
    models: Relays, signed events, publish requests, results and log records.
    exceptions: The NostrWriterError tree. Imports nothing from the package.
    core: Relay pool, published log, logging, metrics, YAML.
    nips: Event construction and tag layout.
    utils: Key decoding and profiles, NIP-01 framing, WebSocket transport.
    services: The publish coordinator and the Writer facade.

Note:
    Top-level imports (``from nostrwriter import Writer``) use lazy loading
    and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("nostr-writer")

__all__ = [
    "EventKind",
    "Logger",
    "PublishRequest",
    "PublishResult",
    "PublishedLog",
    "Publisher",
    "Relay",
    "RelayPool",
    "RelayPoolConfig",
    "SignedEvent",
    "Writer",
    "WriterConfig",
    "build_event",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Logger": ("nostrwriter.core", "Logger"),
    "PublishedLog": ("nostrwriter.core", "PublishedLog"),
    "RelayPool": ("nostrwriter.core", "RelayPool"),
    "RelayPoolConfig": ("nostrwriter.core", "RelayPoolConfig"),
    "EventKind": ("nostrwriter.models", "EventKind"),
    "PublishRequest": ("nostrwriter.models", "PublishRequest"),
    "PublishResult": ("nostrwriter.models", "PublishResult"),
    "Relay": ("nostrwriter.models", "Relay"),
    "SignedEvent": ("nostrwriter.models", "SignedEvent"),
    "build_event": ("nostrwriter.nips", "build_event"),
    "Publisher": ("nostrwriter.services", "Publisher"),
    "Writer": ("nostrwriter.services", "Writer"),
    "WriterConfig": ("nostrwriter.services", "WriterConfig"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value
        return value
    raise AttributeError(f"module 'nostrwriter' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
