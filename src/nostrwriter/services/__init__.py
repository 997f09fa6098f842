"""Publishing services built on the core relay pool and published log.

Attributes:
    Publisher: Fans a signed event out to every connected relay and reduces
        the per-relay outcomes into a
        [PublishResult][nostrwriter.models.result.PublishResult].
    ensure_accepted: Raise [NoRelaysAcceptedError][nostrwriter.exceptions.NoRelaysAcceptedError]
        for a failed result.
    Writer: Configuration-driven facade used by the CLI.
    WriterConfig: Pydantic model for the writer YAML file.
"""

from .configs import WriterConfig
from .publisher import DEFAULT_PUBLISH_TIMEOUT, Publisher, ensure_accepted
from .writer import Writer


__all__ = [
    "DEFAULT_PUBLISH_TIMEOUT",
    "Publisher",
    "Writer",
    "WriterConfig",
    "ensure_accepted",
]
