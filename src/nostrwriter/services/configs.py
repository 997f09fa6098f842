"""Writer configuration model.

Every field has a default, so an empty YAML file (or none at all) yields a
working writer as long as ``NOSTR_PRIVATE_KEY`` is set.

Examples:
    ```yaml
    keys:
      keys_env: NOSTR_PRIVATE_KEY
    relays:
      - wss://nos.lol
      - wss://relay.damus.io
    pool:
      connect_timeout: 10
    publish_timeout: 5
    multiple_profiles_enabled: true
    profiles:
      - nickname: work
        keys_env: NOSTR_WORK_KEY
    log_path: published.json
    stable_identifiers: false
    metrics:
      enabled: false
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from nostrwriter.core.metrics import MetricsConfig
from nostrwriter.core.pool import RelayPoolConfig
from nostrwriter.models.constants import DEFAULT_PROFILE, DEFAULT_RELAYS
from nostrwriter.models.relay import parse_relays
from nostrwriter.utils.keys import KeysConfig, ProfileConfig


class WriterConfig(BaseModel):
    """Top-level configuration for [Writer][nostrwriter.services.writer.Writer].

    Relay URLs are normalized on load; invalid entries are dropped with a
    warning instead of failing the whole configuration.
    """

    keys: KeysConfig = Field(
        default_factory=lambda: KeysConfig.model_validate({}),
        description="Default signing identity",
    )
    relays: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RELAYS),
        description="Relay URLs, in priority order",
    )
    pool: RelayPoolConfig = Field(default_factory=RelayPoolConfig)
    publish_timeout: float = Field(
        default=5.0, gt=0, le=120.0, description="Seconds each relay has to answer a publish"
    )
    multiple_profiles_enabled: bool = Field(
        default=False, description="Allow signing with alternate profiles"
    )
    profiles: list[ProfileConfig] = Field(default_factory=list)
    log_path: Path = Field(
        default=Path("published.json"), description="Published-event log file"
    )
    stable_identifiers: bool = Field(
        default=False,
        description="Derive the d tag from the document path instead of a random token",
    )
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @field_validator("relays", mode="before")
    @classmethod
    def _normalize_relays(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return value
        return [relay.url for relay in parse_relays(str(url) for url in value)]

    @model_validator(mode="after")
    def _check_profiles(self) -> WriterConfig:
        nicknames = [profile.nickname for profile in self.profiles]
        duplicates = sorted({n for n in nicknames if nicknames.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate profile nicknames: {', '.join(duplicates)}")
        if DEFAULT_PROFILE in nicknames:
            raise ValueError(f"profile nickname '{DEFAULT_PROFILE}' is reserved")
        return self

    def profile_names(self) -> list[str]:
        """Selectable profile nicknames, the default first."""
        if not self.multiple_profiles_enabled:
            return [DEFAULT_PROFILE]
        return [DEFAULT_PROFILE, *(profile.nickname for profile in self.profiles)]
