"""Nostr key management for nostr-writer.

Normalizes user-supplied key material into ``nostr_sdk.Keys`` and selects
the signing identity for a publish. Three encodings are accepted: ``nsec1``
(bech32 secret key), ``npub1`` (bech32 public key) and raw 64-char hex.

Warning:
    Secret keys must **never** be stored in configuration files or logged.
    Configuration only names the environment variable that holds each key;
    [KeysConfig][nostrwriter.utils.keys.KeysConfig] and
    [ProfileConfig][nostrwriter.utils.keys.ProfileConfig] read it at
    validation time and keep the result in memory only.

Examples:
    ```python
    import os

    os.environ["NOSTR_PRIVATE_KEY"] = "nsec1..."  # pragma: allowlist secret
    keys = load_keys_from_env("NOSTR_PRIVATE_KEY")
    print(keys.public_key().to_bech32())

    resolve_key("npub1...")   # '7e7e9c42...'
    ```
"""

from __future__ import annotations

import os
import re
from collections.abc import Sequence
from typing import Any

from nostr_sdk import Keys, NostrSdkError, PublicKey, SecretKey
from pydantic import BaseModel, Field, model_validator

from nostrwriter.exceptions import InvalidKeyEncodingError
from nostrwriter.models.constants import DEFAULT_PROFILE


ENV_PRIVATE_KEY = "NOSTR_PRIVATE_KEY"  # pragma: allowlist secret  # Default env var name

SECRET_KEY_PREFIX = "nsec"
PUBLIC_KEY_PREFIX = "npub"

_HEX_KEY = re.compile(r"^[0-9a-fA-F]{64}$")


def resolve_key(raw: str) -> str:
    """Decode a bech32 key to hex; pass anything else through unchanged.

    Args:
        raw: ``nsec1...``, ``npub1...`` or a hex key.

    Returns:
        The 32-byte key as lowercase hex for bech32 input, otherwise *raw*
        untouched.

    Raises:
        InvalidKeyEncodingError: If a prefixed value does not decode.
    """
    value = raw.strip()
    try:
        if value.startswith(SECRET_KEY_PREFIX):
            return SecretKey.parse(value).to_hex()
        if value.startswith(PUBLIC_KEY_PREFIX):
            return PublicKey.parse(value).to_hex()
    except (NostrSdkError, ValueError, TypeError) as e:
        raise InvalidKeyEncodingError(f"Malformed {value[:4]} key") from e
    return raw


def decode_key(raw: str) -> bytes:
    """Return the raw 32 bytes of a key in any supported encoding.

    Raises:
        InvalidKeyEncodingError: If the value is neither valid bech32 nor
            64-char hex.
    """
    value = resolve_key(raw).strip()
    if not _HEX_KEY.match(value):
        raise InvalidKeyEncodingError("Key must be nsec1, npub1 or 64-char hex")
    return bytes.fromhex(value)


def encode_secret_key(hex_key: str) -> str:
    """Encode a hex secret key as ``nsec1`` bech32."""
    if not _HEX_KEY.match(hex_key):
        raise InvalidKeyEncodingError("Malformed hex secret key")
    try:
        return SecretKey.parse(hex_key).to_bech32()
    except (NostrSdkError, ValueError, TypeError) as e:
        raise InvalidKeyEncodingError("Malformed hex secret key") from e


def encode_public_key(hex_key: str) -> str:
    """Encode a hex public key as ``npub1`` bech32."""
    if not _HEX_KEY.match(hex_key):
        raise InvalidKeyEncodingError("Malformed hex public key")
    try:
        return PublicKey.parse(hex_key).to_bech32()
    except (NostrSdkError, ValueError, TypeError) as e:
        raise InvalidKeyEncodingError("Malformed hex public key") from e


def derive_keys(raw: str) -> Keys:
    """Build a signing key pair from secret key material.

    The public key is always derived from the secret key by ``nostr_sdk``.

    Args:
        raw: ``nsec1...`` or 64-char hex secret key.

    Raises:
        InvalidKeyEncodingError: If the value is an ``npub`` (cannot sign)
            or does not decode to a valid secp256k1 secret key.
    """
    if raw.strip().startswith(PUBLIC_KEY_PREFIX):
        raise InvalidKeyEncodingError("A public key (npub) cannot be used for signing")

    value = resolve_key(raw).strip()
    if not _HEX_KEY.match(value):
        raise InvalidKeyEncodingError("Secret key must be nsec1 or 64-char hex")
    try:
        return Keys.parse(value)
    except (NostrSdkError, ValueError, TypeError) as e:
        raise InvalidKeyEncodingError("Secret key is out of range") from e


def load_keys_from_env(env_var: str) -> Keys:
    """Load signing keys from an environment variable.

    Args:
        env_var: Name of the environment variable holding the secret key.

    Raises:
        ValueError: If the environment variable is not set or is empty.
        InvalidKeyEncodingError: If the value is malformed.
    """
    value = os.getenv(env_var)

    if not value:
        raise ValueError(
            f"{env_var} environment variable is required. Generate one with: openssl rand -hex 32"
        )

    return derive_keys(value)


class KeysConfig(BaseModel):
    """Pydantic model that auto-loads signing keys from an environment variable.

    Attributes:
        keys_env: Environment variable name for the secret key.
        keys: Loaded ``nostr_sdk.Keys`` (secret + derived public key).

    Warning:
        ``keys`` holds a live secret key. Do not serialize this model.
    """

    model_config = {"arbitrary_types_allowed": True}

    keys_env: str = Field(
        default=ENV_PRIVATE_KEY,
        min_length=1,
        description="Environment variable name for the secret key",
    )
    keys: Keys = Field(description="Keys loaded from keys_env (required)")

    @model_validator(mode="before")
    @classmethod
    def _load_keys_from_env(cls, data: Any) -> Any:
        """Auto-populate the ``keys`` field from the environment variable."""
        if isinstance(data, dict) and "keys" not in data:
            data = dict(data)
            env_var = data.get("keys_env", ENV_PRIVATE_KEY)
            data["keys"] = load_keys_from_env(env_var)
        return data


class ProfileConfig(KeysConfig):
    """A named alternate signing identity.

    Example YAML:
        ```yaml
        profiles:
          - nickname: work
            keys_env: NOSTR_WORK_KEY
        ```
    """

    nickname: str = Field(min_length=1, description="Unique profile name")
    keys_env: str = Field(min_length=1, description="Environment variable holding this profile's key")


def resolve_profile_name(
    nickname: str | None,
    profiles: Sequence[ProfileConfig],
    *,
    multiple_profiles_enabled: bool,
) -> str:
    """Name of the profile that will actually sign a publish for *nickname*.

    Returns *nickname* only when multi-profile mode is enabled and a profile
    with that name exists, otherwise ``DEFAULT_PROFILE``.
    """
    if not multiple_profiles_enabled or not nickname:
        return DEFAULT_PROFILE
    if any(profile.nickname == nickname for profile in profiles):
        return nickname
    return DEFAULT_PROFILE


def select_profile(
    nickname: str | None,
    profiles: Sequence[ProfileConfig],
    default_keys: Keys,
    *,
    multiple_profiles_enabled: bool,
) -> Keys:
    """Pick the signing keys for a publish.

    Returns *default_keys* unless multi-profile mode is enabled and a
    profile named *nickname* exists. Pure lookup with no side effects.
    """
    name = resolve_profile_name(
        nickname, profiles, multiple_profiles_enabled=multiple_profiles_enabled
    )
    if name == DEFAULT_PROFILE:
        return default_keys
    return next(profile.keys for profile in profiles if profile.nickname == name)
