"""
Unit tests for utils.keys module.

Tests:
- resolve_key() bech32 decoding and passthrough
- decode_key() / encode_secret_key() / encode_public_key()
- derive_keys() secret handling and npub rejection
- load_keys_from_env() with missing and malformed values
- KeysConfig / ProfileConfig environment loading
- resolve_profile_name() / select_profile() fallback rules
"""

import pytest
from fixtures.keys import OTHER_HEX_KEY, VALID_HEX_KEY, VALID_NSEC_KEY
from nostr_sdk import Keys
from pydantic import ValidationError

from nostrwriter.exceptions import InvalidKeyEncodingError
from nostrwriter.utils.keys import (
    KeysConfig,
    ProfileConfig,
    decode_key,
    derive_keys,
    encode_public_key,
    encode_secret_key,
    load_keys_from_env,
    resolve_key,
    resolve_profile_name,
    select_profile,
)


class TestResolveKey:
    def test_nsec_to_hex(self):
        assert resolve_key(VALID_NSEC_KEY) == VALID_HEX_KEY

    def test_generated_nsec_to_hex(self):
        generated = Keys.generate()
        nsec = generated.secret_key().to_bech32()
        assert resolve_key(nsec) == generated.secret_key().to_hex()

    def test_npub_to_hex(self, keys):
        npub = keys.public_key().to_bech32()
        assert resolve_key(npub) == keys.public_key().to_hex()

    def test_hex_passthrough(self):
        assert resolve_key(VALID_HEX_KEY) == VALID_HEX_KEY

    def test_arbitrary_passthrough(self):
        assert resolve_key("not-a-key") == "not-a-key"

    @pytest.mark.parametrize("value", ["nsec1invalid", "npub1qqqq"])
    def test_malformed_bech32(self, value):
        with pytest.raises(InvalidKeyEncodingError, match="Malformed"):
            resolve_key(value)


class TestDecodeKey:
    def test_hex(self):
        assert decode_key(VALID_HEX_KEY) == bytes.fromhex(VALID_HEX_KEY)

    def test_nsec(self):
        assert decode_key(VALID_NSEC_KEY) == bytes.fromhex(VALID_HEX_KEY)

    @pytest.mark.parametrize("value", ["abc", "zz" * 32, ""])
    def test_invalid(self, value):
        with pytest.raises(InvalidKeyEncodingError):
            decode_key(value)


class TestEncode:
    def test_secret_round_trip(self):
        assert encode_secret_key(VALID_HEX_KEY) == VALID_NSEC_KEY

    def test_public_round_trip(self, keys):
        hex_key = keys.public_key().to_hex()
        assert resolve_key(encode_public_key(hex_key)) == hex_key

    def test_invalid_secret(self):
        with pytest.raises(InvalidKeyEncodingError):
            encode_secret_key("xyz")

    def test_invalid_public(self):
        with pytest.raises(InvalidKeyEncodingError):
            encode_public_key("xyz")

    def test_bech32_input_rejected(self):
        with pytest.raises(InvalidKeyEncodingError):
            encode_secret_key(VALID_NSEC_KEY)


class TestDeriveKeys:
    def test_from_hex(self, keys):
        assert derive_keys(VALID_HEX_KEY).public_key().to_hex() == keys.public_key().to_hex()

    def test_from_nsec(self, keys):
        assert derive_keys(VALID_NSEC_KEY).public_key().to_hex() == keys.public_key().to_hex()

    def test_surrounding_whitespace(self, keys):
        derived = derive_keys(f"  {VALID_NSEC_KEY}\n")
        assert derived.public_key().to_hex() == keys.public_key().to_hex()

    def test_npub_rejected(self, keys):
        with pytest.raises(InvalidKeyEncodingError, match="npub"):
            derive_keys(keys.public_key().to_bech32())

    def test_short_hex_rejected(self):
        with pytest.raises(InvalidKeyEncodingError):
            derive_keys("abcd")

    def test_zero_key_rejected(self):
        with pytest.raises(InvalidKeyEncodingError):
            derive_keys("00" * 32)


class TestLoadKeysFromEnv:
    def test_loaded(self, monkeypatch, keys):
        monkeypatch.setenv("TEST_NOSTR_KEY", VALID_HEX_KEY)
        assert load_keys_from_env("TEST_NOSTR_KEY").public_key().to_hex() == keys.public_key().to_hex()

    def test_missing(self, monkeypatch):
        monkeypatch.delenv("TEST_NOSTR_KEY", raising=False)
        with pytest.raises(ValueError, match="TEST_NOSTR_KEY"):
            load_keys_from_env("TEST_NOSTR_KEY")

    def test_empty(self, monkeypatch):
        monkeypatch.setenv("TEST_NOSTR_KEY", "")
        with pytest.raises(ValueError, match="openssl rand -hex 32"):
            load_keys_from_env("TEST_NOSTR_KEY")

    def test_malformed(self, monkeypatch):
        monkeypatch.setenv("TEST_NOSTR_KEY", "nsec1broken")
        with pytest.raises(InvalidKeyEncodingError):
            load_keys_from_env("TEST_NOSTR_KEY")


class TestKeysConfig:
    def test_default_env(self, env_keys, keys):
        config = KeysConfig()
        assert config.keys_env == "NOSTR_PRIVATE_KEY"
        assert config.keys.public_key().to_hex() == keys.public_key().to_hex()

    def test_custom_env(self, monkeypatch, other_keys):
        monkeypatch.setenv("MY_KEY", OTHER_HEX_KEY)
        config = KeysConfig(keys_env="MY_KEY")
        assert config.keys.public_key().to_hex() == other_keys.public_key().to_hex()

    def test_missing_env(self, monkeypatch):
        monkeypatch.delenv("NOSTR_PRIVATE_KEY", raising=False)
        with pytest.raises(ValidationError, match="NOSTR_PRIVATE_KEY"):
            KeysConfig()

    def test_explicit_keys_skip_env(self, monkeypatch, keys):
        monkeypatch.delenv("NOSTR_PRIVATE_KEY", raising=False)
        assert KeysConfig(keys=keys).keys is keys


class TestProfileConfig:
    def test_loaded(self, env_keys, other_keys):
        profile = ProfileConfig(nickname="work", keys_env="NOSTR_WORK_KEY")
        assert profile.nickname == "work"
        assert profile.keys.public_key().to_hex() == other_keys.public_key().to_hex()

    def test_nickname_required(self, env_keys):
        with pytest.raises(ValidationError):
            ProfileConfig(keys_env="NOSTR_WORK_KEY")

    def test_empty_nickname(self, env_keys):
        with pytest.raises(ValidationError):
            ProfileConfig(nickname="", keys_env="NOSTR_WORK_KEY")


class TestSelectProfile:
    """select_profile() lookup rules."""

    @pytest.fixture
    def profiles(self, env_keys):
        return [ProfileConfig(nickname="work", keys_env="NOSTR_WORK_KEY")]

    def test_named_profile(self, profiles, keys, other_keys):
        selected = select_profile("work", profiles, keys, multiple_profiles_enabled=True)
        assert selected.public_key().to_hex() == other_keys.public_key().to_hex()

    def test_disabled_returns_default(self, profiles, keys):
        assert select_profile("work", profiles, keys, multiple_profiles_enabled=False) is keys

    @pytest.mark.parametrize("nickname", [None, "", "default", "unknown"])
    def test_fallback_to_default(self, profiles, keys, nickname):
        assert select_profile(nickname, profiles, keys, multiple_profiles_enabled=True) is keys

    def test_no_profiles(self, keys):
        assert isinstance(select_profile("work", [], keys, multiple_profiles_enabled=True), Keys)


class TestResolveProfileName:
    """resolve_profile_name() reports the profile that will sign."""

    @pytest.fixture
    def profiles(self, env_keys):
        return [ProfileConfig(nickname="work", keys_env="NOSTR_WORK_KEY")]

    def test_named_profile(self, profiles):
        assert resolve_profile_name("work", profiles, multiple_profiles_enabled=True) == "work"

    def test_disabled(self, profiles):
        assert resolve_profile_name("work", profiles, multiple_profiles_enabled=False) == "default"

    @pytest.mark.parametrize("nickname", [None, "", "default", "unknown"])
    def test_fallback(self, profiles, nickname):
        assert resolve_profile_name(nickname, profiles, multiple_profiles_enabled=True) == "default"
