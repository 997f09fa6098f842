"""
Unit tests for the nostrwriter CLI (__main__ module).

Tests:
- Argument parsing for every subcommand
- report() output and exit codes
- main() end to end over a fake relay transport
- Error handling (bad config, missing file, empty content before any dial)
"""

import json
import logging
from unittest.mock import patch

import pytest
import yaml
from fixtures.transport import FakeTransport

from nostrwriter.__main__ import main, parse_args, report, setup_logging
from nostrwriter.models import DEFAULT_PROFILE, OutcomeStatus, PublishResult, RelayOutcome


A = "wss://a.example.com"
B = "wss://b.example.com"


@pytest.fixture(autouse=True)
def restore_root_logger():
    handlers, level = list(logging.root.handlers), logging.root.level
    yield
    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)


@pytest.fixture
def config_path(tmp_path, writer_config_dict):
    path = tmp_path / "writer.yaml"
    path.write_text(yaml.safe_dump(writer_config_dict), encoding="utf-8")
    return path


@pytest.fixture
def transport():
    transport = FakeTransport()
    with patch("nostrwriter.core.pool.WebSocketTransport", return_value=transport):
        yield transport


async def run(config_path, *args):
    return await main(["--config", str(config_path), *args])


# ============================================================================
# Argument parsing
# ============================================================================


class TestParseArgs:
    def test_publish(self):
        args = parse_args(
            ["publish", "notes/a.md", "--summary", "S", "--tag", "x", "--tag", "y", "--profile", "work"]
        )
        assert args.command == "publish"
        assert str(args.file) == "notes/a.md"
        assert args.summary == "S"
        assert args.tags == ["x", "y"]
        assert args.profile == "work"
        assert args.title is None

    def test_publish_defaults(self):
        args = parse_args(["publish", "a.md"])
        assert args.tags is None
        assert args.profile == DEFAULT_PROFILE

    def test_note(self):
        args = parse_args(["note", "hello"])
        assert args.text == "hello"

    def test_globals(self):
        args = parse_args(["--config", "other.yaml", "--log-level", "DEBUG", "relays"])
        assert str(args.config) == "other.yaml"
        assert args.log_level == "DEBUG"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            parse_args(["--log-level", "LOUD", "relays"])


class TestSetupLogging:
    def test_installs_structured_handler(self):
        setup_logging("INFO")
        assert logging.root.level == logging.INFO
        assert type(logging.root.handlers[-1].formatter).__name__ == "StructuredFormatter"


# ============================================================================
# report()
# ============================================================================


class TestReport:
    def test_success(self, capsys):
        result = PublishResult.from_outcomes(
            [
                RelayOutcome(A, OutcomeStatus.ACCEPTED),
                RelayOutcome(B, OutcomeStatus.TIMEOUT, "no response within 5.0s"),
            ]
        )
        assert report(result, "note") == 0
        assert capsys.readouterr().out.splitlines() == [
            "Successfully sent note to Nostr.",
            f"✅ - Sent to {A}",
        ]

    def test_failure(self, capsys):
        assert report(PublishResult.from_outcomes(()), "note") == 1
        assert capsys.readouterr().out.strip() == "❌ Failed to send note to Nostr."


# ============================================================================
# main()
# ============================================================================


class TestMainCommands:
    """main() with a fake relay transport."""

    async def test_note(self, env_keys, config_path, transport, capsys):
        assert await run(config_path, "note", "Hello #nostr") == 0

        out = capsys.readouterr().out
        assert "2/2 relays connected" in out
        assert "Successfully sent note to Nostr." in out
        assert f"✅ - Sent to {A}" in out
        assert f"✅ - Sent to {B}" in out
        assert all(channel.closed for channel in transport.channels.values())

    async def test_publish(self, env_keys, config_path, transport, tmp_path, capsys):
        document = tmp_path / "post.md"
        document.write_text("Long read #nostr", encoding="utf-8")

        code = await run(config_path, "publish", str(document), "--summary", "Short", "--tag", "x")

        assert code == 0
        event = transport.channels[A].sent_events[0]
        assert ["summary", "Short"] in event["tags"]
        assert ["t", "x"] in event["tags"]
        assert (tmp_path / "published.json").exists()

    async def test_publish_all_relays_down(self, env_keys, config_path, transport, tmp_path, capsys):
        transport.refuse.update({A, B})
        document = tmp_path / "post.md"
        document.write_text("text", encoding="utf-8")

        assert await run(config_path, "publish", str(document)) == 1
        assert "❌ Failed to send note to Nostr." in capsys.readouterr().out

    async def test_publish_missing_file(self, env_keys, config_path, transport, tmp_path, capsys):
        assert await run(config_path, "publish", str(tmp_path / "nope.md")) == 1
        assert "File not found" in capsys.readouterr().err
        assert transport.opened == []

    async def test_empty_note(self, env_keys, config_path, transport, capsys):
        assert await run(config_path, "note", "   ") == 1
        assert "Nothing to publish" in capsys.readouterr().err
        assert transport.opened == []

    async def test_empty_document(self, env_keys, config_path, transport, tmp_path, capsys):
        document = tmp_path / "blank.md"
        document.write_text("\n  \n", encoding="utf-8")

        assert await run(config_path, "publish", str(document)) == 1
        assert "Nothing to publish" in capsys.readouterr().err
        assert transport.opened == []
        assert not (tmp_path / "published.json").exists()

    async def test_relays(self, env_keys, config_path, transport, capsys):
        transport.refuse.add(B)

        assert await run(config_path, "relays") == 0

        out = capsys.readouterr().out
        assert "1/2 relays connected" in out
        assert f"connected    {A}" in out
        assert f"disconnected {B}  (RelayConnectError)" in out

    async def test_pubkey(self, env_keys, config_path, transport, keys, capsys):
        assert await run(config_path, "pubkey") == 0
        assert capsys.readouterr().out.splitlines() == [
            keys.public_key().to_bech32(),
            keys.public_key().to_hex(),
        ]
        assert transport.opened == []

    async def test_published_empty(self, env_keys, config_path, transport, capsys):
        assert await run(config_path, "published") == 0
        assert "No published notes yet." in capsys.readouterr().out

    async def test_published_lists_entries(self, env_keys, config_path, transport, tmp_path, capsys):
        document = tmp_path / "post.md"
        document.write_text("text", encoding="utf-8")
        await run(config_path, "publish", str(document), "--title", "Post Title")
        capsys.readouterr()

        assert await run(config_path, "published") == 0

        out = capsys.readouterr().out
        assert "Post Title" in out
        assert f"[{A}, {B}]" in out

    async def test_published_skips_malformed_entries(self, env_keys, config_path, transport, tmp_path, capsys):
        entries = [
            "junk",
            {"id": "aa", "created_at": 1, "tags": [["title"], "t", ["title", "Kept"]], "publishedToRelays": [A]},
            {"id": "bb", "created_at": 2, "tags": "oops", "publishedToRelays": "oops"},
        ]
        (tmp_path / "published.json").write_text(json.dumps(entries), encoding="utf-8")

        assert await run(config_path, "published") == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines == [f"1  aa  Kept  [{A}]", "2  bb    []"]
        assert transport.opened == []


class TestMainErrors:
    async def test_missing_key(self, monkeypatch, config_path, capsys):
        monkeypatch.delenv("NOSTR_PRIVATE_KEY", raising=False)
        assert await run(config_path, "pubkey") == 1
        assert "Configuration error" in capsys.readouterr().err

    async def test_invalid_yaml(self, env_keys, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text("relays: [", encoding="utf-8")
        assert await run(path, "pubkey") == 1
        assert "Invalid YAML" in capsys.readouterr().err

    async def test_missing_config_uses_defaults(self, env_keys, tmp_path, keys, capsys):
        assert await run(tmp_path / "absent.yaml", "pubkey") == 0
        assert keys.public_key().to_bech32() in capsys.readouterr().out
