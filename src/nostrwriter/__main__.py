"""CLI entry point for nostr-writer.

Examples:
    ```bash
    python -m nostrwriter publish notes/hello.md --summary "First post" --tag nostr
    python -m nostrwriter note "Hello #nostr"
    python -m nostrwriter relays
    python -m nostrwriter pubkey --profile work
    python -m nostrwriter published
    python -m nostrwriter --config config/writer.yaml --log-level DEBUG relays
    ```
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from nostrwriter.core.logger import Logger, StructuredFormatter
from nostrwriter.core.yaml import load_yaml
from nostrwriter.exceptions import ConfigurationError, EmptyContentError
from nostrwriter.models import DEFAULT_PROFILE, PublishResult
from nostrwriter.services.writer import Writer


DEFAULT_CONFIG = Path("config") / "writer.yaml"

logger = Logger("cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="nostrwriter",
        description="Publish documents and notes to Nostr relays",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"Writer config path (default: {DEFAULT_CONFIG})",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    publish = commands.add_parser("publish", help="Publish a file as a long-form article")
    publish.add_argument("file", type=Path, help="Markdown document to publish")
    publish.add_argument("--title", help="Title (default: file name without extension)")
    publish.add_argument("--summary", help="Summary tag")
    publish.add_argument("--image", help="Banner image URL")
    publish.add_argument(
        "--tag",
        action="append",
        dest="tags",
        metavar="TOPIC",
        help="Topic tag, repeatable (default: hashtags found in the file)",
    )
    publish.add_argument("--profile", default=DEFAULT_PROFILE, help="Profile to sign with")

    note = commands.add_parser("note", help="Publish a short text note")
    note.add_argument("text", help="Note content")
    note.add_argument("--profile", default=DEFAULT_PROFILE, help="Profile to sign with")

    commands.add_parser("relays", help="Connect and show which relays are reachable")

    pubkey = commands.add_parser("pubkey", help="Show the public key of a profile")
    pubkey.add_argument("--profile", default=DEFAULT_PROFILE, help="Profile name")

    commands.add_parser("published", help="List articles in the published log")

    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Configure the root logger with structured formatting."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level))


def _load_yaml_dict(path: Path) -> dict[str, Any]:
    """Load a YAML file as a dict, returning ``{}`` if the file does not exist."""
    if not path.exists():
        logger.warning("config_not_found", path=str(path))
        return {}
    return load_yaml(path)


def report(result: PublishResult, what: str) -> int:
    """Print the user-facing outcome of a publish and return the exit code."""
    if not result.success:
        print(f"❌ Failed to send {what} to Nostr.")
        return 1
    print(f"Successfully sent {what} to Nostr.")
    for url in result.published_relays:
        print(f"✅ - Sent to {url}")
    return 0


def _entry_title(entry: dict[str, Any]) -> str:
    tags = entry.get("tags")
    if not isinstance(tags, list):
        return ""
    for tag in tags:
        if isinstance(tag, list) and len(tag) > 1 and tag[0] == "title":
            return str(tag[1])
    return ""


async def run_command(writer: Writer, args: argparse.Namespace) -> int:
    """Execute one subcommand against *writer*."""
    if args.command == "pubkey":
        keys = writer.keys_for(args.profile)
        print(writer.public_key(args.profile))
        print(keys.public_key().to_hex())
        return 0

    if args.command == "published":
        entries = await writer.published()
        if not entries:
            print("No published notes yet.")
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            title = _entry_title(entry)
            relays = entry.get("publishedToRelays")
            relays = ", ".join(map(str, relays)) if isinstance(relays, list) else ""
            print(f"{entry.get('created_at')}  {entry.get('id')}  {title}  [{relays}]")
        return 0

    request = None
    if args.command == "publish":
        if not args.file.is_file():
            print(f"❌ File not found: {args.file}", file=sys.stderr)
            return 1
        request = await writer.document_request(
            args.file,
            title=args.title,
            summary=args.summary,
            image=args.image,
            tags=args.tags,
            profile=args.profile,
        )
    elif args.command == "note":
        request = writer.note_request(args.text, profile=args.profile)

    # Raises EmptyContentError before any relay is dialed.
    event = writer.build(request) if request is not None else None

    async with writer:
        print(writer.status().summary())

        if args.command == "relays":
            errors = writer.pool.connect_errors
            for url, state in writer.pool.relay_states().items():
                line = f"  {state:<12} {url}"
                if url in errors:
                    line += f"  ({type(errors[url]).__name__})"
                print(line)
            return 0

        if request is not None:
            result = await writer.publish(request, event=event)
            return report(result, "note")

    return 1


async def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point: parse args, build the writer and run the command."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        writer = Writer.from_dict(_load_yaml_dict(args.config))
        return await run_command(writer, args)
    except ConfigurationError as e:
        logger.error("config_invalid", error=str(e))
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except EmptyContentError:
        print("❌ Nothing to publish: content is empty.", file=sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(f"❌ File not found: {e.filename}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
