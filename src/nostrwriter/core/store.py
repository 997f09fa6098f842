"""
Append-only JSON log of successfully published events.

The log is a single JSON array of
[PublishedRecord][nostrwriter.models.record.PublishedRecord] objects. Every
append reads the array, adds one record and rewrites the file through a
temporary file and ``os.replace`` so a crash never leaves a half-written
log behind.

Note:
    Appends through one [PublishedLog][nostrwriter.core.store.PublishedLog]
    instance are serialized by an ``asyncio.Lock``. Separate processes
    writing the same file are not coordinated.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from nostr_sdk import NostrSdkError

from nostrwriter.exceptions import LogCorruptError
from nostrwriter.models.record import PublishedRecord

from .logger import Logger


class PublishedLog:
    """Published-event log stored at *path*.

    A missing, unparseable or non-array file is read as an empty log and a
    warning is logged; the next append overwrites it.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()
        self._logger = Logger("published_log")

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[dict[str, Any]]:
        """Read the array from disk, raising ``LogCorruptError`` when unusable."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except UnicodeDecodeError as e:
            raise LogCorruptError(f"{self._path}: not UTF-8 text ({e.reason})") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise LogCorruptError(f"{self._path}: invalid JSON ({e.msg})") from e
        if not isinstance(data, list):
            raise LogCorruptError(f"{self._path}: expected a JSON array, got {type(data).__name__}")
        return data

    def _load_or_empty(self) -> list[dict[str, Any]]:
        try:
            return self._load()
        except LogCorruptError as e:
            self._logger.warning("log_corrupt_reset", path=str(self._path), error=str(e))
            return []

    def _write(self, entries: list[dict[str, Any]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entries, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _append_sync(self, entry: dict[str, Any]) -> int:
        entries = self._load_or_empty()
        entries.append(entry)
        self._write(entries)
        return len(entries)

    async def append(self, record: PublishedRecord) -> None:
        """Append *record* to the log.

        Raises:
            OSError: If the log directory is not writable.
        """
        async with self._lock:
            count = await asyncio.to_thread(self._append_sync, record.to_dict())
        self._logger.info(
            "record_appended",
            event_id=record.event.id,
            relays=len(record.published_relays),
            entries=count,
        )

    async def read(self) -> list[dict[str, Any]]:
        """Return every logged entry, oldest first (empty when missing or corrupt)."""
        async with self._lock:
            return await asyncio.to_thread(self._load_or_empty)

    async def records(self) -> list[PublishedRecord]:
        """Return the entries that parse as valid records, skipping the rest."""
        result = []
        for entry in await self.read():
            try:
                result.append(PublishedRecord.from_dict(entry))
            except (KeyError, TypeError, ValueError, NostrSdkError) as e:
                self._logger.warning("record_skipped", error=str(e))
        return result

    def __repr__(self) -> str:
        return f"PublishedLog(path={self._path})"
