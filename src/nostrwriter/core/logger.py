"""
Structured logging with key=value and JSON output support.

Wraps the standard library ``logging`` module to emit one event name per
line followed by key=value pairs (default) or a single JSON object.
Values containing spaces, equals signs, or quotes are escaped and quoted;
long values (event content, relay notices) are truncated.

``StructuredFormatter`` is installed on the root handler by the CLI so that
output from [Logger][nostrwriter.core.logger.Logger] and from plain
``logging.getLogger()`` calls in the models, utils and nips layers share
one ``level name message key=value`` layout.

Warning:
    Never pass secret key material as a log field.

Examples:
    ```python
    from nostrwriter.core.logger import Logger

    logger = Logger("publisher")
    logger.info("publish_completed", accepted=2, attempted=3)
    # Output: info publisher publish_completed accepted=2 attempted=3

    relay_logger = logger.bind(relay="wss://nos.lol")
    relay_logger.debug("relay_accepted")
    # Output: debug publisher relay_accepted relay=wss://nos.lol
    ```
"""

from __future__ import annotations

import datetime
import json
import logging
from typing import Any, ClassVar


def _truncate(value: str, max_value_length: int | None) -> str:
    if max_value_length and len(value) > max_value_length:
        return value[:max_value_length] + f"...<truncated {len(value) - max_value_length} chars>"
    return value


def format_kv_pairs(
    kwargs: dict[str, Any],
    max_value_length: int | None = 1000,
    prefix: str = " ",
) -> str:
    """Format a dictionary as space-separated key=value pairs.

    Args:
        kwargs: Key-value pairs to format.
        max_value_length: Maximum characters per value before truncation.
            Pass None to disable truncation.
        prefix: String prepended to the output (default: single space).

    Returns:
        Formatted string, e.g. ' url=wss://nos.lol reason="blocked: spam"'.
        Returns empty string if kwargs is empty.
    """
    if not kwargs:
        return ""

    parts = []
    for k, v in kwargs.items():
        s = _truncate(str(v), max_value_length)
        if not s or " " in s or "=" in s or '"' in s or "'" in s:
            escaped = s.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'{k}="{escaped}"')
        else:
            parts.append(f"{k}={s}")

    return prefix + " ".join(parts)


class StructuredFormatter(logging.Formatter):
    """Formats every log record as ``level name message key=value ...``.

    Reads structured data from the ``structured_kv`` extra field attached
    by [Logger][nostrwriter.core.logger.Logger]. Records from plain
    ``logging.getLogger()`` calls carry no such field and are emitted with
    the same prefix.
    """

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname.lower()} {record.name} {record.getMessage()}"
        extra: dict[str, Any] = getattr(record, "structured_kv", {})
        if extra:
            base += format_kv_pairs(extra)
        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)
        return base


class Logger:
    """Structured logger that appends keyword arguments as fields.

    Mirrors the standard logging API with an added ``**kwargs`` parameter.
    [bind()][nostrwriter.core.logger.Logger.bind] returns a logger that
    adds fixed context fields to every call, which the pool and the
    coordinator use to tag lines with the relay URL.
    """

    _DEFAULT_MAX_VALUE_LENGTH: ClassVar[int] = 1000

    def __init__(
        self,
        name: str,
        *,
        json_output: bool = False,
        max_value_length: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize a structured logger.

        Args:
            name: Logger name, passed to ``logging.getLogger(name)``.
            json_output: If True, emit JSON objects instead of key=value pairs.
            max_value_length: Maximum character length for individual values
                before truncation. Defaults to 1000.
            context: Fields added to every record.
        """
        if max_value_length is None:
            max_value_length = self._DEFAULT_MAX_VALUE_LENGTH
        self._logger = logging.getLogger(name)
        self._json_output = json_output
        self._max_value_length = max_value_length
        self._context: dict[str, Any] = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **context: Any) -> Logger:
        """Return a logger sharing this one's settings with extra context fields."""
        return Logger(
            self._logger.name,
            json_output=self._json_output,
            max_value_length=self._max_value_length,
            context={**self._context, **context},
        )

    def _format_json(self, msg: str, level: str, fields: dict[str, Any]) -> str:
        record = {
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            "level": level,
            "logger": self._logger.name,
            "message": msg,
            **fields,
        }
        return json.dumps(record, default=str)

    def _make_extra(self, fields: dict[str, Any]) -> dict[str, Any]:
        if not fields:
            return {}
        truncated = {
            k: _truncate(v, self._max_value_length) if isinstance(v, str) else v
            for k, v in fields.items()
        }
        return {"structured_kv": truncated}

    def _log(self, level: int, msg: str, kwargs: dict[str, Any], *, exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        fields = {**self._context, **kwargs}
        if self._json_output:
            level_name = logging.getLevelName(level).lower()
            self._logger.log(level, self._format_json(msg, level_name, fields), exc_info=exc_info)
        else:
            self._logger.log(level, msg, extra=self._make_extra(fields), exc_info=exc_info)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, msg, kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log at ERROR level with the current exception traceback."""
        self._log(logging.ERROR, msg, kwargs, exc_info=True)
