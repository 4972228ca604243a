"""Relay of warnings and errors to a Reddit user by private message."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from .api import RedditAPI

MAX_SUBJECT_LENGTH = 40
DEFAULT_TIME_FORMAT = "%a %d %b %Y, %H:%M:%S"

_RESERVED_RECORD_ATTRS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
    "taskName",
}


def normalize_recipient(username: str) -> str:
    """Prefix a bare username with ``/u/``; ``/u/`` and ``/r/`` targets pass through."""
    if username.startswith(("/u/", "/r/")):
        return username
    return f"/u/{username}"


class RedditErrorHandler(logging.Handler):
    """Logging handler that messages each WARNING-or-worse record to a Reddit user."""

    def __init__(
        self,
        api: RedditAPI,
        username: str,
        bot_name: str,
        *,
        level: int = logging.WARNING,
        time_format: str = DEFAULT_TIME_FORMAT,
    ) -> None:
        super().__init__(level)
        self.api = api
        self.username = normalize_recipient(username)
        self.bot_name = bot_name
        self.time_format = time_format
        self._sending = False

    def build_subject(self, record: logging.LogRecord) -> str:
        subject = f"{record.levelname} in {self.bot_name}: {record.getMessage()}"
        if len(subject) > MAX_SUBJECT_LENGTH:
            subject = subject[:MAX_SUBJECT_LENGTH] + "..."
        return subject

    def build_message(self, record: logging.LogRecord) -> str:
        extra: dict[str, Any] = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_ATTRS
        }
        timestamp = datetime.fromtimestamp(record.created).strftime(self.time_format)
        lines = [
            f"Time: {timestamp}",
            f"Message: {record.getMessage()}",
            f"Data: {extra}",
        ]
        if record.funcName and record.pathname:
            lines.append(
                f"Calling Function: '{record.funcName}', '{record.pathname}' line {record.lineno}"
            )
        else:
            lines.append("No information available about the calling function.")
        if record.exc_info:
            lines.append((self.formatter or logging.Formatter()).formatException(record.exc_info))
        return "\n".join(lines)

    def emit(self, record: logging.LogRecord) -> None:
        # Records logged while a message is being sent would recurse.
        if self._sending:
            return
        self._sending = True
        try:
            self.api.compose_message(self.username, self.build_subject(record), self.build_message(record))
        except Exception:  # noqa: BLE001 - delegated to logging's error reporting
            self.handleError(record)
        finally:
            self._sending = False


def send_errors(
    api: RedditAPI,
    username: str,
    bot_name: str,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.WARNING,
) -> RedditErrorHandler:
    """Attach a :class:`RedditErrorHandler` to ``logger`` (the root logger by default)."""
    if not username:
        raise ValueError("no username to send errors to")
    handler = RedditErrorHandler(api, username, bot_name, level=level)
    (logger or logging.getLogger()).addHandler(handler)
    return handler


__all__ = [
    "DEFAULT_TIME_FORMAT",
    "MAX_SUBJECT_LENGTH",
    "RedditErrorHandler",
    "normalize_recipient",
    "send_errors",
]
