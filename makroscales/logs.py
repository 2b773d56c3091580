"""Time-stamped log messages routed into server, client and system channels."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Callable

from .core import Signal


class LogChannel(Enum):
    SERVER = "server"
    CLIENT = "client"
    SYSTEM = "system"


def classify_message(message: str) -> LogChannel:
    """Choose the channel by a case-insensitive [Server] or [Client] tag."""
    lowered = message.lower()
    if "[server]" in lowered:
        return LogChannel.SERVER
    if "[client]" in lowered:
        return LogChannel.CLIENT
    return LogChannel.SYSTEM


class LogBook:
    """Collects formatted log lines per channel."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._entries: dict[LogChannel, list[str]] = {channel: [] for channel in LogChannel}
        self.message_added = Signal()

    def add_log_message(self, message: str) -> str:
        """Stamp the message, store it in its channel and return the stored line."""
        line = self._clock().strftime("[%H:%M:%S] ") + message
        channel = classify_message(message)
        self._entries[channel].append(line)
        self.message_added.emit(channel, line)
        return line

    def entries(self, channel: LogChannel) -> list[str]:
        return list(self._entries[channel])