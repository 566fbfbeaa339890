"""Bounded, newest-first feed of human-readable combat messages."""

from __future__ import annotations

from collections import deque

MAX_LOG_ENTRIES = 10


class EventLog:
    def __init__(self, max_entries: int = MAX_LOG_ENTRIES) -> None:
        self._entries: deque[str] = deque(maxlen=max_entries)

    def add(self, message: str) -> None:
        self._entries.appendleft(message)

    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
