"""
In-process reservation locks keyed by shipping method and occurrence instant.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterator, Tuple

from ..domain.models import instant_key


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class ReservationLocks:
    """
    Hands out one lock per ``(method code, occurrence instant)``.

    Writers booking the same occurrence are serialised, writers booking
    different occurrences never wait on each other. A lock lives only while
    some thread holds or waits for it. Locks only cover the current process.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: Dict[Tuple[str, str], _Entry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, method_code: str, timestamp: datetime) -> Iterator[None]:
        key = (method_code, instant_key(timestamp))

        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = _Entry()
                self._entries[key] = entry
            entry.users += 1

        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]
