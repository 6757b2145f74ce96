"""
Short-lived store for a draft booking selection.

The booking page saves {date, time, duration} before redirecting through
sign-in and reads it back once afterwards. Entries are one-shot and the
store is bounded; nothing survives a restart.
"""

import logging
import secrets
import threading
from collections import OrderedDict
from typing import Any, Optional


logger = logging.getLogger(__name__)


class ReservationSessionStore:
    def __init__(self, max_entries: int = 1000):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, dict[str, Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def put(self, data: dict[str, Any]) -> str:
        session_id = secrets.token_urlsafe(16)
        with self._lock:
            self._entries[session_id] = dict(data)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted reservation session {evicted}")
        return session_id

    def pop(self, session_id: str) -> Optional[dict[str, Any]]:
        """Return the stored data and forget it."""
        with self._lock:
            return self._entries.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
