from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .errors import LedgerCorruption
from .log import log_debug, log_error


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


@dataclass
class HistoryEntry:
    url: str
    title: str
    last_accessed: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "url": self.url,
            "title": self.title,
            "lastAccessed": self.last_accessed,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "HistoryEntry":
        if not isinstance(data, dict):
            raise LedgerCorruption(f"History entry is not an object: {data!r}")
        url = data.get("url")
        title = data.get("title")
        if not isinstance(url, str) or not url:
            raise LedgerCorruption(f"History entry without url: {data!r}")
        if not isinstance(title, str):
            title = url
        last_accessed = data.get("lastAccessed")
        if not isinstance(last_accessed, str):
            last_accessed = ""
        return cls(url=url, title=title, last_accessed=last_accessed)


class HistoryLedger:
    """
    Most-recently-used list of visited titles, persisted as a JSON array.

    Entries are unique by URL, newest first, and capped at ``max_entries``.
    Every mutation rewrites the whole file. Unreadable files start an empty
    ledger and failed writes are only logged; the in-memory list stays
    authoritative for the rest of the run.
    """

    def __init__(self, path: str, max_entries: int = 10, clock=_now_iso):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.path = path
        self.max_entries = max_entries
        self._clock = clock
        self._entries: List[HistoryEntry] = []

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> "HistoryLedger":
        self._entries = []
        if not os.path.exists(self.path):
            log_debug(f"  No history file at {self.path}")
            return self
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
            if not isinstance(data, list):
                raise LedgerCorruption("History file is not a JSON array")
            entries = [HistoryEntry.from_dict(item) for item in data]
        except (OSError, ValueError, LedgerCorruption) as e:
            log_error(f"  Warning: Ignoring unreadable history file {self.path}: {e}")
            return self

        seen = set()
        for entry in entries:
            if entry.url in seen:
                continue
            seen.add(entry.url)
            self._entries.append(entry)
        del self._entries[self.max_entries :]
        return self

    def save(self) -> bool:
        try:
            folder = os.path.dirname(self.path)
            if folder:
                os.makedirs(folder, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as fh:
                json.dump([e.to_dict() for e in self._entries], fh, indent=2)
            return True
        except OSError as e:
            log_error(f"  Warning: Could not write history file {self.path}: {e}")
            return False

    def record_access(self, url: str, title: str) -> HistoryEntry:
        """Moves ``url`` to the front with a fresh timestamp and persists."""
        entry = HistoryEntry(url=url, title=title, last_accessed=self._clock())
        self._entries = [e for e in self._entries if e.url != url]
        self._entries.insert(0, entry)
        del self._entries[self.max_entries :]
        self.save()
        return entry

    def entry_at(self, index: int) -> Optional[str]:
        """URL of the ``index``-th entry (1-based), or None."""
        if index < 1 or index > len(self._entries):
            return None
        return self._entries[index - 1].url

    def describe(self) -> List[str]:
        return [
            f"{i}. {entry.title} ({entry.url})"
            for i, entry in enumerate(self._entries, start=1)
        ]


__all__ = ["HistoryEntry", "HistoryLedger"]
