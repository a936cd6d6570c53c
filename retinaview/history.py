"""
history.py
──────────
Local scan history: a JSON list of past analyses, newest first.

Only metadata is kept (no pixels, no model output beyond the findings list).
A missing or unreadable file is treated as an empty history.
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class HistoryEntry:
    image_name: str
    image_id: Optional[str] = None
    severity: Optional[str] = None
    findings: List[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:6].upper())
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        known = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
        return cls(**known)


class HistoryStore:
    def __init__(self, path: str, limit: int = 50):
        self.path = os.path.expanduser(path)
        self.limit = limit

    def list(self) -> List[HistoryEntry]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return [HistoryEntry.from_dict(item) for item in raw]
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Ignoring unreadable history file %s: %s", self.path, e)
            return []

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        for entry in self.list():
            if entry.id == entry_id:
                return entry
        return None

    def add(self, entry: HistoryEntry) -> HistoryEntry:
        entries = [entry] + [e for e in self.list() if e.id != entry.id]
        self._write(entries[: self.limit])
        logger.info("Saved history entry %s (%s)", entry.id, entry.image_name)
        return entry

    def clear(self) -> None:
        self._write([])

    def _write(self, entries: List[HistoryEntry]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump([asdict(e) for e in entries], f, indent=2)
        os.replace(tmp, self.path)
