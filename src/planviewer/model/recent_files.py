"""
Recently opened plan files.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import os
from typing import Iterable, Optional

from planviewer.config import MAX_RECENT_FILES


def format_file_size(n_bytes: int) -> str:
    if n_bytes < 1024:
        return f"{n_bytes} B"
    if n_bytes < 1024 * 1024:
        return f"{n_bytes / 1024:.1f} KB"
    return f"{n_bytes / (1024 * 1024):.1f} MB"


@dataclass(frozen=True)
class RecentFile:
    path: str
    size: str
    opened: str  # ISO date

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "size": self.size, "opened": self.opened}

    @classmethod
    def from_dict(cls, d: dict) -> Optional[RecentFile]:
        path = d.get("path")
        if not path:
            return None
        return cls(path=str(path), size=str(d.get("size", "")), opened=str(d.get("opened", "")))


class RecentFiles:
    """Newest first, de-duplicated by path, at most MAX_RECENT_FILES entries."""

    def __init__(self, entries: Iterable[RecentFile] = (), limit: int = MAX_RECENT_FILES) -> None:
        self.limit = limit
        self._entries: list[RecentFile] = list(entries)[:limit]

    def add(self, path: str, size_bytes: Optional[int] = None, opened: Optional[date] = None) -> RecentFile:
        if size_bytes is None:
            size_bytes = os.path.getsize(path) if os.path.exists(path) else 0
        entry = RecentFile(
            path=path,
            size=format_file_size(size_bytes),
            opened=(opened or date.today()).isoformat(),
        )
        self._entries = [entry] + [e for e in self._entries if e.path != path]
        del self._entries[self.limit:]
        return entry

    def remove(self, path: str) -> None:
        self._entries = [e for e in self._entries if e.path != path]

    def entries(self) -> list[RecentFile]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def to_list(self) -> list[dict[str, str]]:
        return [e.to_dict() for e in self._entries]

    @classmethod
    def from_list(cls, raw: Iterable[dict], limit: int = MAX_RECENT_FILES) -> RecentFiles:
        entries = [RecentFile.from_dict(d) for d in raw if isinstance(d, dict)]
        return cls([e for e in entries if e is not None], limit=limit)
