from __future__ import annotations

import os
import threading
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from apinav.repo.scanner import read_text_file


@dataclass(frozen=True)
class CachedContent:
    """File text plus the stat fingerprint it was read under."""

    text: str
    mtime_ns: int
    size_bytes: int


def _fingerprint(path: str) -> tuple[int, int]:
    st = os.stat(path)
    return st.st_mtime_ns, st.st_size


class ContentCache:
    """
    Bounded path -> text map with FIFO eviction.

    Eviction is purely size-based: when a new path is inserted into a full cache,
    the oldest inserted path goes. Refreshing an existing path keeps its slot.
    Entries whose file changed on disk (mtime/size) are treated as misses.
    """

    def __init__(self, max_size: int = 100, reader: Callable[[str], str] = read_text_file):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self.max_size = max_size
        self._reader = reader
        self._entries: OrderedDict[str, CachedContent] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return str(path) in self._entries

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries.keys())

    def get(self, path: str | Path) -> Optional[str]:
        key = str(path)
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        try:
            mtime_ns, size = _fingerprint(key)
        except OSError:
            return None
        if (mtime_ns, size) != (entry.mtime_ns, entry.size_bytes):
            return None
        return entry.text

    def put(self, path: str | Path, text: str, mtime_ns: int = 0, size_bytes: int = 0) -> None:
        key = str(path)
        entry = CachedContent(text=text, mtime_ns=mtime_ns, size_bytes=size_bytes)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._pop_oldest()
            self._entries[key] = entry

    def evict_oldest(self) -> Optional[str]:
        with self._lock:
            return self._pop_oldest()

    def _pop_oldest(self) -> Optional[str]:
        # caller holds self._lock
        if not self._entries:
            return None
        key, _ = self._entries.popitem(last=False)
        return key

    def read(self, path: str | Path) -> str:
        """Return file text, from cache when the file is unchanged. Raises OSError."""
        key = str(path)
        cached = self.get(key)
        if cached is not None:
            return cached

        mtime_ns, size = _fingerprint(key)
        text = self._reader(key)
        self.put(key, text, mtime_ns=mtime_ns, size_bytes=size)
        return text

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
