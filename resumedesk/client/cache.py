"""
Client-side resume cache keyed by record id.

Entries are updated right away from mutating responses so the dashboard never
waits on a re-fetch, and are marked stale at the same time so the next read
goes back to the server.
"""
from __future__ import annotations

import threading
from typing import Any, Optional


class ResumeCache:
    def __init__(self) -> None:
        self._entries: dict[int, dict[str, Any]] = {}
        self._stale: set[int] = set()
        self._list_fresh = False
        self._lock = threading.Lock()

    def replace_all(self, resumes: list[dict[str, Any]]) -> None:
        """Load a full server listing. Everything becomes fresh."""
        with self._lock:
            self._entries = {r["id"]: dict(r) for r in resumes}
            self._stale.clear()
            self._list_fresh = True

    def put(self, resume: dict[str, Any], stale: bool = False) -> None:
        with self._lock:
            self._entries[resume["id"]] = dict(resume)
            if stale:
                self._stale.add(resume["id"])
            else:
                self._stale.discard(resume["id"])

    def patch(self, resume_id: int, **fields: Any) -> Optional[dict[str, Any]]:
        """Apply a local update to an entry and mark it stale. No-op when absent."""
        with self._lock:
            entry = self._entries.get(resume_id)
            if entry is None:
                return None
            entry.update(fields)
            self._stale.add(resume_id)
            return dict(entry)

    def get(self, resume_id: int) -> Optional[dict[str, Any]]:
        """Last-known state, fresh or not."""
        with self._lock:
            entry = self._entries.get(resume_id)
            return dict(entry) if entry is not None else None

    def is_fresh(self, resume_id: int) -> bool:
        with self._lock:
            return resume_id in self._entries and resume_id not in self._stale

    def invalidate(self, resume_id: int) -> None:
        with self._lock:
            if resume_id in self._entries:
                self._stale.add(resume_id)
            self._list_fresh = False

    def invalidate_list(self) -> None:
        with self._lock:
            self._list_fresh = False

    @property
    def list_fresh(self) -> bool:
        with self._lock:
            return self._list_fresh and not self._stale

    def items(self) -> list[dict[str, Any]]:
        """Entries newest first (by created_at, then id)."""
        with self._lock:
            entries = [dict(e) for e in self._entries.values()]
        return sorted(entries, key=lambda e: (e.get("created_at") or "", e["id"]), reverse=True)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._stale.clear()
            self._list_fresh = False
