from typing import List

from .observable import Observable
from .storage import KeyValueStore

HISTORY_KEY = "searchHistory"


class SearchHistory:
    """Recent search queries, newest first, unique ignoring case, capped at ``limit``."""

    def __init__(self, store: KeyValueStore, limit: int = 20, key: str = HISTORY_KEY):
        self._store = store
        self._key = key
        self.limit = limit
        raw = store.read(key)
        entries = [q for q in raw if isinstance(q, str)] if isinstance(raw, list) else []
        self.history: Observable[List[str]] = Observable(entries[:limit])

    def _save(self, entries: List[str]) -> None:
        self._store.write(self._key, entries)
        self.history.set(entries)

    def entries(self) -> List[str]:
        return list(self.history.value)

    def add(self, query: str) -> None:
        clean = query.strip()
        if not clean:
            return
        folded = clean.casefold()
        rest = [q for q in self.history.value if q.casefold() != folded]
        self._save([clean, *rest][: self.limit])

    def remove(self, query: str) -> None:
        folded = query.strip().casefold()
        self._save([q for q in self.history.value if q.casefold() != folded])

    def clear(self) -> None:
        self._save([])
