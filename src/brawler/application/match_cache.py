"""Write-once store of resolved match output."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable, Dict, Tuple

from brawler.domain.models import MatchRecord

CacheKey = Tuple[str, str]


class MatchCache:
    """Caches one MatchRecord per ``(tournament_id, match_id)``.

    The first caller for a key computes the record; concurrent callers for
    the same key block on that computation and receive the same object. A
    failed computation is dropped so a later call can try again. A stored
    record is never replaced.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[CacheKey, Future[MatchRecord]] = {}

    def get_or_compute(
        self,
        tournament_id: str,
        match_id: str,
        compute: Callable[[], MatchRecord],
    ) -> MatchRecord:
        key = (tournament_id, match_id)
        with self._lock:
            future = self._entries.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._entries[key] = future

        if not owner:
            return future.result()

        try:
            record = compute()
        except BaseException as exc:
            with self._lock:
                self._entries.pop(key, None)
            future.set_exception(exc)
            raise
        future.set_result(record)
        return record

    def get(self, tournament_id: str, match_id: str) -> MatchRecord | None:
        """Return the finished record for the key, or ``None``."""

        with self._lock:
            future = self._entries.get((tournament_id, match_id))
        if future is None or not future.done() or future.exception() is not None:
            return None
        return future.result()

    def discard(self, tournament_id: str) -> int:
        """Drop finished records for *tournament_id*; in-flight entries stay."""

        with self._lock:
            keys = [
                key for key, future in self._entries.items()
                if key[0] == tournament_id and future.done()
            ]
            for key in keys:
                del self._entries[key]
        return len(keys)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        return self.get(*key) is not None

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for f in self._entries.values() if f.done() and f.exception() is None)


__all__ = ["CacheKey", "MatchCache"]
