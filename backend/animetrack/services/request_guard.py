"""
Request-generation guard.

Each call to begin() for a key returns a higher generation number than the
last. A response produced for an older generation is stale: a newer request
from the same caller has started since, and its answer must win regardless of
which upstream call finishes first.
"""
import threading
from collections.abc import Hashable


class RequestGenerationGuard:
    def __init__(self) -> None:
        self._latest: dict[Hashable, int] = {}
        self._lock = threading.Lock()

    def begin(self, key: Hashable) -> int:
        with self._lock:
            generation = self._latest.get(key, 0) + 1
            self._latest[key] = generation
            return generation

    def is_current(self, key: Hashable, generation: int) -> bool:
        with self._lock:
            return self._latest.get(key) == generation

    def latest(self, key: Hashable) -> int:
        with self._lock:
            return self._latest.get(key, 0)


catalog_guard = RequestGenerationGuard()
