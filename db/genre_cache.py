"""
Process-lifetime cache for the TMDB genre list.

Owned by the application (stored on app.state by create_app) rather than held in
module state. Entries are kept per display language and refetched once older
than the TTL. There is no locking: concurrent misses may both refetch, and the
last write wins, which only costs a redundant upstream call.
"""

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from implementation.classes.schemas import GenreEntry

logger = logging.getLogger(__name__)

GENRES_TTL_SECONDS = 60 * 60 * 12


@dataclass(frozen=True, slots=True)
class CachedGenreList:
    entries: list[GenreEntry]
    fetched_at: float


class GenreListCache:
    """
    Lazily populated genre list with a fixed time-to-live.

    Args:
        ttl_seconds: Age after which an entry is stale.
        clock: Returns the current time in seconds; injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = GENRES_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CachedGenreList] = {}

    def get(self, lang: str) -> list[GenreEntry] | None:
        """Return the cached list for `lang`, or None if absent or stale."""
        cached = self._entries.get(lang)
        if cached is None:
            return None
        if self._clock() - cached.fetched_at >= self._ttl_seconds:
            return None
        return cached.entries

    def put(self, lang: str, entries: list[GenreEntry]) -> None:
        self._entries[lang] = CachedGenreList(entries=list(entries), fetched_at=self._clock())

    async def get_or_fetch(
        self,
        lang: str,
        fetch: Callable[[str], Awaitable[list[GenreEntry]]],
    ) -> list[GenreEntry]:
        """Return cached genres for `lang`, calling `fetch(lang)` on a miss."""
        cached = self.get(lang)
        if cached is not None:
            return cached

        logger.info("Genre cache miss for lang=%s; fetching from TMDB", lang)
        entries = await fetch(lang)
        self.put(lang, entries)
        return entries

    def clear(self) -> None:
        self._entries.clear()
