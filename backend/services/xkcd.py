"""Read-through cache and comic operations on top of XKCDFetcher.

Cache keys:
- "latest"       most recent comic
- "comic-{id}"   a specific comic

Search is a brute-force scan of the last SEARCH_WINDOW ids, newest first.
It is re-run in full on every call; results are never cached.
"""

import asyncio
import logging
import math
import random
from typing import Protocol, TypedDict

from errors import (
    ComicError,
    ComicFetchError,
    HttpError,
    InvalidIdError,
    InvalidLimitError,
    InvalidPageError,
    InvalidQueryError,
    LatestFetchError,
    NotFoundError,
    RandomFetchError,
    SearchError,
)
from services.cache import TTLCache
from services.fetcher import LATEST, ComicRecord, XKCDFetcher

logger = logging.getLogger(__name__)

LATEST_KEY = "latest"
SEARCH_WINDOW = 100
MAX_QUERY_LENGTH = 100
MAX_LIMIT = 50


class RandomSource(Protocol):
    def random(self) -> float: ...


class Pagination(TypedDict):
    page: int
    limit: int
    offset: int


class SearchResult(TypedDict):
    query: str
    results: list[ComicRecord]
    total: int
    pagination: Pagination


def comic_key(comic_id: int) -> str:
    return f"comic-{comic_id}"


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def _matches(comic: ComicRecord, needle: str) -> bool:
    return needle in f"{comic['title']} {comic['transcript']}".lower()


class XKCDService:
    def __init__(
        self,
        fetcher: XKCDFetcher,
        cache: TTLCache | None = None,
        rng: RandomSource | None = None,
        search_window: int = SEARCH_WINDOW,
        search_concurrency: int = 1,
        simulated_latency: float = 0.0,
    ):
        self.fetcher = fetcher
        self.cache = cache if cache is not None else TTLCache()
        # The random module itself satisfies RandomSource.
        self.rng = rng if rng is not None else random
        self.search_window = search_window
        self.search_concurrency = max(1, search_concurrency)
        self.simulated_latency = simulated_latency

    async def get_latest(self) -> ComicRecord:
        cached = self.cache.get(LATEST_KEY)
        if cached is not None:
            return cached

        try:
            comic = await self.fetcher.fetch(LATEST)
        except ComicError as e:
            logger.warning("Latest comic fetch failed: %s", e)
            raise LatestFetchError(e.message) from e

        if self.simulated_latency:
            await asyncio.sleep(self.simulated_latency)

        self.cache.set(LATEST_KEY, comic)
        logger.info("Cached latest comic #%d", comic["id"])
        return comic

    async def get_by_id(self, comic_id: int) -> ComicRecord:
        if not _is_positive_int(comic_id):
            raise InvalidIdError(comic_id)

        key = comic_key(comic_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            comic = await self.fetcher.fetch(comic_id)
        except (NotFoundError, HttpError):
            raise
        except ComicError as e:
            logger.warning("Comic #%d fetch failed: %s", comic_id, e)
            raise ComicFetchError(e.message) from e

        self.cache.set(key, comic)
        return comic

    async def get_random(self) -> ComicRecord:
        try:
            latest = await self.get_latest()
            random_id = math.floor(self.rng.random() * latest["id"]) + 1
            logger.debug("Random comic pick: #%d of %d", random_id, latest["id"])
            return await self.get_by_id(random_id)
        except ComicError as e:
            raise RandomFetchError(e.message) from e

    async def search(self, query: str, page: int = 1, limit: int = 10) -> SearchResult:
        """Case-insensitive substring search over title and transcript.

        Scans the most recent ``search_window`` comics, newest first. Comics
        that cannot be fetched are skipped. ``total`` counts every match in
        the window; ``results`` is the requested page of those matches.
        """
        if not isinstance(query, str) or not 1 <= len(query) <= MAX_QUERY_LENGTH:
            raise InvalidQueryError()
        if not _is_positive_int(page):
            raise InvalidPageError()
        if not _is_positive_int(limit) or limit > MAX_LIMIT:
            raise InvalidLimitError()

        offset = (page - 1) * limit

        try:
            latest = await self.get_latest()
        except ComicError as e:
            raise SearchError(e.message) from e

        start = max(1, latest["id"] - (self.search_window - 1))
        ids = range(latest["id"], start - 1, -1)

        needle = query.lower()
        comics = await self._fetch_window(ids)
        matches = [comic for comic in comics if comic is not None and _matches(comic, needle)]

        return {
            "query": query,
            "results": matches[offset:offset + limit],
            "total": len(matches),
            "pagination": {"page": page, "limit": limit, "offset": offset},
        }

    async def _fetch_or_skip(self, comic_id: int) -> ComicRecord | None:
        try:
            return await self.get_by_id(comic_id)
        except ComicError as e:
            logger.debug("Search skipping comic #%d: %s", comic_id, e)
            return None

    async def _fetch_window(self, ids: range) -> list[ComicRecord | None]:
        """Fetch every id in order; failed ids come back as None."""
        if self.search_concurrency == 1:
            return [await self._fetch_or_skip(comic_id) for comic_id in ids]

        semaphore = asyncio.Semaphore(self.search_concurrency)

        async def bounded(comic_id: int) -> ComicRecord | None:
            async with semaphore:
                return await self._fetch_or_skip(comic_id)

        # gather preserves argument order, so recency order survives.
        return await asyncio.gather(*[bounded(comic_id) for comic_id in ids])
