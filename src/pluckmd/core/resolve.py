import logging
from collections.abc import Awaitable, Callable, Sequence

from pluckmd.core.ports.cache import Cacher
from pluckmd.core.ports.fetcher import Fetcher
from pluckmd.exceptions import AllFetchersFailedError, CacheReadError, FetchError, URINotFoundError

logger = logging.getLogger(__name__)


class ContentResolver:
    """Cache-first lookup of raw sources and derived snippets.

    Owns every read and write of the session cache. Fetchers are tried in the
    order given; the first success is stored under the requested URI.
    """

    def __init__(self, cache: Cacher, fetchers: Sequence[Fetcher]) -> None:
        self._cache = cache
        self._fetchers = list(fetchers)

    async def resolve(self, uri: str) -> bytes:
        """Return the raw bytes behind a source locator."""
        return await self.resolve_derived(uri, lambda: self._fetch(uri))

    async def resolve_derived(self, uri: str, produce: Callable[[], Awaitable[bytes]]) -> bytes:
        """Return the cached value for ``uri``, or produce, store and return it on a miss."""
        cached = await self._lookup(uri)
        if cached is not None:
            logger.debug("Cache hit for %s", uri)
            return cached

        data = await produce()
        await self._cache.store(uri, data)
        return data

    async def close(self) -> None:
        await self._cache.close()

    async def _lookup(self, uri: str) -> bytes | None:
        try:
            return await self._cache.retrieve(uri)
        except URINotFoundError:
            return None
        except Exception as exc:
            raise CacheReadError(f"retrieving cached bytes: {exc}", uri=uri) from exc

    async def _fetch(self, uri: str) -> bytes:
        causes: list[FetchError] = []
        for fetcher in self._fetchers:
            try:
                data = await fetcher.fetch(uri)
            except FetchError as exc:
                logger.debug("%s could not fetch %s: %s", type(fetcher).__name__, uri, exc)
                causes.append(exc)
                continue
            logger.info("Fetched %s with %s", uri, type(fetcher).__name__)
            return data
        raise AllFetchersFailedError(uri, causes)
