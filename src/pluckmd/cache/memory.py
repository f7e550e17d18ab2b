import logging

from pluckmd.exceptions import URINotFoundError

logger = logging.getLogger(__name__)


class InMemoryCache:
    """Dictionary-backed ``Cacher`` living for one run."""

    def __init__(self, vault: dict[str, bytes] | None = None) -> None:
        self.vault: dict[str, bytes] = vault if vault is not None else {}

    async def store(self, uri: str, data: bytes) -> None:
        self.vault[uri] = data
        logger.debug("Cached %d bytes for %s", len(data), uri)

    async def retrieve(self, uri: str) -> bytes:
        try:
            return self.vault[uri]
        except KeyError:
            raise URINotFoundError("uri not found", uri=uri, component="in-memory cache") from None

    async def close(self) -> None:
        self.vault = {}
