from typing import Protocol


class Cacher(Protocol):
    """Session-scoped byte store keyed by URI.

    ``retrieve`` raises ``URINotFoundError`` on a miss. A stored value is never
    evicted or changed for the remainder of the run.
    """

    async def store(self, uri: str, data: bytes) -> None: ...

    async def retrieve(self, uri: str) -> bytes: ...

    async def close(self) -> None: ...
