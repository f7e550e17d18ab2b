from typing import Protocol


class Fetcher(Protocol):
    """Turns a source locator into raw bytes, raising ``FetchError`` on failure."""

    async def fetch(self, uri: str) -> bytes: ...
