from typing import Protocol

from pluckmd.models import Kind, Lang, Snippet


class Extractor(Protocol):
    lang: Lang

    async def pluck(self, source: str, name: str, kind: Kind) -> Snippet: ...

    def serialize(self, snippet: Snippet) -> str: ...

    def restore(self, name: str, kind: Kind, text: str) -> Snippet: ...
