from enum import Enum

from pydantic import BaseModel, ConfigDict


class Lang(str, Enum):
    GO = "go"
    YAML = "yaml"


class Kind(str, Enum):
    TYPE = "type"
    FUNCTION = "function"
    NODE = "node"
    FILE = "file"


class Directive(BaseModel):
    """A decoded ``<!-- pluck(...) -->`` marker."""

    model_config = ConfigDict(frozen=True)

    lang: Lang
    kind: Kind
    name: str
    source: str
    start: int
    end: int

    @property
    def source_uri(self) -> str:
        return self.source

    @property
    def snippet_uri(self) -> str:
        """Cache key of the extracted snippet, distinct from the raw source key."""
        return f"{self.source}.{self.kind.value}.{self.name}"


class Snippet(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    definition: str = ""
    body: str
    braced: bool = False
