"""Error taxonomy for the resolve, extract, window and splice pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Self


class PluckError(RuntimeError):
    """Base exception for every failure surfaced by pluckmd.

    ``uri``, ``path`` and ``line`` are filled in by outer layers as the error
    travels up, without replacing the original exception.
    """

    component = "pluckmd"

    def __init__(self, message: str, *, uri: str | None = None, component: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.uri = uri
        self.path: Path | None = None
        self.line: int | None = None
        if component is not None:
            self.component = component

    def with_context(self, *, uri: str | None = None, path: Path | None = None, line: int | None = None) -> Self:
        if self.uri is None:
            self.uri = uri
        if self.path is None:
            self.path = path
        if self.line is None:
            self.line = line
        return self

    def __str__(self) -> str:
        context = []
        if self.path is not None:
            context.append(f"file: {self.path}" + (f":{self.line}" if self.line is not None else ""))
        elif self.line is not None:
            context.append(f"line: {self.line}")
        if self.uri:
            context.append(f"uri: {self.uri}")
        text = f"{self.component}: {self.message}"
        if context:
            text += f" ({', '.join(context)})"
        return text


# -- directive parser --------------------------------------------------------


class DirectiveError(PluckError):
    component = "directive"


class MalformedDirectiveError(DirectiveError):
    """Raised when a directive does not carry the six expected fields."""


class InvalidIndexError(DirectiveError):
    """Raised when a window bound is not an integer."""


class InvalidLangError(DirectiveError):
    """Raised when the language tag is unknown."""


class InvalidKindError(DirectiveError):
    """Raised when the extraction kind is unknown."""


# -- cache / resolver --------------------------------------------------------


class CacheError(PluckError):
    component = "cache"


class URINotFoundError(CacheError):
    """Raised by a cache on a miss. The resolver treats it as "go fetch"."""


class CacheReadError(CacheError):
    """Raised when a cache lookup fails for any reason other than a miss."""


class FetchError(PluckError):
    component = "fetcher"


class UnrecognizedSourceError(FetchError):
    """Raised when a locator does not point at a host the fetcher understands."""


class AllFetchersFailedError(PluckError):
    component = "resolver"

    def __init__(self, uri: str, causes: Sequence[FetchError]) -> None:
        joined = "; ".join(str(cause) for cause in causes) or "no fetchers registered"
        super().__init__(f"all fetchers failed: {joined}", uri=uri)
        self.causes = list(causes)


# -- extraction --------------------------------------------------------------


class ExtractionError(PluckError):
    component = "plucker"


class DeclarationNotFoundError(ExtractionError):
    """Raised when no declaration matches the requested name and kind."""


class UnsupportedKindError(ExtractionError):
    """Raised when a kind is not meaningful for the extractor's language."""


class ParseFailureError(ExtractionError):
    """Raised when the source text cannot be parsed."""


class PathNotFoundError(ExtractionError):
    """Raised when a dotted path does not lead to a node."""


class UnsupportedNodeKindError(ExtractionError):
    """Raised when the targeted markup node is an alias, document or sequence."""


class ExtractorUnavailableError(ExtractionError):
    """Raised when an external extraction tool cannot be found."""


class UnsupportedLanguageError(ExtractionError):
    """Raised when no extractor is registered for a language."""


# -- windowing / splicing ----------------------------------------------------


class InvalidRangeError(PluckError):
    component = "snipper"


class UnterminatedCodeBlockError(PluckError):
    component = "processor"


class RunError(PluckError):
    component = "runner"


class RunTimeoutError(RunError):
    """Raised when the run deadline elapses before every document is rendered."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None
