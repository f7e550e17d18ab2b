import logging
from collections.abc import Iterable

from pluckmd.core.directive import is_directive, parse_directive
from pluckmd.core.languages import ellipsis_line, fence_tag, supports_kind
from pluckmd.core.ports.extractor import Extractor
from pluckmd.core.resolve import ContentResolver
from pluckmd.core.window import window
from pluckmd.exceptions import (
    ParseFailureError,
    PluckError,
    UnsupportedKindError,
    UnsupportedLanguageError,
    UnterminatedCodeBlockError,
)
from pluckmd.models import Directive, Lang, Snippet

logger = logging.getLogger(__name__)

CODE_FENCE = "```"
CRLF = "\r\n"


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseFailureError(f"source is not valid UTF-8: {exc}", component="processor") from exc


def leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def indent_code(code: str, indentation: str) -> str:
    if not indentation:
        return code
    lines = code.removesuffix("\n").split("\n")
    return "".join(f"{indentation}{line}\n" for line in lines)


def render_code_block(directive_line: str, lang: Lang, code: str) -> str:
    """Fence ``code`` under the directive, reproducing the directive's indentation on every line."""
    if directive_line.endswith("\r"):
        block = render_code_block(directive_line.removesuffix("\r"), lang, code.replace(CRLF, "\n"))
        return block.replace("\n", CRLF)
    if not code.endswith("\n"):
        code += "\n"
    indentation = leading_whitespace(directive_line)
    return f"{indentation}{CODE_FENCE}{fence_tag(lang)}\n{indent_code(code, indentation)}{indentation}{CODE_FENCE}\n"


def is_opening_fence(line: str) -> bool:
    return line.lstrip().startswith(CODE_FENCE)


def is_closing_fence(line: str) -> bool:
    return line.strip() == CODE_FENCE


def skip_code_block(lines: list[str], start: int, uri: str) -> int:
    """Return the index of the first line after a fenced block beginning at ``start``.

    When ``lines[start]`` does not open a fence there is nothing to skip and
    ``start`` is returned unchanged.
    """
    if start >= len(lines) or not is_opening_fence(lines[start]):
        return start
    for i in range(start + 1, len(lines)):
        if is_closing_fence(lines[i]):
            return i + 1
    raise UnterminatedCodeBlockError("finding end of code block", uri=uri)


class MarkdownProcessor:
    """Splice live snippets under every ``pluck`` directive of a markdown document.

    Re-processing a processed document yields the same bytes: the block that
    immediately follows a directive is treated as its previous rendering and
    replaced.
    """

    def __init__(self, resolver: ContentResolver, extractors: Iterable[Extractor]) -> None:
        self._resolver = resolver
        self._extractors = {extractor.lang: extractor for extractor in extractors}

    async def process_markdown(self, markdown: str) -> str:
        if not markdown:
            return ""

        lines = markdown.removesuffix("\n").split("\n")
        processed: list[str] = []
        i = 0
        while i < len(lines):
            line = lines[i]
            processed.append(line + "\n")
            i += 1
            line_number = i
            if not is_directive(line):
                continue

            directive: Directive | None = None
            try:
                directive = parse_directive(line)
                code = await self.render_directive(directive)
                processed.append(render_code_block(line, directive.lang, code))
                i = skip_code_block(lines, i, directive.snippet_uri)
            except PluckError as exc:
                uri = directive.snippet_uri if directive is not None else None
                raise exc.with_context(uri=uri, line=line_number)

        return "".join(processed)

    async def render_directive(self, directive: Directive) -> str:
        snippet = await self.get_snippet(directive)
        return window(
            snippet.definition,
            snippet.body,
            directive.start,
            directive.end,
            braced=snippet.braced,
            ellipsis_line=ellipsis_line(directive.lang),
        )

    async def get_snippet(self, directive: Directive) -> Snippet:
        extractor = self._extractor(directive.lang)
        if not supports_kind(directive.lang, directive.kind):
            raise UnsupportedKindError(f"{directive.kind.value} kind not supported for {directive.lang.value}")

        async def _pluck() -> bytes:
            source = await self._resolver.resolve(directive.source_uri)
            snippet = await extractor.pluck(_decode(source), directive.name, directive.kind)
            logger.debug("Extracted %s", directive.snippet_uri)
            return extractor.serialize(snippet).encode("utf-8")

        data = await self._resolver.resolve_derived(directive.snippet_uri, _pluck)
        return extractor.restore(directive.name, directive.kind, _decode(data))

    async def close(self) -> None:
        await self._resolver.close()

    def _extractor(self, lang: Lang) -> Extractor:
        extractor = self._extractors.get(lang)
        if extractor is None:
            raise UnsupportedLanguageError(f"no extractor registered for '{lang.value}'")
        return extractor
