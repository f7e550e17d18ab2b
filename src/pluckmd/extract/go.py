"""In-process Go extraction backed by tree-sitter."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tree_sitter import Node, Tree

from pluckmd.core.ast import find_descendant, load_query, node_text, parse_source, query_matches
from pluckmd.exceptions import DeclarationNotFoundError, ParseFailureError, UnsupportedKindError
from pluckmd.models import Kind, Lang, Snippet

logger = logging.getLogger(__name__)

_LANGUAGE = "go"
_FUNCTION_PATTERNS = frozenset({0, 1})
_METHOD_PATTERN = 1
_BRACED_KINDS = frozenset({Kind.TYPE, Kind.FUNCTION})

# Snippets are re-parsed on their own; a package clause makes them a valid file.
_PACKAGE_CLAUSE = b"package dummy\n"


@dataclass(frozen=True)
class GoDeclaration:
    kind: Kind
    name: str
    start_byte: int
    open_brace: Node
    close_brace: Node
    prefix: bytes = b""

    def split(self, source_bytes: bytes) -> tuple[str, str]:
        """Return ``(definition, body)``: text before the opening brace, and between the braces."""
        definition = self.prefix + source_bytes[self.start_byte : self.open_brace.start_byte]
        body = source_bytes[self.open_brace.end_byte : self.close_brace.start_byte]
        body = body.removeprefix(b"\n")
        return definition.decode("utf-8"), body.decode("utf-8")


def _braces(node: Node) -> tuple[Node, Node] | None:
    opening = [child for child in node.children if child.type == "{"]
    closing = [child for child in node.children if child.type == "}"]
    if not opening or not closing:
        return None
    return opening[0], closing[-1]


def _receiver_type_name(receiver: Node, source_bytes: bytes) -> str:
    type_node = find_descendant(receiver, "type_identifier")
    if type_node is None:
        return node_text(receiver, source_bytes).strip("()* ")
    return node_text(type_node, source_bytes)


def _type_declaration_start(spec: Node) -> tuple[int, bytes]:
    """Start at the ``type`` keyword; specs inside ``type (...)`` get the keyword prepended."""
    parent = spec.parent
    if parent is not None and parent.type == "type_declaration":
        grouped = any(child.type == "(" for child in parent.children)
        if not grouped:
            return parent.start_byte, b""
    return spec.start_byte, b"type "


def find_declarations(tree: Tree, source_bytes: bytes) -> list[GoDeclaration]:
    """Every brace-bodied function, method, struct and interface declaration, in source order."""
    query = load_query(_LANGUAGE, "declarations")
    declarations: list[GoDeclaration] = []
    for pattern_index, captures in query_matches(query, tree.root_node):
        declaration = captures["declaration"][0]
        braces = _braces(captures["body"][0])
        if braces is None:
            continue

        name = node_text(captures["name"][0], source_bytes)
        if pattern_index in _FUNCTION_PATTERNS:
            kind = Kind.FUNCTION
            start, prefix = declaration.start_byte, b""
            if pattern_index == _METHOD_PATTERN:
                name = f"{_receiver_type_name(captures['receiver'][0], source_bytes)}.{name}"
        else:
            kind = Kind.TYPE
            start, prefix = _type_declaration_start(declaration)

        declarations.append(
            GoDeclaration(
                kind=kind,
                name=name,
                start_byte=start,
                open_brace=braces[0],
                close_brace=braces[1],
                prefix=prefix,
            )
        )
    declarations.sort(key=lambda d: d.start_byte)
    return declarations


def _terminated(source_bytes: bytes) -> bytes:
    # A trailing type declaration without a final newline parses with a missing terminator.
    if source_bytes.endswith(b"\n"):
        return source_bytes
    return source_bytes + b"\n"


def _parse(source_bytes: bytes) -> Tree:
    tree = parse_source(source_bytes, _LANGUAGE)
    if tree.root_node.has_error:
        raise ParseFailureError("source is not valid Go", component="go plucker")
    return tree


def split_declaration(name: str, text: str) -> Snippet:
    """Rebuild a braced snippet from declaration text, splitting at its first brace-bodied declaration."""
    wrapped = _PACKAGE_CLAUSE + _terminated(text.encode("utf-8"))
    declarations = find_declarations(_parse(wrapped), wrapped)
    if not declarations:
        raise ParseFailureError(f"finding opening brace of '{name}'", component="go plucker")
    definition, body = declarations[0].split(wrapped)
    return Snippet(name=name, definition=definition, body=body, braced=True)


def serialize_snippet(snippet: Snippet) -> str:
    if snippet.braced:
        return snippet.definition + "{\n" + snippet.body + "}"
    return snippet.definition + snippet.body


def restore_snippet(name: str, kind: Kind, text: str) -> Snippet:
    if kind in _BRACED_KINDS:
        return split_declaration(name, text)
    return Snippet(name=name, body=text)


class GoExtractor:
    """Extract Go functions, methods and struct/interface types.

    Methods are addressed as ``Receiver.Method``; plain names match top-level
    functions only.
    """

    lang = Lang.GO

    async def pluck(self, source: str, name: str, kind: Kind) -> Snippet:
        if kind is Kind.FILE:
            return Snippet(name=name, body=source)
        if kind not in _BRACED_KINDS:
            raise UnsupportedKindError(f"{kind.value} kind not supported", component="go plucker")

        source_bytes = _terminated(source.encode("utf-8"))
        for declaration in find_declarations(_parse(source_bytes), source_bytes):
            if declaration.kind is kind and declaration.name == name:
                definition, body = declaration.split(source_bytes)
                logger.debug("Plucked %s %s", kind.value, name)
                return Snippet(name=name, definition=definition, body=body, braced=True)

        raise DeclarationNotFoundError(f"no {kind.value} named '{name}'", component="go plucker")

    def serialize(self, snippet: Snippet) -> str:
        return serialize_snippet(snippet)

    def restore(self, name: str, kind: Kind, text: str) -> Snippet:
        return restore_snippet(name, kind, text)
