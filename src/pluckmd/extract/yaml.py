"""YAML node extraction: pluck a keyed subtree and re-render it as YAML text."""

from __future__ import annotations

import logging
from typing import Any

import yaml
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from pluckmd.exceptions import ParseFailureError, PathNotFoundError, UnsupportedKindError, UnsupportedNodeKindError
from pluckmd.models import Kind, Lang, Snippet

logger = logging.getLogger(__name__)

YAML_INDENT_SIZE = 2
_LINE_WIDTH = 4096
_DOCUMENT_END = "...\n"


class AliasNode(Node):
    """An ``*alias`` occurrence, kept apart from the anchored node it points at."""

    id = "alias"

    def __init__(self, target: Node, anchor: str, start_mark: Any, end_mark: Any) -> None:
        super().__init__(target.tag, target.value, start_mark, end_mark)
        self.target = target
        self.anchor = anchor


class _AliasPreservingLoader(yaml.SafeLoader):
    def compose_node(self, parent: Node | None, index: Any) -> Node:
        if self.check_event(yaml.AliasEvent):
            event = self.peek_event()
            target = super().compose_node(parent, index)
            return AliasNode(target, event.anchor, event.start_mark, event.end_mark)
        return super().compose_node(parent, index)


class _IndentedDumper(yaml.SafeDumper):
    """Indent block sequences under their parent key by the full indent width."""

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        super().increase_indent(flow, False)


def _describe(node: Node) -> str:
    if isinstance(node, AliasNode):
        return "alias"
    return node.id


def find_target_node(root: Node, path: str) -> tuple[Node, str]:
    """Walk a dot-separated key path through mapping nodes."""
    current = root
    last_key = ""
    for key in path.split("."):
        if not isinstance(current, MappingNode):
            raise PathNotFoundError(
                f"expected mapping node at key '{key}', got {_describe(current)}", component="yaml plucker"
            )
        for key_node, value_node in current.value:
            if isinstance(key_node, ScalarNode) and key_node.value == key:
                current = value_node
                last_key = key
                break
        else:
            raise PathNotFoundError(f"key '{key}' not found in YAML", component="yaml plucker")
    return current, last_key


def _dereference(node: Node) -> Node:
    while isinstance(node, AliasNode):
        node = node.target
    return node


def _inline_aliases(node: Node, seen: set[int] | None = None) -> None:
    """Replace alias occurrences with their targets so the serializer can emit them."""
    if seen is None:
        seen = set()
    if id(node) in seen:
        return
    seen.add(id(node))

    if isinstance(node, MappingNode):
        node.value = [(_dereference(k), _dereference(v)) for k, v in node.value]
        for k, v in node.value:
            _inline_aliases(k, seen)
            _inline_aliases(v, seen)
    elif isinstance(node, SequenceNode):
        node.value = [_dereference(item) for item in node.value]
        for item in node.value:
            _inline_aliases(item, seen)


def render_node(node: Node) -> str:
    _inline_aliases(node)
    text = yaml.serialize(
        node,
        Dumper=_IndentedDumper,
        indent=YAML_INDENT_SIZE,
        width=_LINE_WIDTH,
        allow_unicode=True,
    )
    # A plain scalar at the document root is followed by an explicit end marker.
    if text.endswith("\n" + _DOCUMENT_END):
        text = text[: -len(_DOCUMENT_END)]
    return text


def _render_scalar(node: ScalarNode, name: str) -> str:
    return f"{name}: {render_node(node)}"


def _render_mapping(node: MappingNode, name: str) -> str:
    indent = " " * YAML_INDENT_SIZE
    lines = render_node(node).split("\n")
    indented = "".join(f"{indent}{line}\n" for line in lines if line)
    return f"{name}:\n{indented}"


class YAMLExtractor:
    """Extract a node by dotted key path (``a.b.c``) from a YAML document."""

    lang = Lang.YAML

    async def pluck(self, source: str, name: str, kind: Kind) -> Snippet:
        if kind is Kind.FILE:
            return Snippet(name=name, body=source)
        if kind is not Kind.NODE:
            raise UnsupportedKindError(f"{kind.value} kind not supported", component="yaml plucker")

        try:
            root = yaml.compose(source, Loader=_AliasPreservingLoader)
        except yaml.YAMLError as exc:
            raise ParseFailureError(f"unmarshaling: {exc}", component="yaml plucker") from exc
        if root is None:
            raise PathNotFoundError("document has no content", component="yaml plucker")

        target, key = find_target_node(root, name)
        if isinstance(target, AliasNode):
            raise UnsupportedNodeKindError("alias nodes are not supported", component="yaml plucker")
        if isinstance(target, SequenceNode):
            raise UnsupportedNodeKindError("sequence nodes are not supported", component="yaml plucker")
        if isinstance(target, ScalarNode):
            body = _render_scalar(target, key)
        elif isinstance(target, MappingNode):
            body = _render_mapping(target, key)
        else:
            raise UnsupportedNodeKindError(f"unsupported node kind: {_describe(target)}", component="yaml plucker")

        logger.debug("Plucked node %s", name)
        return Snippet(name=name, body=body)

    def serialize(self, snippet: Snippet) -> str:
        return snippet.definition + snippet.body

    def restore(self, name: str, kind: Kind, text: str) -> Snippet:
        return Snippet(name=name, body=text)
