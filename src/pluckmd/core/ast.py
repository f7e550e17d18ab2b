from functools import lru_cache
from pathlib import Path
from typing import cast

from tree_sitter import Node, Query, QueryCursor, Tree
from tree_sitter_language_pack import SupportedLanguage, get_language, get_parser


@lru_cache(maxsize=None)
def load_query(language: str, query_type: str) -> Query:
    queries_dir = Path(__file__).parent.parent / "queries"
    query_path = queries_dir / f"{language}_{query_type}.scm"
    if not query_path.exists():
        raise FileNotFoundError(f"Query file not found: {query_path}")
    query_text = query_path.read_text(encoding="utf-8")
    return Query(get_language(cast(SupportedLanguage, language)), query_text)


def parse_source(source_bytes: bytes, language: str) -> Tree:
    parser = get_parser(cast(SupportedLanguage, language))
    return parser.parse(source_bytes)


def query_matches(query: Query, node: Node) -> list[tuple[int, dict[str, list[Node]]]]:
    """Return ``(pattern_index, captures)`` pairs for every match under ``node``."""
    cursor = QueryCursor(query)
    return list(cursor.matches(node))


def find_descendant(node: Node, node_type: str) -> Node | None:
    """Depth-first search for the first named descendant of ``node_type``."""
    for child in node.named_children:
        if child.type == node_type:
            return child
        found = find_descendant(child, node_type)
        if found is not None:
            return found
    return None


def node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8")
