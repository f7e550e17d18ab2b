"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest
from tree_sitter import Language, Parser, Query
from tree_sitter_language_pack import get_language, get_parser

from pluckmd.cache import InMemoryCache

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------

GO_SOURCE = """\
package sample

import "fmt"

// Foo holds a value.
type Foo struct {
	X int
	Y string
}

type (
	Bar struct {
		Z bool
	}
	Namer interface {
		Name() string
	}
)

func Hello(name string) string {
	greeting := "Hello, " + name
	return greeting
}

func (f *Foo) Describe() string {
	return fmt.Sprintf("%d %s", f.X, f.Y)
}
"""

YAML_SOURCE = """\
server:
  host: localhost
  port: 8080
  tls:
    enabled: true
    cert: "/etc/ssl/server.pem"
features:
  - search
  - export
"""


@pytest.fixture
def queries_dir() -> Path:
    """Return the path to the queries directory."""
    return _REPO_ROOT / "src" / "pluckmd" / "queries"


@pytest.fixture
def go_parser() -> Parser:
    """Return a tree-sitter parser for Go."""
    return get_parser("go")


@pytest.fixture
def go_language() -> Language:
    """Return the tree-sitter Go language."""
    return get_language("go")


@pytest.fixture
def go_declarations_query(queries_dir: Path, go_language: Language) -> Query:
    """Load the Go declarations query."""
    query_text = (queries_dir / "go_declarations.scm").read_text()
    return Query(go_language, query_text)


@pytest.fixture
def go_source() -> str:
    return GO_SOURCE


@pytest.fixture
def yaml_source() -> str:
    return YAML_SOURCE


@pytest.fixture
def in_memory_cache() -> InMemoryCache:
    return InMemoryCache()
