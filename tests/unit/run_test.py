"""Unit tests for directory-level rendering and write-back."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from pluckmd.cache import InMemoryCache
from pluckmd.core.process import MarkdownProcessor
from pluckmd.core.resolve import ContentResolver
from pluckmd.core.run import Runner, list_markdown_files
from pluckmd.exceptions import DeclarationNotFoundError, RunError, RunTimeoutError
from pluckmd.extract.go import GoExtractor
from pluckmd.extract.yaml import YAMLExtractor
from pluckmd.fetch.local import LocalFetcher

DIRECTIVE = '<!-- pluck("go", "type", "Foo", "src/sample.go", 0, 0) -->\n'


@pytest.fixture
def project(tmp_path: Path, go_source: str) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "sample.go").write_text(go_source, encoding="utf-8")
    (tmp_path / "docs").mkdir()
    return tmp_path


def _runner(base_dir: Path) -> Runner:
    resolver = ContentResolver(InMemoryCache(), [LocalFetcher(base_dir)])
    return Runner(MarkdownProcessor(resolver, [GoExtractor(), YAMLExtractor()]))


class _SlowProcessor:
    async def process_markdown(self, markdown: str) -> str:
        await asyncio.sleep(10)
        return markdown


def test_list_markdown_files_is_recursive_and_sorted(tmp_path: Path) -> None:
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "guide.markdown").write_text("", encoding="utf-8")
    (tmp_path / "a.md").write_text("", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("", encoding="utf-8")

    assert list_markdown_files(tmp_path) == [tmp_path / "a.md", tmp_path / "b" / "guide.markdown"]


def test_list_markdown_files_requires_directory(tmp_path: Path) -> None:
    with pytest.raises(RunError, match="not a directory"):
        list_markdown_files(tmp_path / "missing")


@pytest.mark.asyncio
async def test_run_writes_only_changed_files(project: Path) -> None:
    target = project / "docs" / "usage.md"
    target.write_text(DIRECTIVE, encoding="utf-8")
    untouched = project / "docs" / "plain.md"
    untouched.write_text("# Nothing to pluck\n", encoding="utf-8")

    changed = await _runner(project).run(project / "docs")

    assert changed == [target]
    assert target.read_text(encoding="utf-8") == DIRECTIVE + "```go\ntype Foo struct {\n\tX int\n\tY string\n}\n```\n"
    assert untouched.read_text(encoding="utf-8") == "# Nothing to pluck\n"


@pytest.mark.asyncio
async def test_second_run_changes_nothing(project: Path) -> None:
    (project / "docs" / "usage.md").write_text(DIRECTIVE, encoding="utf-8")

    await _runner(project).run(project / "docs")

    assert await _runner(project).run(project / "docs") == []


@pytest.mark.asyncio
async def test_check_mode_reports_without_writing(project: Path) -> None:
    target = project / "docs" / "usage.md"
    target.write_text(DIRECTIVE, encoding="utf-8")

    stale = await _runner(project).run(project / "docs", write=False)

    assert stale == [target]
    assert target.read_text(encoding="utf-8") == DIRECTIVE


@pytest.mark.asyncio
async def test_failure_in_any_file_prevents_all_writes(project: Path) -> None:
    good = project / "docs" / "a.md"
    good.write_text(DIRECTIVE, encoding="utf-8")
    bad = project / "docs" / "b.md"
    bad.write_text('\n<!-- pluck("go", "type", "Nope", "src/sample.go", 0, 0) -->\n', encoding="utf-8")

    with pytest.raises(DeclarationNotFoundError) as exc_info:
        await _runner(project).run(project / "docs")

    assert exc_info.value.path == bad
    assert exc_info.value.line == 2
    assert good.read_text(encoding="utf-8") == DIRECTIVE


@pytest.mark.asyncio
async def test_deadline_aborts_run(tmp_path: Path) -> None:
    (tmp_path / "a.md").write_text("text\n", encoding="utf-8")
    runner = Runner(_SlowProcessor())  # type: ignore[arg-type]

    with pytest.raises(RunTimeoutError):
        await runner.run(tmp_path, timeout=0.01)

    assert (tmp_path / "a.md").read_text(encoding="utf-8") == "text\n"


@pytest.mark.asyncio
async def test_crlf_document_keeps_its_line_endings(project: Path) -> None:
    target = project / "docs" / "usage.md"
    document = f"Intro\n\n{DIRECTIVE}```go\nstale\n```\nOutro\n".replace("\n", "\r\n")
    target.write_bytes(document.encode("utf-8"))

    await _runner(project).run(project / "docs")

    data = target.read_bytes()
    assert b"\r\n```go\r\ntype Foo struct {\r\n\tX int\r\n\tY string\r\n}\r\n```\r\nOutro\r\n" in data
    assert data.count(b"\n") == data.count(b"\r\n")
