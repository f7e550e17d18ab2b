"""Unit tests for the external pluck command extractor."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pluckmd.exceptions import (
    DeclarationNotFoundError,
    ExtractorUnavailableError,
    ParseFailureError,
    UnsupportedKindError,
)
from pluckmd.extract.command import CommandExtractor
from pluckmd.models import Kind, Snippet


def _process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> MagicMock:
    process = MagicMock()
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    process.wait = AsyncMock(return_value=returncode)
    process.returncode = returncode
    return process


@pytest.fixture
def extractor() -> CommandExtractor:
    with patch("pluckmd.extract.command.shutil.which", return_value="/usr/local/bin/pluck"):
        return CommandExtractor()


def test_missing_executable_is_reported_with_install_hint() -> None:
    with patch("pluckmd.extract.command.shutil.which", return_value=None):
        with pytest.raises(ExtractorUnavailableError, match="go install"):
            CommandExtractor()


@pytest.mark.asyncio
async def test_pluck_pipes_source_and_splits_output(extractor: CommandExtractor) -> None:
    process = _process(stdout=b"func Hello() string {\n\treturn \"hi\"\n}\n")
    spawn = AsyncMock(return_value=process)

    with patch("pluckmd.extract.command.asyncio.create_subprocess_exec", spawn):
        snippet = await extractor.pluck("package p\n", "Hello", Kind.FUNCTION)

    assert snippet == Snippet(name="Hello", definition="func Hello() string ", body='\treturn "hi"\n', braced=True)
    args, _ = spawn.call_args
    assert args == ("/usr/local/bin/pluck", "--pick=function:Hello")
    process.communicate.assert_awaited_once_with(b"package p\n")


@pytest.mark.asyncio
async def test_not_found_on_stderr_maps_to_declaration_not_found(extractor: CommandExtractor) -> None:
    process = _process(stderr=b"type Missing not found\n", returncode=1)

    with patch("pluckmd.extract.command.asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
        with pytest.raises(DeclarationNotFoundError, match="Missing"):
            await extractor.pluck("package p\n", "Missing", Kind.TYPE)


@pytest.mark.asyncio
async def test_other_failures_map_to_parse_failure(extractor: CommandExtractor) -> None:
    process = _process(stderr=b"1:9: expected declaration\n", returncode=2)

    with patch("pluckmd.extract.command.asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
        with pytest.raises(ParseFailureError, match="expected declaration"):
            await extractor.pluck("package p\nfunc {", "Broken", Kind.FUNCTION)


@pytest.mark.asyncio
async def test_cancellation_kills_the_child(extractor: CommandExtractor) -> None:
    process = _process()
    process.communicate = AsyncMock(side_effect=asyncio.CancelledError)

    with patch("pluckmd.extract.command.asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
        with pytest.raises(asyncio.CancelledError):
            await extractor.pluck("package p\n", "Hello", Kind.FUNCTION)

    process.kill.assert_called_once()
    process.wait.assert_awaited_once()


@pytest.mark.asyncio
async def test_file_kind_does_not_spawn(extractor: CommandExtractor) -> None:
    spawn = AsyncMock()

    with patch("pluckmd.extract.command.asyncio.create_subprocess_exec", spawn):
        snippet = await extractor.pluck("package p\n", "", Kind.FILE)

    assert snippet.body == "package p\n"
    spawn.assert_not_called()


@pytest.mark.asyncio
async def test_node_kind_is_unsupported(extractor: CommandExtractor) -> None:
    with pytest.raises(UnsupportedKindError):
        await extractor.pluck("package p\n", "a.b", Kind.NODE)
