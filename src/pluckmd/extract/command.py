"""Go extraction delegated to the external ``pluck`` command-line tool."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shutil

from pluckmd.exceptions import (
    DeclarationNotFoundError,
    ExtractorUnavailableError,
    ParseFailureError,
    UnsupportedKindError,
)
from pluckmd.extract.go import restore_snippet, serialize_snippet, split_declaration
from pluckmd.models import Kind, Lang, Snippet

logger = logging.getLogger(__name__)

PLUCK_CMD = "pluck"
PLUCK_CLI_SOURCE = "github.com/blocky/pluck/cmd/pluck@v0.1.1"
_PICK_ARG = "--pick"


class CommandExtractor:
    """Same contract as ``GoExtractor``, reached over a process boundary.

    The source is written to the tool's stdin; its stdout is the declaration
    text, which is then split into definition and body in-process.
    """

    lang = Lang.GO

    def __init__(self, command: str = PLUCK_CMD) -> None:
        executable = shutil.which(command)
        if executable is None:
            raise ExtractorUnavailableError(
                f"pluck command '{command}' not found: install it via 'go install {PLUCK_CLI_SOURCE}'",
                component="command plucker",
            )
        self._executable = executable

    async def pluck(self, source: str, name: str, kind: Kind) -> Snippet:
        if kind is Kind.FILE:
            return Snippet(name=name, body=source)
        if kind not in (Kind.TYPE, Kind.FUNCTION):
            raise UnsupportedKindError(f"{kind.value} kind not supported", component="command plucker")

        pick = f"{_PICK_ARG}={kind.value}:{name}"
        logger.debug("Running %s %s", self._executable, pick)
        process = await asyncio.create_subprocess_exec(
            self._executable,
            pick,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await process.communicate(source.encode("utf-8"))
        except asyncio.CancelledError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            if "not found" in message.lower():
                raise DeclarationNotFoundError(
                    f"no {kind.value} named '{name}': {message}", component="command plucker"
                )
            raise ParseFailureError(f"running {PLUCK_CMD}: {message}", component="command plucker")

        return split_declaration(name, stdout.decode("utf-8"))

    def serialize(self, snippet: Snippet) -> str:
        return serialize_snippet(snippet)

    def restore(self, name: str, kind: Kind, text: str) -> Snippet:
        return restore_snippet(name, kind, text)
