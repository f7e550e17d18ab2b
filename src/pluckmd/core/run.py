import asyncio
import logging
from pathlib import Path

from pluckmd.core.languages import is_markdown_file
from pluckmd.core.process import MarkdownProcessor
from pluckmd.exceptions import PluckError, RunError, RunTimeoutError

logger = logging.getLogger(__name__)


def list_markdown_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        raise RunError(f"listing markdown files: '{directory}' is not a directory")
    return sorted(path for path in directory.rglob("*") if path.is_file() and is_markdown_file(path))


class Runner:
    """Render every markdown file under a directory, then write back the ones that changed.

    Nothing is written unless every file renders successfully within the deadline.
    """

    def __init__(self, processor: MarkdownProcessor) -> None:
        self._processor = processor

    async def run(self, directory: Path, timeout: float | None = None, write: bool = True) -> list[Path]:
        """Return the files whose rendering differs from their content on disk."""
        files = list_markdown_files(directory)
        logger.info("Found %d markdown file(s) under %s", len(files), directory)

        try:
            async with asyncio.timeout(timeout):
                rendered = await self._render_all(files)
        except TimeoutError as exc:
            raise RunTimeoutError(f"run did not finish within {timeout} seconds") from exc

        changed = [path for path, (original, processed) in rendered.items() if original != processed]
        if write:
            for path in changed:
                try:
                    path.write_text(rendered[path][1], encoding="utf-8", newline="")
                except OSError as exc:
                    raise RunError(f"writing file: {exc}").with_context(path=path) from exc
                logger.info("Updated %s", path)
        return changed

    async def _render_all(self, files: list[Path]) -> dict[Path, tuple[str, str]]:
        rendered: dict[Path, tuple[str, str]] = {}
        for path in files:
            try:
                original = path.read_bytes().decode("utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise RunError(f"reading file: {exc}").with_context(path=path) from exc

            try:
                processed = await self._processor.process_markdown(original)
            except PluckError as exc:
                raise exc.with_context(path=path)
            logger.debug("Processed %s", path)
            rendered[path] = (original, processed)
        return rendered
