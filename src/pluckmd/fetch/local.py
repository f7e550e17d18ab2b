from pathlib import Path

from pluckmd.exceptions import FetchError


class LocalFetcher:
    """Read sources from disk; relative locators resolve against ``base_dir``."""

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self._base_dir = Path(base_dir) if base_dir is not None else Path.cwd()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    async def fetch(self, uri: str) -> bytes:
        path = Path(uri)
        if not path.is_absolute():
            path = self._base_dir / path

        try:
            return path.read_bytes()
        except OSError as exc:
            message = f"reading file '{path}': {exc.strerror or exc}"
            raise FetchError(message, uri=uri, component="local fetcher") from exc
