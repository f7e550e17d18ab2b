import os
from dataclasses import dataclass
from pathlib import Path

GO_EXTRACTORS = ("tree-sitter", "pluck")


@dataclass(frozen=True)
class Settings:
    timeout: float
    base_dir: Path
    go_extractor: str
    http_timeout: float
    github_token: str | None


def load_settings() -> Settings:
    go_extractor = os.getenv("PLUCKMD_GO_EXTRACTOR", "tree-sitter")
    if go_extractor not in GO_EXTRACTORS:
        raise ValueError(f"Unsupported Go extractor '{go_extractor}'. Supported: {list(GO_EXTRACTORS)}")
    return Settings(
        timeout=float(os.getenv("PLUCKMD_TIMEOUT", "60")),
        base_dir=Path(os.getenv("PLUCKMD_BASE_DIR") or Path.cwd()),
        go_extractor=go_extractor,
        http_timeout=float(os.getenv("PLUCKMD_HTTP_TIMEOUT", "30")),
        github_token=os.getenv("GITHUB_TOKEN") or None,
    )
