from pathlib import Path

from pluckmd.exceptions import InvalidKindError, InvalidLangError
from pluckmd.models import Kind, Lang

_LANGUAGE_ALIASES = {
    "go": Lang.GO,
    "golang": Lang.GO,
    "yaml": Lang.YAML,
    "yml": Lang.YAML,
}

_SUPPORTED_KINDS = {
    Lang.GO: frozenset({Kind.FILE, Kind.TYPE, Kind.FUNCTION}),
    Lang.YAML: frozenset({Kind.FILE, Kind.NODE}),
}

_FENCE_TAGS = {
    Lang.GO: "go",
    Lang.YAML: "yaml",
}

_ELLIPSIS_LINES = {
    Lang.GO: "\t// ...\n",
    Lang.YAML: "# ...\n",
}

_MARKDOWN_EXTENSIONS = frozenset({".md", ".markdown"})


def normalize_language(language: str) -> Lang:
    normalized = language.strip().lower()
    resolved = _LANGUAGE_ALIASES.get(normalized)
    if resolved is None:
        raise InvalidLangError(f"unsupported language '{language}'. Supported: {sorted(_LANGUAGE_ALIASES)}")
    return resolved


def normalize_kind(kind: str) -> Kind:
    try:
        return Kind(kind.strip().lower())
    except ValueError:
        raise InvalidKindError(f"unsupported kind '{kind}'. Supported: {sorted(k.value for k in Kind)}") from None


def supports_kind(lang: Lang, kind: Kind) -> bool:
    return kind in _SUPPORTED_KINDS[lang]


def fence_tag(lang: Lang) -> str:
    return _FENCE_TAGS[lang]


def ellipsis_line(lang: Lang) -> str:
    return _ELLIPSIS_LINES[lang]


def is_markdown_file(path: Path) -> bool:
    return path.suffix.lower() in _MARKDOWN_EXTENSIONS
