"""Configuration objects, extension presets, and settings loading."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

logger = logging.getLogger("local_anything")

TASKS: Tuple[str, ...] = ("extract", "download", "replace")
SCOPES: Tuple[str, ...] = ("currentFile", "currentFolder", "allFiles", "singleItem")

DEFAULT_STORE_PATH = "assets/${path}"
DEFAULT_STORE_FILE_NAME = "${originalName}"

EXTENSION_PRESETS: Dict[str, Tuple[str, ...]] = {
    "image": (
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".svg", ".webp", ".tiff",
        ".ico", ".raw", ".heic", ".heif", ".avif", ".jfif",
    ),
    "officeFile": (
        ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".pdf", ".odt",
        ".ods", ".odp", ".rtf", ".txt", ".csv", ".epub", ".pages", ".numbers",
        ".key",
    ),
    "archivePackage": (
        ".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz", ".iso", ".tgz",
        ".z", ".bzip2", ".cab",
    ),
    "music": (
        ".mp3", ".wav", ".flac", ".m4a", ".ogg", ".aac", ".wma", ".aiff",
        ".alac", ".mid", ".midi", ".opus", ".amr",
    ),
    "video": (
        ".mp4", ".avi", ".mkv", ".mov", ".wmv", ".flv", ".webm", ".m4v",
        ".mpg", ".mpeg", ".3gp", ".ogv", ".ts", ".vob",
    ),
    "code": (
        ".js", ".ts", ".jsx", ".tsx", ".html", ".css", ".scss", ".json",
        ".xml", ".yaml", ".yml", ".md", ".py", ".java", ".cpp", ".c", ".cs",
        ".php", ".rb", ".go", ".rs", ".swift",
    ),
    "font": (".ttf", ".otf", ".woff", ".woff2", ".eot"),
    "design": (
        ".psd", ".ai", ".eps", ".sketch", ".fig", ".xd", ".blend", ".obj",
        ".fbx", ".stl", ".3ds", ".dae",
    ),
    "database": (".sql", ".db", ".sqlite", ".mdb", ".accdb", ".csv", ".tsv"),
    "ebook": (".epub", ".mobi", ".azw", ".azw3", ".fb2", ".lit", ".djvu"),
    "academic": (
        ".bib", ".tex", ".sty", ".cls", ".csl", ".nb", ".mat", ".r", ".rmd",
        ".ipynb",
    ),
}

# Keys used by the editor plugin's persisted settings file.
_CAMEL_CASE_KEYS = {
    "presetExtensions": "preset_extensions",
    "customExtensions": "custom_extensions",
    "storePath": "store_path",
    "storeFileName": "store_file_name",
    "includeImages": "include_images",
}


def collect_extensions(
    preset_names: Iterable[str],
    custom_extensions: Iterable[str] = (),
) -> FrozenSet[str]:
    """Union of preset and custom extensions, lowercased."""
    extensions = set()
    for name in preset_names:
        extensions.update(EXTENSION_PRESETS.get(name, ()))
    extensions.update(ext.strip() for ext in custom_extensions)
    return frozenset(ext.lower() for ext in extensions if ext)


def parse_custom_extensions(value: str) -> List[str]:
    """Split a ``.pdf|.txt`` style list into unique lowercase extensions."""
    extensions: List[str] = []
    for part in value.split("|"):
        ext = part.strip().lower()
        if ext and ext not in extensions:
            extensions.append(ext)
    return extensions


@dataclass
class LocalizeConfig:
    """Settings that control extraction, download, and link rewriting."""

    tasks: FrozenSet[str] = frozenset(TASKS)
    scope: str = "currentFile"
    preset_extensions: Tuple[str, ...] = ("image", "officeFile")
    custom_extensions: Tuple[str, ...] = ()
    store_path: str = DEFAULT_STORE_PATH
    store_file_name: str = DEFAULT_STORE_FILE_NAME
    include_images: bool = True
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None

    def active_extensions(self) -> FrozenSet[str]:
        return collect_extensions(self.preset_extensions, self.custom_extensions)

    def has_task(self, task: str) -> bool:
        return task in self.tasks


def config_from_mapping(data: Dict[str, object]) -> LocalizeConfig:
    """Overlay a settings mapping on top of the defaults."""
    known = {f.name for f in fields(LocalizeConfig)}
    values: Dict[str, object] = {}
    for key, value in data.items():
        name = _CAMEL_CASE_KEYS.get(key, key)
        if name not in known:
            logger.warning("Ignoring unknown setting %r", key)
            continue
        values[name] = value

    if "tasks" in values:
        values["tasks"] = frozenset(values["tasks"])  # type: ignore[arg-type]
    for name in ("preset_extensions", "custom_extensions"):
        if name in values:
            values[name] = tuple(values[name])  # type: ignore[arg-type]
    if "headers" in values:
        values["headers"] = dict(values["headers"])  # type: ignore[arg-type]
    return LocalizeConfig(**values)  # type: ignore[arg-type]


def load_config(path: Path) -> LocalizeConfig:
    """Read a JSON settings file, falling back to defaults for missing keys."""
    with Path(path).open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a JSON object: {path}")
    logger.debug("Loaded settings from %s", path)
    return config_from_mapping(data)
