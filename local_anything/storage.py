"""Storage capability used by the pipeline to read notes and persist files."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import List, Optional, Protocol

logger = logging.getLogger("local_anything")


class StorageError(OSError):
    """Raised when a vault operation cannot be carried out."""


class Vault(Protocol):
    """Operations the pipeline needs from the host document store.

    All paths are POSIX-style and relative to the vault root.
    """

    def read_text(self, path: str) -> str: ...

    def write_text(self, path: str, text: str) -> None: ...

    def mkdir(self, path: str) -> None: ...

    def write_binary(self, path: str, data: bytes) -> None: ...

    def list_markdown(self, folder: Optional[str] = None) -> List[str]: ...


class LocalVault:
    """Vault backed by a directory on the local filesystem."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def resolve(self, path: str) -> Path:
        candidate = (self.root / PurePosixPath(path)).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise StorageError(f"Path escapes vault root: {path}")
        return candidate

    def relative(self, path: Path) -> str:
        return Path(path).resolve().relative_to(self.root).as_posix()

    def read_text(self, path: str) -> str:
        try:
            return self.resolve(path).read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise StorageError(f"{path} is not valid UTF-8: {exc}") from exc

    def write_text(self, path: str, text: str) -> None:
        self.resolve(path).write_text(text, encoding="utf-8")
        logger.debug("Wrote %d characters to %s", len(text), path)

    def mkdir(self, path: str) -> None:
        if not path:
            return
        self.resolve(path).mkdir(parents=True, exist_ok=True)

    def write_binary(self, path: str, data: bytes) -> None:
        self.resolve(path).write_bytes(data)
        logger.debug("Wrote %d bytes to %s", len(data), path)

    def list_markdown(self, folder: Optional[str] = None) -> List[str]:
        """List Markdown notes, either vault-wide or directly inside ``folder``."""
        if folder is None:
            candidates = self.root.rglob("*.md")
        else:
            candidates = self.resolve(folder).glob("*.md")
        return sorted(self.relative(path) for path in candidates if path.is_file())
