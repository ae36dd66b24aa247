"""Data models used throughout the localization pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class LinkPosition:
    """Character offsets of a match in the scanned text."""

    start: int
    end: int


@dataclass(frozen=True)
class ExtractedLink:
    """Remote file reference discovered while scanning document text."""

    original_link: str
    file_extension: str
    file_name: str
    position: LinkPosition
    is_markdown_image: bool = False


@dataclass
class DownloadResult:
    """Outcome of a single download attempt."""

    success: bool
    local_path: str = ""
    error: Optional[str] = None

    @classmethod
    def ok(cls, local_path: str) -> "DownloadResult":
        return cls(success=True, local_path=local_path)

    @classmethod
    def failed(cls, error: str) -> "DownloadResult":
        return cls(success=False, local_path="", error=error)


@dataclass
class DocumentResult:
    """Per-document counters for a pipeline run."""

    path: str
    links_found: int = 0
    downloaded: int = 0
    failed: int = 0
    rewritten: bool = False
    total_seconds: float = 0.0


@dataclass
class RunStats:
    """Aggregate counters reported at the end of a run."""

    documents_total: int = 0
    documents_processed: int = 0
    links_found: int = 0
    files_downloaded: int = 0
    files_failed: int = 0
    total_seconds: float = 0.0
    documents: List[DocumentResult] = field(default_factory=list)

    def add(self, result: DocumentResult) -> None:
        self.documents.append(result)
        self.documents_processed += 1
        self.links_found += result.links_found
        self.files_downloaded += result.downloaded
        self.files_failed += result.failed
