"""High-level orchestration for extracting, downloading, and rewriting links."""

from __future__ import annotations

import datetime as dt
import logging
import time
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Protocol, Sequence

import requests

from .config import LocalizeConfig
from .downloader import FileDownloader
from .extractor import LinkExtractor
from .markdown import replace_in_text
from .models import DocumentResult, RunStats
from .storage import Vault
from .templates import build_variables
from .validation import require_valid

logger = logging.getLogger("local_anything")


class ProgressSink(Protocol):
    """Receives human-readable progress messages during a run."""

    def log(self, message: str, level: str = "info", task: Optional[str] = None) -> None: ...


class LoggingSink:
    """Progress sink that forwards messages to the standard logging module."""

    _LEVELS = {
        "info": logging.INFO,
        "success": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    def __init__(self, target: Optional[logging.Logger] = None) -> None:
        self.target = target or logger

    def log(self, message: str, level: str = "info", task: Optional[str] = None) -> None:
        prefix = f"[{task}] " if task else ""
        self.target.log(self._LEVELS.get(level, logging.INFO), "%s%s", prefix, message)


def resolve_documents(vault: Vault, scope: str, active: Optional[str] = None) -> List[str]:
    """Pick the notes a run should cover."""
    if scope == "allFiles":
        return vault.list_markdown()
    if active is None:
        return []
    if scope == "currentFolder":
        parent = PurePosixPath(active).parent.as_posix()
        return vault.list_markdown("" if parent == "." else parent)
    return [active]


def build_extractor(config: LocalizeConfig) -> LinkExtractor:
    return LinkExtractor(config.active_extensions(), include_images=config.include_images)


def build_downloader(
    config: LocalizeConfig,
    vault: Vault,
    document_path: str,
    session: Optional[requests.Session] = None,
    now: Optional[dt.datetime] = None,
) -> FileDownloader:
    return FileDownloader(
        vault,
        config.store_path,
        build_variables(document_path, now),
        store_file_name=config.store_file_name,
        session=session,
        headers=config.headers,
        timeout=config.timeout,
    )


def process_document(
    path: str,
    config: LocalizeConfig,
    vault: Vault,
    session: Optional[requests.Session] = None,
    sink: Optional[ProgressSink] = None,
    now: Optional[dt.datetime] = None,
) -> DocumentResult:
    """Run the enabled tasks for a single note, rewriting it at most once."""
    sink = sink or LoggingSink()
    start = time.perf_counter()
    result = DocumentResult(path=path)

    content = vault.read_text(path)
    links = build_extractor(config).extract_from_text(content)
    result.links_found = len(links)
    sink.log(f"Found {len(links)} links in {path}", "success", "extract")

    if not config.has_task("download") or not links:
        result.total_seconds = time.perf_counter() - start
        return result

    downloader = build_downloader(config, vault, path, session, now)
    replacements: Dict[str, str] = {}
    for link in links:
        sink.log(f"File: {link.original_link}", "info", "download")
        outcome = downloader.download_file(
            link.original_link,
            link.file_name,
            link.is_markdown_image,
        )
        if outcome.success:
            replacements[link.original_link] = outcome.local_path
            result.downloaded += 1
            sink.log(f"Saved to {outcome.local_path}", "success", "download")
        else:
            result.failed += 1
            sink.log(f"Failed: {outcome.error}", "error", "download")

    if config.has_task("replace") and replacements:
        vault.write_text(path, replace_in_text(content, replacements))
        result.rewritten = True
        sink.log(f"Updated {len(replacements)} links in {path}", "success", "replace")

    result.total_seconds = time.perf_counter() - start
    return result


def run_pipeline(
    documents: Sequence[str],
    config: LocalizeConfig,
    vault: Vault,
    session: Optional[requests.Session] = None,
    sink: Optional[ProgressSink] = None,
) -> RunStats:
    """Process each note sequentially and aggregate the counters."""
    require_valid(config)
    sink = sink or LoggingSink()
    stats = RunStats(documents_total=len(documents))
    if not documents:
        sink.log("No documents found in the selected scope.", "error")
        return stats

    overall_start = time.perf_counter()
    session = session or requests.Session()
    for path in documents:
        try:
            result = process_document(path, config, vault, session, sink)
        except OSError as exc:
            sink.log(f"Skipping {path}: {exc}", "error")
            continue
        stats.add(result)
    stats.total_seconds = time.perf_counter() - overall_start

    sink.log(
        f"Processed {stats.documents_processed}/{stats.documents_total} documents: "
        f"{stats.links_found} links found, {stats.files_downloaded} downloaded, "
        f"{stats.files_failed} failed"
    )
    return stats


def download_single(
    url: str,
    config: LocalizeConfig,
    vault: Vault,
    note_path: Optional[str] = None,
    session: Optional[requests.Session] = None,
    sink: Optional[ProgressSink] = None,
) -> RunStats:
    """Download one URL without rewriting any note."""
    require_valid(config)
    sink = sink or LoggingSink()
    start = time.perf_counter()
    stats = RunStats(documents_total=1)
    result = DocumentResult(path=note_path or url)

    links = build_extractor(config).extract_from_text(url)
    result.links_found = len(links)
    if not links:
        sink.log("No valid links found with target extensions", "error")
    else:
        link = links[0]
        downloader = build_downloader(config, vault, note_path or link.file_name, session)
        outcome = downloader.download_file(
            link.original_link,
            link.file_name,
            link.is_markdown_image,
        )
        if outcome.success:
            result.downloaded = 1
            sink.log(f"Saved to {outcome.local_path}", "success", "download")
        else:
            result.failed = 1
            sink.log(f"Failed: {outcome.error}", "error", "download")

    result.total_seconds = time.perf_counter() - start
    stats.add(result)
    stats.total_seconds = result.total_seconds
    return stats
