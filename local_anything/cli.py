"""Command-line entry point for localizing remote attachments."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Sequence

from .config import SCOPES, TASKS, LocalizeConfig, load_config, parse_custom_extensions
from .models import RunStats
from .pipeline import build_extractor, download_single, resolve_documents, run_pipeline
from .storage import LocalVault
from .validation import ConfigurationError, enable_task, require_valid

logger = logging.getLogger("local_anything.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("run", *argv)


def _parse_header(value: str) -> Dict[str, str]:
    name, sep, content = value.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Expected 'Name: value', got {value!r}")
    return {name.strip(): content.strip()}


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--vault",
        default=".",
        type=Path,
        help="Root directory that notes and downloaded files live in",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON settings file (plugin data.json keys are accepted)",
    )
    parser.add_argument(
        "--tasks",
        nargs="+",
        choices=TASKS,
        default=None,
        help="Tasks to perform; replace needs download, which needs extract",
    )
    parser.add_argument(
        "--preset",
        action="append",
        default=None,
        help="Extension preset to enable (repeatable), e.g. image, officeFile",
    )
    parser.add_argument(
        "--ext",
        action="append",
        default=None,
        help="Custom extensions, '|' separated (e.g. .pdf|.txt)",
    )
    parser.add_argument(
        "--store-path",
        default=None,
        help="Destination directory template, e.g. assets/${path}",
    )
    parser.add_argument(
        "--store-file-name",
        default=None,
        help="File name template, e.g. ${date}-${originalName}",
    )
    parser.add_argument(
        "--header",
        action="append",
        type=_parse_header,
        default=None,
        help="Static request header 'Name: value' (repeatable)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: no timeout)",
    )
    parser.add_argument(
        "--no-images",
        action="store_true",
        help="Filter image links by extension like any other link",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Download files linked from Markdown notes and point the links at local copies.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Localize links in one or more notes")
    run_parser.add_argument(
        "files",
        nargs="*",
        help="Notes to process, relative to the vault (the active note for scoped runs)",
    )
    run_parser.add_argument(
        "--scope",
        choices=[scope for scope in SCOPES if scope != "singleItem"],
        default=None,
        help="Which notes to process when a single active note is given",
    )
    _add_common_arguments(run_parser)

    single_parser = subparsers.add_parser("single", help="Download a single URL")
    single_parser.add_argument("url", help="URL to download")
    single_parser.add_argument(
        "--note",
        default=None,
        help="Note the download belongs to; drives ${path} and ${notename}",
    )
    _add_common_arguments(single_parser)

    extract_parser = subparsers.add_parser("extract", help="List downloadable links in notes")
    extract_parser.add_argument("files", nargs="+", help="Notes to scan, relative to the vault")
    _add_common_arguments(extract_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> LocalizeConfig:
    """Layer command-line overrides over the settings file or defaults."""
    config = load_config(args.config) if args.config else LocalizeConfig()
    overrides: Dict[str, object] = {}
    if args.tasks:
        tasks: FrozenSet[str] = frozenset()
        for task in args.tasks:
            tasks = enable_task(tasks, task)
        overrides["tasks"] = tasks
    if args.preset:
        overrides["preset_extensions"] = tuple(args.preset)
    if args.ext:
        custom: List[str] = []
        for value in args.ext:
            custom.extend(ext for ext in parse_custom_extensions(value) if ext not in custom)
        overrides["custom_extensions"] = tuple(custom)
    if args.store_path is not None:
        overrides["store_path"] = args.store_path
    if args.store_file_name is not None:
        overrides["store_file_name"] = args.store_file_name
    if args.header:
        headers = dict(config.headers)
        for header in args.header:
            headers.update(header)
        overrides["headers"] = headers
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.no_images:
        overrides["include_images"] = False
    if getattr(args, "scope", None):
        overrides["scope"] = args.scope
    return replace(config, **overrides)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _report(stats: RunStats) -> int:
    logger.info(
        "Finished in %.2fs (%d/%d documents, %d links found, %d downloaded, %d failed)",
        stats.total_seconds,
        stats.documents_processed,
        stats.documents_total,
        stats.links_found,
        stats.files_downloaded,
        stats.files_failed,
    )
    for result in stats.documents:
        logger.debug(
            "%s -> links: %d | downloaded: %d | failed: %d | rewritten: %s | %.2fs",
            result.path,
            result.links_found,
            result.downloaded,
            result.failed,
            result.rewritten,
            result.total_seconds,
        )
    return 1 if stats.files_failed else 0


def _run_documents(args: argparse.Namespace, config: LocalizeConfig, vault: LocalVault) -> int:
    files: List[str] = list(args.files)
    if config.scope in ("currentFolder", "allFiles"):
        documents = resolve_documents(vault, config.scope, files[0] if files else None)
    else:
        documents = files
    return _report(run_pipeline(documents, config, vault))


def _run_single(args: argparse.Namespace, config: LocalizeConfig, vault: LocalVault) -> int:
    return _report(download_single(args.url, config, vault, note_path=args.note))


def _run_extract(args: argparse.Namespace, config: LocalizeConfig, vault: LocalVault) -> int:
    require_valid(config)
    extractor = build_extractor(config)
    for path in args.files:
        for link in extractor.extract_from_text(vault.read_text(path)):
            kind = "image" if link.is_markdown_image else "link"
            sys.stdout.write(f"{path}\t{kind}\t{link.file_name}\t{link.original_link}\n")
    sys.stdout.flush()
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = build_config(args)
    except (OSError, ValueError, TypeError) as exc:
        logger.error("Could not load settings: %s", exc)
        sys.exit(2)

    vault = LocalVault(args.vault)
    handlers = {
        "run": _run_documents,
        "single": _run_single,
        "extract": _run_extract,
    }
    try:
        code = handlers[args.command](args, config, vault)
    except ConfigurationError as exc:
        for error in exc.errors:
            logger.error("%s", error)
        sys.exit(2)
    except OSError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
