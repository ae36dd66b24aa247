"""Path and file name templating for downloaded attachments."""

from __future__ import annotations

import datetime as dt
import hashlib
import re
from pathlib import PurePosixPath
from typing import Dict, Mapping, Optional

PLACEHOLDER_PATTERN = re.compile(r"\$\{(\w+)\}")
UNSAFE_PATH_CHARS = re.compile(r'[\s<>:"\\|?*]')
SEPARATOR_RUN = re.compile(r"/{2,}")


def md5_hex(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def substitute(template: str, variables: Mapping[str, str]) -> str:
    """Replace every ``${name}`` with its value; unknown names stay verbatim."""

    def _lookup(match: re.Match) -> str:
        name = match.group(1)
        if name in variables:
            return variables[name]
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_lookup, template)


def sanitize_path(value: str) -> str:
    """Replace whitespace and characters that filesystems reject with ``_``."""
    return UNSAFE_PATH_CHARS.sub("_", value)


def render(template: str, variables: Mapping[str, str]) -> str:
    return sanitize_path(substitute(template, variables))


def render_file_name(template: str, variables: Mapping[str, str], extension: str) -> str:
    """Render a file name template and make sure it ends with ``extension``."""
    name = substitute(template, variables)
    if not name.lower().endswith(extension.lower()):
        name += extension
    return sanitize_path(name)


def join_store_path(directory: str, file_name: str) -> str:
    """Join a rendered directory and file name with a single ``/``."""
    directory = directory.strip("/")
    if not directory:
        return file_name
    return SEPARATOR_RUN.sub("/", f"{directory}/{file_name}")


def build_store_path(
    store_path: str,
    store_file_name: str,
    variables: Mapping[str, str],
    extension: str,
) -> str:
    directory = render(store_path, variables)
    file_name = render_file_name(store_file_name, variables, extension)
    return join_store_path(directory, file_name)


def build_variables(document_path: str, now: Optional[dt.datetime] = None) -> Dict[str, str]:
    """Assemble the per-document template variables.

    ``path`` is the document path without its Markdown suffix so that the
    default ``assets/${path}`` layout mirrors the vault structure.
    """
    now = now or dt.datetime.now()
    document = PurePosixPath(document_path.replace("\\", "/"))
    stem = document.stem if document.suffix.lower() == ".md" else document.name
    without_suffix = str(document.with_name(stem)) if stem else str(document)
    return {
        "path": without_suffix,
        "notename": stem,
        "title": stem,
        "date": now.strftime("%Y-%m-%d"),
        "time": now.strftime("%H-%M-%S"),
        "datetime": now.strftime("%Y-%m-%dT%H-%M-%S"),
    }
