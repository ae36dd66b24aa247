"""Attachment downloading and storage utilities."""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional
from urllib.parse import urlsplit

import requests
from filetype import guess

from .config import DEFAULT_STORE_FILE_NAME
from .models import DownloadResult
from .storage import Vault
from .templates import build_store_path, md5_hex
from .utils import UNKNOWN_EXTENSION, split_extension

logger = logging.getLogger("local_anything")

MAX_ERROR_BODY_CHARS = 200

CONTENT_TYPE_EXTENSIONS: Dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
    "application/pdf": ".pdf",
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "audio/mpeg": ".mp3",
    "audio/wav": ".wav",
    "audio/webm": ".weba",
}


def extension_from_content_type(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    base = content_type.split(";")[0].strip().lower()
    return CONTENT_TYPE_EXTENSIONS.get(base)


def detect_extension(data: bytes) -> Optional[str]:
    """Detect a file type from its signature; returns ``.ext`` or None."""
    kind = guess(data)
    if kind is None:
        return None
    extension = kind.extension.lower()
    if extension == "jpeg":
        extension = "jpg"
    return f".{extension}"


def infer_extension(content_type: Optional[str], data: bytes) -> str:
    """Guess an extension from HTTP metadata, then the payload signature."""
    return (
        extension_from_content_type(content_type)
        or detect_extension(data)
        or UNKNOWN_EXTENSION
    )


def original_name(url: str) -> str:
    """Last URL path segment, or a short hash of the URL when there is none."""
    try:
        segment = urlsplit(url).path.rsplit("/", 1)[-1]
    except ValueError:
        segment = ""
    return segment or md5_hex(url)[:8]


def _describe_failure(response: requests.Response) -> str:
    body = response.text or ""
    if len(body) > MAX_ERROR_BODY_CHARS:
        body = body[:MAX_ERROR_BODY_CHARS] + "..."
    reason = f"HTTP {response.status_code}"
    if response.reason:
        reason += f" {response.reason}"
    return f"{reason}: {body}" if body else reason


class FileDownloader:
    """Fetch remote files and persist them under templated vault paths."""

    def __init__(
        self,
        vault: Vault,
        store_path: str,
        variables: Mapping[str, str],
        store_file_name: str = DEFAULT_STORE_FILE_NAME,
        session: Optional[requests.Session] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.vault = vault
        self.store_path = store_path
        self.store_file_name = store_file_name or DEFAULT_STORE_FILE_NAME
        self.variables = dict(variables)
        self.session = session or requests.Session()
        self.headers = dict(headers or {})
        self.timeout = timeout

    def local_path_for(self, url: str, extension: str) -> str:
        variables = {
            **self.variables,
            "originalName": original_name(url),
            "md5": md5_hex(url),
        }
        return build_store_path(self.store_path, self.store_file_name, variables, extension)

    def resolve_extension(
        self,
        file_name: str,
        response: requests.Response,
        is_markdown_image: bool,
    ) -> str:
        extension = split_extension(file_name)
        if is_markdown_image and extension in ("", UNKNOWN_EXTENSION):
            extension = infer_extension(response.headers.get("Content-Type"), response.content)
        return extension

    def download_file(
        self,
        url: str,
        file_name: str,
        is_markdown_image: bool = False,
    ) -> DownloadResult:
        """Download ``url`` into the vault; never raises."""
        try:
            response = self.session.get(url, headers=self.headers or None, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Failed to fetch %s: %s", url, exc)
            return DownloadResult.failed(f"Network error: {exc}")

        if not 200 <= response.status_code < 300:
            error = _describe_failure(response)
            logger.warning("Failed to fetch %s: %s", url, error)
            return DownloadResult.failed(error)

        extension = self.resolve_extension(file_name, response, is_markdown_image)
        local_path = self.local_path_for(url, extension)
        directory = local_path.rpartition("/")[0]

        try:
            self.vault.mkdir(directory)
            self.vault.write_binary(local_path, response.content)
        except OSError as exc:
            logger.warning("Failed to store %s at %s: %s", url, local_path, exc)
            return DownloadResult.failed(f"Storage error: {exc}")

        logger.info("Saved %s to %s", url, local_path)
        return DownloadResult.ok(local_path)
