"""Discovery of downloadable links in Markdown text."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Set
from urllib.parse import urlsplit

from .models import ExtractedLink, LinkPosition
from .utils import clean_name, split_extension, strip_query

logger = logging.getLogger("local_anything")

MARKDOWN_IMAGE_RE = re.compile(r'!\[([^\]]*)\]\(([^)\s]+)(?:\s+"[^"]*")?\)')
MARKDOWN_LINK_RE = re.compile(r'(?<!!)\[([^\]]*)\]\(([^)\s]+)(?:\s+"[^"]*")?\)')
DIRECT_LINK_RE = re.compile(r"https?://[^\s<>)\]\"']+")
TRAILING_PUNCTUATION = ".,;:!?"


def is_external_url(url: str) -> bool:
    lowered = url.lower()
    return lowered.startswith("http://") or lowered.startswith("https://")


def _last_segment(url: str) -> str:
    try:
        path = urlsplit(url).path
    except ValueError:
        path = strip_query(url)
    return path.rsplit("/", 1)[-1]


def get_extension(url: str) -> str:
    """Resolve the lowercase extension of the file a URL points at."""
    return split_extension(_last_segment(url))


def get_file_name(url: str, title: Optional[str] = None) -> str:
    """Build a filesystem-friendly display name, keeping the URL's extension."""
    extension = get_extension(url)
    if title:
        base = clean_name(title, fallback="")
        if base:
            return base + extension
    segment = _last_segment(url)
    if extension and segment.lower().endswith(extension):
        segment = segment[: -len(extension)]
    return clean_name(segment) + extension


class LinkExtractor:
    """Scan text for image links, Markdown links, and bare URLs.

    A URL is reported once, using the first shape it was seen in; images are
    scanned before Markdown links, which are scanned before bare URLs.
    """

    def __init__(self, extensions: Iterable[str], include_images: bool = True) -> None:
        self.extensions = frozenset(ext.lower() for ext in extensions)
        self.include_images = include_images

    def has_valid_extension(self, url: str) -> bool:
        extension = get_extension(url)
        return bool(extension) and extension in self.extensions

    def _accepts(self, url: str, is_image: bool) -> bool:
        if not is_external_url(url):
            return False
        if is_image and self.include_images:
            return True
        return self.has_valid_extension(url)

    def extract_from_text(self, text: str) -> List[ExtractedLink]:
        links: List[ExtractedLink] = []
        seen: Set[str] = set()

        for match in MARKDOWN_IMAGE_RE.finditer(text):
            title, url = match.group(1), match.group(2)
            if url in seen or not self._accepts(url, is_image=True):
                continue
            seen.add(url)
            links.append(
                ExtractedLink(
                    original_link=url,
                    file_extension=get_extension(url),
                    file_name=get_file_name(url, title),
                    position=LinkPosition(match.start(), match.end()),
                    is_markdown_image=True,
                )
            )

        for match in MARKDOWN_LINK_RE.finditer(text):
            title, url = match.group(1), match.group(2)
            if url in seen or not self._accepts(url, is_image=False):
                continue
            seen.add(url)
            links.append(
                ExtractedLink(
                    original_link=url,
                    file_extension=get_extension(url),
                    file_name=get_file_name(url, title),
                    position=LinkPosition(match.start(), match.end()),
                )
            )

        for match in DIRECT_LINK_RE.finditer(text):
            url = match.group(0).rstrip(TRAILING_PUNCTUATION)
            if url in seen or not self._accepts(url, is_image=False):
                continue
            seen.add(url)
            links.append(
                ExtractedLink(
                    original_link=url,
                    file_extension=get_extension(url),
                    file_name=get_file_name(url),
                    position=LinkPosition(match.start(), match.start() + len(url)),
                )
            )

        logger.debug("Extracted %d link(s) from %d characters", len(links), len(text))
        return links
