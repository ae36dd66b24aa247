"""Rewriting of remote links to downloaded local copies."""

from __future__ import annotations

import logging
import re
from typing import Mapping

logger = logging.getLogger("local_anything")

# A bare URL ends where the extractor stops reading it: at a terminator,
# optionally after trailing sentence punctuation.
BARE_URL_END = r"(?=[.,;:!?]*(?:[\s<>)\]\"']|$))"


def _image_pattern(link: str) -> re.Pattern:
    return re.compile(r'!\[([^\]]*)\]\(' + re.escape(link) + r'((?:\s+"[^"]*")?)\)')


def _link_pattern(link: str) -> re.Pattern:
    return re.compile(r'(?<!!)\[([^\]]*)\]\(' + re.escape(link) + r'((?:\s+"[^"]*")?)\)')


def replace_link(text: str, original_link: str, local_path: str) -> str:
    """Point every occurrence of ``original_link`` at the file name of ``local_path``."""
    file_name = local_path.rsplit("/", 1)[-1] or local_path

    image_pattern = _image_pattern(original_link)
    if image_pattern.search(text):
        return image_pattern.sub(lambda m: f"![{m.group(1)}]({file_name}{m.group(2)})", text)

    link_pattern = _link_pattern(original_link)
    if link_pattern.search(text):
        return link_pattern.sub(lambda m: f"[{m.group(1)}]({file_name}{m.group(2)})", text)

    bare_pattern = re.compile(re.escape(original_link) + BARE_URL_END)
    return bare_pattern.sub(lambda m: f"[{file_name}]({file_name})", text)


def replace_in_text(text: str, replacements: Mapping[str, str]) -> str:
    """Swap remote URLs with downloaded file names, keeping the link style."""
    if not replacements:
        return text
    updated = text
    for original_link, local_path in replacements.items():
        updated = replace_link(updated, original_link, local_path)
    logger.debug("Applied %d replacement(s)", len(replacements))
    return updated
