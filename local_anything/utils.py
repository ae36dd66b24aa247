"""Utility helpers for file name normalization and extension handling."""

from __future__ import annotations

import re

NAME_PATTERN = re.compile(r"[^A-Za-z0-9_-]+")
UNDERSCORE_RUN = re.compile(r"_+")
UNKNOWN_EXTENSION = ".unknown"


def clean_name(value: str, fallback: str = "untitled") -> str:
    """Collapse characters outside ``[A-Za-z0-9_-]`` into single underscores."""
    normalized = NAME_PATTERN.sub("_", value)
    normalized = UNDERSCORE_RUN.sub("_", normalized).strip("_")
    return normalized or fallback


def split_extension(name: str) -> str:
    """Return the lowercase ``.ext`` after the final dot, or an empty string."""
    index = name.rfind(".")
    if index == -1 or index == len(name) - 1:
        return ""
    return name[index:].lower()


def strip_query(value: str) -> str:
    return re.split(r"[?#]", value, maxsplit=1)[0]
