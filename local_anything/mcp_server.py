"""MCP server exposing link extraction and localization tools."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Union

from mcp.server.fastmcp import FastMCP

from .config import LocalizeConfig, load_config
from .pipeline import build_extractor, run_pipeline
from .storage import LocalVault

logger = logging.getLogger("local_anything.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="local-anything")


def _open_vault(vault: str) -> LocalVault:
    root = Path(vault).expanduser()
    if not root.is_dir():
        raise FileNotFoundError(f"Vault directory does not exist: {root}")
    return LocalVault(root)


def _load_settings(config: Optional[str]) -> LocalizeConfig:
    if not config:
        return LocalizeConfig()
    return load_config(Path(config).expanduser())


@mcp.tool()
def extract_links(
    path: str,
    vault: str = ".",
    config: Optional[str] = None,
) -> List[Dict[str, Union[str, bool]]]:
    """List the remote files a note links to that would be downloaded."""

    store = _open_vault(vault)
    extractor = build_extractor(_load_settings(config))
    return [
        {
            "url": link.original_link,
            "file_name": link.file_name,
            "extension": link.file_extension,
            "is_image": link.is_markdown_image,
        }
        for link in extractor.extract_from_text(store.read_text(path))
    ]


@mcp.tool()
def localize(
    path: str,
    vault: str = ".",
    store_path: Optional[str] = None,
    store_file_name: Optional[str] = None,
    config: Optional[str] = None,
) -> str:
    """Download a note's linked files into the vault and rewrite its links."""

    store = _open_vault(vault)
    settings = _load_settings(config)
    if store_path is not None:
        settings = replace(settings, store_path=store_path)
    if store_file_name is not None:
        settings = replace(settings, store_file_name=store_file_name)
    stats = run_pipeline([path], settings, store)
    return (
        f"{stats.links_found} links found, {stats.files_downloaded} downloaded, "
        f"{stats.files_failed} failed"
    )


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
