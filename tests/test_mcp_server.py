"""Tests for the MCP tool functions."""

import json
from unittest.mock import patch

import pytest

from conftest import PNG_BYTES, make_response
from local_anything import mcp_server


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "presetExtensions": [],
                "customExtensions": [".zip"],
                "includeImages": False,
                "storePath": "files",
            }
        ),
        encoding="utf-8",
    )
    return path


class TestExtractLinks:
    """Tests for listing a note's downloadable links."""

    def test_default_settings(self, vault):
        vault.write_text("note.md", "![i](https://x.test/i.png) https://x.test/z.zip")
        links = mcp_server.extract_links("note.md", str(vault.root))
        assert [link["url"] for link in links] == ["https://x.test/i.png"]

    def test_settings_file_controls_extensions(self, vault, settings_file):
        vault.write_text("note.md", "![i](https://x.test/i.png) https://x.test/z.zip")
        links = mcp_server.extract_links("note.md", str(vault.root), str(settings_file))
        assert links == [
            {
                "url": "https://x.test/z.zip",
                "file_name": "z.zip",
                "extension": ".zip",
                "is_image": False,
            }
        ]

    def test_missing_vault(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            mcp_server.extract_links("note.md", str(tmp_path / "missing"))


class TestLocalize:
    """Tests for localizing a note through the MCP tool."""

    def test_settings_file_and_override(self, vault, settings_file):
        vault.write_text("note.md", "https://x.test/z.zip")
        response = make_response(content=PNG_BYTES, headers={"Content-Type": "application/zip"})

        with patch("local_anything.pipeline.requests.Session") as session_cls:
            session_cls.return_value.get.return_value = response
            summary = mcp_server.localize(
                "note.md", str(vault.root), store_file_name="archive", config=str(settings_file)
            )

        assert summary == "1 links found, 1 downloaded, 0 failed"
        assert (vault.root / "files/archive.zip").read_bytes() == PNG_BYTES
        assert vault.read_text("note.md") == "[archive.zip](archive.zip)"
