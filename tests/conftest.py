"""Pytest configuration and fixtures."""

import datetime as dt
from typing import Dict, Optional
from unittest.mock import MagicMock

import pytest
import requests

from local_anything.storage import LocalVault

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def make_response(
    status_code: int = 200,
    content: bytes = b"data",
    headers: Optional[Dict[str, str]] = None,
    reason: str = "OK",
) -> requests.Response:
    """Build a real ``requests.Response`` without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response.reason = reason
    response.headers.update(headers or {})
    response.encoding = "utf-8"
    return response


@pytest.fixture
def vault(tmp_path):
    """Vault rooted in a temporary directory."""
    return LocalVault(tmp_path)


@pytest.fixture
def session():
    """Session stub whose ``get`` returns a successful response by default."""
    stub = MagicMock(spec=requests.Session)
    stub.get.return_value = make_response(content=PNG_BYTES, headers={"Content-Type": "image/png"})
    return stub


@pytest.fixture
def fixed_now():
    return dt.datetime(2024, 1, 1, 9, 30, 15)
