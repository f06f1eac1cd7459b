"""Test fixtures for http-message unit tests."""

import json
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from http_message.models.core import UploadError
from http_message.models.stream import Stream
from http_message.models.uploaded_file import UploadedFile


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request
# -----------------------------------------------------------------------------


@dataclass
class MockHeaders:
    """Mock Headers object for Robyn Request."""

    _data: dict = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key, default)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def get_headers(self) -> dict[str, list[str]]:
        return {key: [value] for key, value in self._data.items()}


@dataclass
class MockQueryParams:
    """Mock QueryParams object for Robyn Request."""

    _data: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, list[str]]:
        return dict(self._data)


@dataclass
class MockUrl:
    """Mock Url object for Robyn Request."""

    scheme: str = "http"
    host: str = "localhost:8080"
    path: str = "/"


@dataclass
class MockRequest:
    """Mock Request object for Robyn."""

    body: str | bytes = b""
    headers: MockHeaders = field(default_factory=MockHeaders)
    query_params: MockQueryParams = field(default_factory=MockQueryParams)
    path_params: dict[str, str] = field(default_factory=dict)
    files: dict[str, bytes] = field(default_factory=dict)
    form_data: dict[str, str] = field(default_factory=dict)
    url: MockUrl = field(default_factory=MockUrl)
    method: str = "GET"
    ip_addr: str | None = "127.0.0.1"


@pytest.fixture
def make_mock_request():
    """Factory fixture to create mock robyn requests."""

    def _make(
        body: dict | str | bytes | None = None,
        headers: dict | None = None,
        query_params: dict | None = None,
        url: dict | None = None,
        **kwargs,
    ) -> MockRequest:
        mock_headers = MockHeaders(dict(headers or {}))
        if isinstance(body, dict):
            mock_headers.set("Content-Type", "application/json")
            body = json.dumps(body)
        return MockRequest(
            body=body or b"",
            headers=mock_headers,
            query_params=MockQueryParams(query_params or {}),
            url=MockUrl(**(url or {})),
            **kwargs,
        )

    return _make


# -----------------------------------------------------------------------------
# Uploaded file fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def upload_source(tmp_path: Path) -> Path:
    """Temporary file standing in for an upload stored by the transport."""
    source = tmp_path / "upload.tmp"
    source.write_bytes(b"uploaded content")
    return source


@pytest.fixture
def uploaded_file(upload_source: Path) -> UploadedFile:
    """Uploaded file backed by a filesystem path."""
    return UploadedFile(str(upload_source), 16, UploadError.OK, "report.txt", "text/plain")


@pytest.fixture
def stream_uploaded_file() -> UploadedFile:
    """Uploaded file backed by an in-memory stream."""
    return UploadedFile(Stream.from_bytes(b"in memory"), 9, UploadError.OK, "memory.bin", "application/octet-stream")
