"""Unit tests for the downloader module."""

from __future__ import annotations

import hashlib
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from devsetup.downloader import (
    DownloadError,
    HashMismatchError,
    download_file,
    download_verified,
    fetch_text,
    parse_checksum,
    verify_sha256,
)

SAMPLE_CONTENT = b"#!/bin/sh\necho hello devsetup\n"
SAMPLE_SHA256 = hashlib.sha256(SAMPLE_CONTENT).hexdigest()


def _mock_requests_get(content_length: str | None = None) -> MagicMock:
    """Create a mock requests.get that streams SAMPLE_CONTENT."""
    mock_response = MagicMock()
    mock_response.headers = {"Content-Length": content_length} if content_length else {}
    mock_response.iter_content = lambda chunk_size: iter([SAMPLE_CONTENT])
    mock_response.raise_for_status = MagicMock()
    mock_response.__enter__ = lambda s: s
    mock_response.__exit__ = MagicMock(return_value=False)
    return MagicMock(return_value=mock_response)


# -- download_file -----------------------------------------------------------


def test_download_file_success(tmp_path: Path) -> None:
    dest = tmp_path / "sub" / "install.sh"

    with patch("devsetup.downloader.requests.get", _mock_requests_get()):
        result = download_file("https://example.com/install.sh", dest)

    assert result == dest
    assert dest.read_bytes() == SAMPLE_CONTENT


def test_download_file_network_error(tmp_path: Path) -> None:
    dest = tmp_path / "install.sh"

    with (
        patch("devsetup.downloader.requests.get", side_effect=requests.RequestException("connection refused")),
        pytest.raises(DownloadError, match="connection refused"),
    ):
        download_file("https://example.com/install.sh", dest)


def test_download_file_from_file_url(tmp_path: Path) -> None:
    src = tmp_path / "local.sh"
    src.write_bytes(SAMPLE_CONTENT)
    dest = tmp_path / "copy.sh"

    download_file(src.as_uri(), dest)

    assert dest.read_bytes() == SAMPLE_CONTENT


# -- fetch_text / parse_checksum ---------------------------------------------


def test_fetch_text_returns_body() -> None:
    response = MagicMock(text=f"{SAMPLE_SHA256}\n")

    with patch("devsetup.downloader.requests.get", return_value=response):
        assert fetch_text("https://example.com/install.sha256") == f"{SAMPLE_SHA256}\n"


def test_fetch_text_http_error() -> None:
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError("404 Not Found")

    with (
        patch("devsetup.downloader.requests.get", return_value=response),
        pytest.raises(DownloadError, match="404"),
    ):
        fetch_text("https://example.com/install.sha256")


@pytest.mark.parametrize(
    "text",
    [f"{SAMPLE_SHA256}\n", f"{SAMPLE_SHA256}  install\n", f"  {SAMPLE_SHA256.upper()}"],
    ids=["bare", "shasum-format", "uppercase"],
)
def test_parse_checksum(text: str) -> None:
    assert parse_checksum(text) == SAMPLE_SHA256


def test_parse_checksum_empty() -> None:
    with pytest.raises(HashMismatchError, match="empty"):
        parse_checksum("\n")


# -- verify_sha256 -----------------------------------------------------------


def test_verify_sha256_valid(tmp_path: Path) -> None:
    path = tmp_path / "file.bin"
    path.write_bytes(SAMPLE_CONTENT)

    verify_sha256(path, SAMPLE_SHA256)
    verify_sha256(path, f" {SAMPLE_SHA256.upper()}\n")


def test_verify_sha256_mismatch(tmp_path: Path) -> None:
    path = tmp_path / "file.bin"
    path.write_bytes(SAMPLE_CONTENT)

    with pytest.raises(HashMismatchError, match="SHA256 mismatch"):
        verify_sha256(path, "bad" * 16)


# -- download_verified -------------------------------------------------------


def test_download_verified(tmp_path: Path) -> None:
    with patch("devsetup.downloader.requests.get", _mock_requests_get()):
        result = download_verified("https://example.com/install.sh", SAMPLE_SHA256, tmp_path, "nix.sh")

    assert result == tmp_path / "nix.sh"
    assert result.read_bytes() == SAMPLE_CONTENT


def test_download_verified_mismatch_removes_payload(tmp_path: Path) -> None:
    with (
        patch("devsetup.downloader.requests.get", _mock_requests_get()),
        pytest.raises(HashMismatchError, match="Checksum validation failed"),
    ):
        download_verified("https://example.com/install.sh", "0" * 64, tmp_path, "nix.sh")

    assert not (tmp_path / "nix.sh").exists()


# -- progress callback -------------------------------------------------------


def test_progress_callback_invoked_with_total(tmp_path: Path) -> None:
    dest = tmp_path / "install.sh"
    calls: list[tuple[str, int, int | None]] = []

    with patch("devsetup.downloader.requests.get", _mock_requests_get(content_length=str(len(SAMPLE_CONTENT)))):
        download_file(
            "https://example.com/install.sh",
            dest,
            name="brew.sh",
            progress_callback=lambda name, downloaded, total: calls.append((name, downloaded, total)),
        )

    assert len(calls) >= 1
    assert all(name == "brew.sh" for name, _, _ in calls)
    _last_name, last_downloaded, last_total = calls[-1]
    assert last_downloaded == len(SAMPLE_CONTENT)
    assert last_total == len(SAMPLE_CONTENT)


def test_progress_callback_without_content_length(tmp_path: Path) -> None:
    dest = tmp_path / "install.sh"
    calls: list[tuple[str, int, int | None]] = []

    with patch("devsetup.downloader.requests.get", _mock_requests_get()):
        download_file(
            "https://example.com/install.sh",
            dest,
            name="brew.sh",
            progress_callback=lambda name, downloaded, total: calls.append((name, downloaded, total)),
        )

    assert calls[0] == ("brew.sh", len(SAMPLE_CONTENT), None)
    assert calls[-1] == ("brew.sh", len(SAMPLE_CONTENT), len(SAMPLE_CONTENT))
