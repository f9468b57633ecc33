"""Installer payload downloading and SHA256 verification."""

from __future__ import annotations

import hashlib
from pathlib import Path
from urllib.request import url2pathname

import requests
from py_app_dev.core.logging import logger

from devsetup.exceptions import DownloadError, HashMismatchError
from devsetup.progress import ProgressCallback

_HASH_CHUNK_SIZE = 8192
_DOWNLOAD_TIMEOUT = 60


def download_file(
    url: str,
    dest: Path,
    name: str = "",
    progress_callback: ProgressCallback | None = None,
) -> Path:
    """
    Download the file at *url* to *dest*.

    Args:
        url: URL to download from.
        dest: Local file path to write to.
        name: Payload name passed to the progress callback.
        progress_callback: Optional callback invoked on each chunk.

    Returns:
        The *dest* path.

    Raises:
        DownloadError: On HTTP or network failures.

    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    if url.startswith("file://"):
        src = Path(url2pathname(url[7:]))
        file_size = src.stat().st_size
        downloaded = 0
        with src.open("rb") as src_fh, dest.open("wb") as dst_fh:
            while chunk := src_fh.read(_HASH_CHUNK_SIZE):
                dst_fh.write(chunk)
                downloaded += len(chunk)
                if progress_callback:
                    progress_callback(name, downloaded, file_size)
        return dest
    _download_via_http(url, dest, name, progress_callback)
    return dest


def _download_via_http(
    url: str,
    dest: Path,
    name: str,
    progress_callback: ProgressCallback | None,
) -> None:
    try:
        with requests.get(url, stream=True, timeout=_DOWNLOAD_TIMEOUT) as response:
            response.raise_for_status()
            content_length = response.headers.get("Content-Length")
            total: int | None = int(content_length) if content_length else None
            downloaded = 0
            with dest.open("wb") as fh:
                for chunk in response.iter_content(chunk_size=_HASH_CHUNK_SIZE):
                    fh.write(chunk)
                    downloaded += len(chunk)
                    if progress_callback:
                        progress_callback(name, downloaded, total)
            # without Content-Length the bar only learns the size once the stream ends
            if progress_callback and total is None:
                progress_callback(name, downloaded, downloaded)
    except requests.RequestException as exc:
        raise DownloadError(f"Failed to download {url}: {exc}") from exc


def fetch_text(url: str) -> str:
    """Return the body of a small text resource such as a published checksum file."""
    try:
        response = requests.get(url, timeout=_DOWNLOAD_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise DownloadError(f"Failed to fetch {url}: {exc}") from exc
    return response.text


def parse_checksum(text: str) -> str:
    """
    Extract the hex digest from the contents of a ``.sha256`` file.

    Accepts both a bare digest and the ``<digest>  <filename>`` format written by ``shasum``.
    """
    tokens = text.split()
    if not tokens:
        raise HashMismatchError("Checksum file is empty")
    return tokens[0].lower()


def compute_sha256(file_path: Path) -> str:
    sha256 = hashlib.sha256()
    with file_path.open("rb") as fh:
        while chunk := fh.read(_HASH_CHUNK_SIZE):
            sha256.update(chunk)
    return sha256.hexdigest()


def verify_sha256(file_path: Path, expected_hash: str) -> None:
    """
    Verify *file_path* matches *expected_hash*.

    Raises:
        HashMismatchError: When the computed hash differs from *expected_hash*.

    """
    expected = expected_hash.strip().lower()
    actual = compute_sha256(file_path)
    if actual != expected:
        raise HashMismatchError(f"SHA256 mismatch for {file_path.name}: expected {expected}, got {actual}")


def download_verified(
    url: str,
    sha256: str,
    dest_dir: Path,
    filename: str,
    progress_callback: ProgressCallback | None = None,
) -> Path:
    """
    Download *url* into *dest_dir* and verify it before handing it out.

    Returns:
        Path to the verified payload.

    Raises:
        DownloadError: When the download fails.
        HashMismatchError: When the payload does not match *sha256*. The file is removed.

    """
    dest = dest_dir / filename
    logger.info(f"Downloading install script from {url}...")
    download_file(url, dest, name=filename, progress_callback=progress_callback)
    logger.info("Validating checksum...")
    try:
        verify_sha256(dest, sha256)
    except HashMismatchError as exc:
        dest.unlink(missing_ok=True)
        raise HashMismatchError(f"Checksum validation failed; cannot continue. {exc}") from exc
    return dest
