"""Companion ``.sha256`` files used to check a script before running it."""

from __future__ import annotations

from pathlib import Path

from devsetup.downloader import compute_sha256, parse_checksum, verify_sha256
from devsetup.exceptions import HashMismatchError


def checksum_path_for(file_path: Path) -> Path:
    return file_path.with_name(f"{file_path.name}.sha256")


def write_checksum_file(file_path: Path) -> Path:
    """Write ``<file>.sha256`` next to *file_path* in ``shasum -a 256`` format."""
    checksum_file = checksum_path_for(file_path)
    checksum_file.write_text(f"{compute_sha256(file_path)}  {file_path.name}\n")
    return checksum_file


def verify_checksum_file(file_path: Path) -> None:
    """
    Check *file_path* against its companion checksum file.

    Raises:
        HashMismatchError: If the companion file is missing or the digests differ.

    """
    checksum_file = checksum_path_for(file_path)
    if not checksum_file.exists():
        raise HashMismatchError(f"No checksum file found at {checksum_file}")
    verify_sha256(file_path, parse_checksum(checksum_file.read_text()))
