"""Persistent environment edits: shell profile and Nix configuration."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from py_app_dev.core.logging import logger

_FEATURES_KEY = "experimental-features"


def enable_experimental_features(conf_path: Path, features: Iterable[str]) -> bool:
    """
    Make sure *features* are listed under ``experimental-features`` in a ``nix.conf``.

    An existing ``experimental-features`` line is extended in place; otherwise a new
    line is appended. Features already enabled are not repeated.

    Returns:
        True if the file was written.

    """
    wanted = list(dict.fromkeys(features))
    lines = conf_path.read_text().splitlines() if conf_path.exists() else []

    for index, line in enumerate(lines):
        key, sep, value = line.partition("=")
        if sep and key.strip() == _FEATURES_KEY:
            enabled = value.split()
            missing = [feature for feature in wanted if feature not in enabled]
            if not missing:
                logger.debug(f"Experimental features already enabled in {conf_path}")
                return False
            lines[index] = f"{_FEATURES_KEY} = {' '.join(enabled + missing)}"
            break
    else:
        lines.append(f"{_FEATURES_KEY} = {' '.join(wanted)}")

    logger.info(f"Adding experimental features: {' '.join(wanted)}")
    conf_path.parent.mkdir(parents=True, exist_ok=True)
    conf_path.write_text("\n".join(lines) + "\n")
    return True


def persist_profile_line(profile_path: Path, line: str) -> bool:
    """
    Append *line* to a shell profile unless it is already there.

    Returns:
        True if the file was written.

    """
    existing = profile_path.read_text() if profile_path.exists() else ""
    if line in existing.splitlines():
        logger.debug(f"{profile_path} already contains '{line}'")
        return False

    logger.info(f"Configuring environment in {profile_path}...")
    prefix = "" if not existing or existing.endswith("\n") else "\n"
    profile_path.parent.mkdir(parents=True, exist_ok=True)
    with profile_path.open("a") as fh:
        fh.write(f"{prefix}{line}\n")
    return True
