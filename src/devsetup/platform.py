"""Platform detection utilities for devsetup."""

from __future__ import annotations

import platform
import sys

from py_app_dev.core.logging import logger

from devsetup.exceptions import DevSetupError

_OS_MAP: dict[str, str] = {
    "win32": "windows",
    "linux": "linux",
    "darwin": "macos",
}

_ARCH_MAP: dict[str, str] = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
}


def get_current_platform() -> tuple[str, str]:
    """
    Return the current ``(os, arch)`` using devsetup naming conventions.

    Raises:
        ValueError: If the current OS or architecture is not recognized.

    """
    raw_os = sys.platform
    raw_arch = platform.machine().lower()
    current_os = _OS_MAP.get(raw_os)
    if current_os is None:
        raise ValueError(f"Unsupported OS: {raw_os!r}. Supported: {sorted(_OS_MAP)}")
    current_arch = _ARCH_MAP.get(raw_arch)
    if current_arch is None:
        raise ValueError(f"Unsupported architecture: {raw_arch!r}. Supported: {sorted(_ARCH_MAP)}")
    return current_os, current_arch


def ensure_supported_platform() -> None:
    """
    Refuse to bootstrap anything other than macOS.

    Raises:
        DevSetupError: On any other operating system.

    """
    try:
        current_os, current_arch = get_current_platform()
    except ValueError as exc:
        raise DevSetupError(str(exc)) from exc
    if current_os != "macos":
        raise DevSetupError(f"devsetup only supports macOS, not {current_os}")
    if current_arch != "aarch64":
        logger.warning(f"Running on {current_arch}; Rosetta and Homebrew paths assume Apple Silicon")
