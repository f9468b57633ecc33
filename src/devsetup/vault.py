"""Bitwarden vault unlocking for the dotfiles templates."""

from __future__ import annotations

import json
from collections.abc import Mapping

from py_app_dev.core.logging import logger

from devsetup.exceptions import SecretStoreError
from devsetup.shell import CommandRunner

SESSION_VARIABLE = "BW_SESSION"


def vault_status(runner: CommandRunner) -> str:
    """Return the ``status`` field reported by ``bw status``."""
    raw = runner.output(["bw", "status"])
    try:
        return str(json.loads(raw)["status"])
    except (json.JSONDecodeError, KeyError, TypeError) as exc:
        raise SecretStoreError(f"Unexpected output from 'bw status': {raw.strip()!r}") from exc


def unlock_vault(runner: CommandRunner, environ: Mapping[str, str]) -> str:
    """
    Unlock or log into the vault and return the session token.

    The token is returned to the caller and never exported into the process environment.

    Args:
        runner: Runs the ``bw`` CLI.
        environ: Environment consulted for an existing session when the vault is already unlocked.

    Raises:
        SecretStoreError: If the vault status is unknown or no session can be obtained.

    """
    status = vault_status(runner)
    logger.debug(f"Bitwarden status: {status}")
    if status == "locked":
        session = runner.output(["bw", "unlock", "--raw"])
    elif status == "unauthenticated":
        session = runner.output(["bw", "login", "--raw"])
    elif status == "unlocked":
        session = environ.get(SESSION_VARIABLE, "").strip()
        if not session:
            raise SecretStoreError(f"Bitwarden vault is unlocked but {SESSION_VARIABLE} is not set")
        return session
    else:
        raise SecretStoreError(f"Unknown bitwarden status: {status}")

    session = session.strip()
    if not session:
        raise SecretStoreError(f"Bitwarden did not return a session for status: {status}")
    return session
