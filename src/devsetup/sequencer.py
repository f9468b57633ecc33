"""Ordered dependency checks with consent-gated installation."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

import typer
from py_app_dev.core.logging import logger

from devsetup.domain import DependencyCheck
from devsetup.exceptions import HealthCheckError, UserDeclinedError

Confirm = Callable[[str], bool]

_AFFIRMATIVE = re.compile(r"^[Yy]$")

RERUN_GUIDANCE = "Please run this installer script again to continue"


def is_affirmative(reply: str) -> bool:
    """Only a single ``y`` or ``Y`` counts as consent."""
    return bool(_AFFIRMATIVE.match(reply))


def prompt_yes_no(message: str) -> bool:
    """Ask on the terminal and interpret the reply with ``is_affirmative``."""
    reply = typer.prompt(f"{message} [y/n]", default="", show_default=False, prompt_suffix=" ")
    typer.echo("")
    return is_affirmative(reply)


class BootstrapSequencer:
    """Walks dependency checks in order, installing what is missing."""

    def __init__(self, confirm: Confirm = prompt_yes_no) -> None:
        self.confirm = confirm

    def run(self, checks: Iterable[DependencyCheck]) -> None:
        """
        Ensure every check is satisfied, in order.

        Raises:
            UserDeclinedError: The operator refused an install. Later checks do not run.
            HealthCheckError: A health probe failed; the operator must re-run the bootstrap.

        """
        for check in checks:
            installed = self.ensure_present(check)
            self.ensure_healthy(check, already_installed=installed)

    def ensure_present(self, check: DependencyCheck) -> bool:
        """
        Install *check* if its probe fails.

        Returns:
            True if the installer ran.

        """
        if check.probe():
            logger.info(f"{check.name} detected, skipping install")
            return False
        self.install(check)
        return True

    def ensure_healthy(self, check: DependencyCheck, already_installed: bool) -> None:
        """Run the deep health probe, remediating at most once and never looping."""
        if check.health_probe is None:
            return
        if check.health_probe():
            logger.info(f"{check.name} is healthy, continuing")
            return
        logger.error(f"{check.name} reports an unhealthy installation")
        if not already_installed:
            self.install(check)
        raise HealthCheckError(RERUN_GUIDANCE)

    def install(self, check: DependencyCheck) -> None:
        logger.info(f"It appears that {check.name} is not installed and is required to continue.")
        if not self.confirm("Would you like to install it?"):
            raise UserDeclinedError(f"Installation of {check.name} declined; cannot continue")
        logger.info(f"Installing {check.name}...")
        check.installer()
        logger.info(f"{check.name} was successfully installed")
