"""Synchronous execution of external commands."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from py_app_dev.core.logging import logger

from devsetup.exceptions import CommandError


class CommandRunner:
    """Runs external commands and turns failures into ``CommandError``."""

    def run(
        self,
        args: Sequence[str | Path],
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """
        Run a command with the terminal attached.

        Raises:
            CommandError: If the executable is missing or the command exits non-zero.

        """
        self._execute(args, cwd=cwd, env=env)

    def output(
        self,
        args: Sequence[str | Path],
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> str:
        """
        Run a command and return its standard output.

        Standard input and standard error stay attached to the terminal so interactive prompts still work.
        """
        completed = self._execute(args, cwd=cwd, env=env, stdout=subprocess.PIPE)
        return completed.stdout

    def succeeds(self, args: Sequence[str | Path]) -> bool:
        """Run a command silently and report whether it exited with status 0."""
        cmd = [str(arg) for arg in args]
        logger.debug(f"Probing: {' '.join(cmd)}")
        try:
            completed = subprocess.run(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, check=False)  # noqa: S603
        except OSError:
            return False
        return completed.returncode == 0

    def has_command(self, name: str) -> bool:
        """Check whether *name* resolves to an executable on ``PATH``."""
        return shutil.which(name) is not None

    def _execute(
        self,
        args: Sequence[str | Path],
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        stdout: int | None = None,
    ) -> subprocess.CompletedProcess[str]:
        cmd = [str(arg) for arg in args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            completed = subprocess.run(  # noqa: S603
                cmd,
                cwd=cwd,
                env=dict(env) if env is not None else None,
                stdout=stdout,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise CommandError(f"Failed to run '{cmd[0]}': {exc}") from exc
        if completed.returncode != 0:
            raise CommandError(f"Command '{' '.join(cmd)}' failed with exit code {completed.returncode}")
        return completed
