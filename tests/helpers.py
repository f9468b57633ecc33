"""Reusable test doubles for commands and dependency checks."""

from __future__ import annotations

import hashlib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from unittest.mock import MagicMock

from devsetup.domain import DependencyCheck
from devsetup.exceptions import CommandError
from devsetup.shell import CommandRunner


def sha256_of(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _key(args: Sequence[str | Path]) -> str:
    return " ".join(str(arg) for arg in args)


@dataclass
class RecordedCall:
    args: str
    cwd: Path | None = None
    env: Mapping[str, str] | None = None


class FakeRunner(CommandRunner):
    """
    Command runner that records calls instead of spawning processes.

    Args:
        commands: Executables reported as present on PATH.
        probes: Command lines (space joined) that exit 0 when probed.
        outputs: Standard output returned for a command line.
        failing: Command lines that fail with ``CommandError``.

    """

    def __init__(
        self,
        commands: set[str] | None = None,
        probes: set[str] | None = None,
        outputs: dict[str, str] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.commands = commands or set()
        self.probes = probes or set()
        self.outputs = outputs or {}
        self.failing = failing or set()
        self.calls: list[RecordedCall] = []
        self.probed: list[str] = []

    def run(self, args: Sequence[str | Path], cwd: Path | None = None, env: Mapping[str, str] | None = None) -> None:
        self._record(args, cwd, env)

    def output(self, args: Sequence[str | Path], cwd: Path | None = None, env: Mapping[str, str] | None = None) -> str:
        self._record(args, cwd, env)
        return self.outputs.get(_key(args), "")

    def succeeds(self, args: Sequence[str | Path]) -> bool:
        self.probed.append(_key(args))
        return _key(args) in self.probes

    def has_command(self, name: str) -> bool:
        self.probed.append(name)
        return name in self.commands

    @property
    def commands_run(self) -> list[str]:
        return [call.args for call in self.calls]

    def _record(self, args: Sequence[str | Path], cwd: Path | None, env: Mapping[str, str] | None) -> None:
        key = _key(args)
        self.calls.append(RecordedCall(args=key, cwd=cwd, env=env))
        if key in self.failing:
            raise CommandError(f"Command '{key}' failed with exit code 1")


@dataclass
class FakeCheck:
    """A dependency check whose probes are fixed values and whose installer is a mock."""

    name: str
    present: bool = True
    healthy: bool | None = None
    installer: MagicMock = field(default_factory=MagicMock)

    def build(self) -> DependencyCheck:
        health_probe = None if self.healthy is None else (lambda: bool(self.healthy))
        return DependencyCheck(self.name, lambda: self.present, self.installer, health_probe=health_probe)


class ScriptedConfirm:
    """Answers consent prompts from a list of replies and records the questions."""

    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.questions: list[str] = []

    def __call__(self, message: str) -> bool:
        self.questions.append(message)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message}")
        return self.answers.pop(0)
