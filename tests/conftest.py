"""Shared pytest fixtures for devsetup tests."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from devsetup.domain import SetupConfig
from devsetup.installers import MacInstallers
from tests.helpers import FakeRunner

PROVISIONED_COMMANDS = {"nix", "darwin-rebuild", "bw", "brew"}
PROVISIONED_PROBES = {
    "/usr/bin/xcode-select -p",
    "/usr/bin/pgrep oahd",
    "nix doctor",
    "pgrep -x gpg-agent",
}


@dataclass
class SetupEnv:
    """A bootstrap environment whose files live in a temporary directory."""

    home: Path
    scratch_dir: Path
    config: SetupConfig
    runner: FakeRunner

    @property
    def installers(self) -> MacInstallers:
        return MacInstallers(self.config, self.runner, self.scratch_dir)


@pytest.fixture
def setup_env(tmp_path: Path) -> SetupEnv:
    """Provide a config whose profile and nix.conf point into a temporary home."""
    home = tmp_path / "home"
    home.mkdir()
    scratch_dir = tmp_path / "scratch"
    scratch_dir.mkdir()
    config = SetupConfig(
        shell_profile=str(home / ".bash_profile"),
        nix_conf=str(home / ".config" / "nix" / "nix.conf"),
    )
    return SetupEnv(home=home, scratch_dir=scratch_dir, config=config, runner=FakeRunner())


@pytest.fixture
def provisioned_runner() -> FakeRunner:
    """A runner for a machine where every tool is installed and the vault is locked."""
    return FakeRunner(
        commands=set(PROVISIONED_COMMANDS),
        probes=set(PROVISIONED_PROBES),
        outputs={"bw status": '{"status": "locked"}', "bw unlock --raw": "session-token\n"},
    )
