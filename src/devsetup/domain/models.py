"""Devsetup domain models for configuration and dependency checks."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from mashumaro.config import BaseConfig
from mashumaro.exceptions import InvalidFieldValue
from mashumaro.mixins.json import DataClassJSONMixin

from devsetup.exceptions import DevSetupError

Probe = Callable[[], bool]
Installer = Callable[[], None]


@dataclass(frozen=True)
class DevSetupJsonMixin(DataClassJSONMixin):
    """Shared mixin providing mashumaro config and JSON file I/O."""

    class Config(BaseConfig):
        omit_none = True

    @classmethod
    def from_json_file(cls, file_path: Path) -> Self:
        return cls.from_dict(json.loads(file_path.read_text()))

    def to_json_string(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def to_json_file(self, file_path: Path) -> None:
        file_path.write_text(self.to_json_string())


@dataclass(frozen=True)
class SetupConfig(DevSetupJsonMixin):
    """Version pins, URLs and file locations used by a bootstrap run."""

    dotfiles_repo: str = "https://github.com/jmgilman/dotfiles"
    nix_version: str = "2.6.1"
    nix_release_base: str = "https://releases.nixos.org"
    nix_darwin_url: str = "https://github.com/LnL7/nix-darwin/archive/master.tar.gz"
    home_manager_url: str = "https://github.com/nix-community/home-manager/archive/master.tar.gz"
    brew_repo: str = "https://raw.githubusercontent.com/Homebrew/install"
    brew_commit_sha: str = "e8114640740938c20cc41ffdbf07816b428afc49"
    brew_checksum: str = "98a0040bd3dc4b283780a010ad670f6441d5da9f32b2cb83d28af6ad484a2c72"
    brew_prefix: str = "/opt/homebrew"
    shell_profile: str = "~/.bash_profile"
    nix_conf: str = "~/.config/nix/nix.conf"
    experimental_features: tuple[str, ...] = ("nix-command", "flakes")
    scratch_prefix: str = "dev-setup-"

    @classmethod
    def load(cls, file_path: Path | None = None) -> SetupConfig:
        """
        Return the default configuration, overridden by *file_path* when given.

        Raises:
            DevSetupError: If the file is not valid JSON or a field has the wrong type.

        """
        if file_path is None:
            return cls()
        try:
            return cls.from_json_file(file_path)
        except (json.JSONDecodeError, InvalidFieldValue) as e:
            raise DevSetupError(f"Invalid configuration file {file_path}: {e}") from e

    @property
    def nix_install_url(self) -> str:
        return f"{self.nix_release_base}/nix/nix-{self.nix_version}/install"

    @property
    def nix_checksum_url(self) -> str:
        return f"{self.nix_install_url}.sha256"

    @property
    def brew_install_url(self) -> str:
        return f"{self.brew_repo}/{self.brew_commit_sha}/install.sh"

    @property
    def brew_shellenv_line(self) -> str:
        """Profile line activating the Homebrew environment in new shells."""
        return f'eval "$({self.brew_prefix}/bin/brew shellenv)"'

    @property
    def shell_profile_path(self) -> Path:
        return Path(self.shell_profile).expanduser()

    @property
    def nix_conf_path(self) -> Path:
        return Path(self.nix_conf).expanduser()


@dataclass
class DependencyCheck:
    """A tool that must be present before the dotfiles can be applied."""

    #: Human readable label used in log messages and prompts
    name: str
    #: Returns True when the dependency is already satisfied
    probe: Probe
    #: Installs the dependency, raising on failure
    installer: Installer
    #: Optional deeper check run once presence is ensured
    health_probe: Probe | None = None
