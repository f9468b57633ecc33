"""Installers for the baseline macOS development tools."""

from __future__ import annotations

import re
from pathlib import Path

from py_app_dev.core.logging import logger

from devsetup.domain import DependencyCheck, SetupConfig
from devsetup.downloader import download_verified, fetch_text, parse_checksum
from devsetup.environment import enable_experimental_features, persist_profile_line
from devsetup.progress import ProgressCallback
from devsetup.shell import CommandRunner

SUDO = "/usr/bin/sudo"
SOFTWAREUPDATE = "/usr/sbin/softwareupdate"
XCODE_SELECT = "/usr/bin/xcode-select"
PGREP = "/usr/bin/pgrep"
CLT_PLACEHOLDER = Path("/tmp/.com.apple.dt.CommandLineTools.installondemand.in-progress")  # noqa: S108
CLT_DIR = "/Library/Developer/CommandLineTools"
SYSTEM_NIX_CONF = Path("/etc/nix/nix.conf")

_CLT_LABEL = re.compile(r"^\s*\*\s*(?:Label:\s*)?(?P<label>.*Command Line Tools.*?)\s*$")


def _natural_key(text: str) -> list[int | str]:
    return [int(part) if part.isdigit() else part for part in re.split(r"(\d+)", text)]


def parse_clt_label(listing: str) -> str | None:
    """
    Pick the newest Command Line Tools label from ``softwareupdate -l`` output.

    Only entries starting with ``*`` are labels; the indented lines below them are titles.
    """
    labels = [match.group("label") for match in map(_CLT_LABEL.match, listing.splitlines()) if match]
    if not labels:
        return None
    return max(labels, key=_natural_key)


class MacInstallers:
    """Probes and installers for every tool the dotfiles rely on."""

    def __init__(
        self,
        config: SetupConfig,
        runner: CommandRunner,
        scratch_dir: Path,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        self.config = config
        self.runner = runner
        self.scratch_dir = scratch_dir
        self.progress_callback = progress_callback

    def checks(self) -> list[DependencyCheck]:
        """Return the dependency checks in the order they must run."""
        return [
            # xcode is needed for building most software from source
            DependencyCheck("xcode", lambda: self.runner.succeeds([XCODE_SELECT, "-p"]), self.install_xcode),
            # rosetta is needed for running x86_64 applications
            DependencyCheck("rosetta", lambda: self.runner.succeeds([PGREP, "oahd"]), self.install_rosetta),
            DependencyCheck(
                "nix",
                lambda: self.runner.has_command("nix"),
                self.install_nix,
                health_probe=lambda: self.runner.succeeds(["nix", "doctor"]),
            ),
            # nix-darwin puts darwin-rebuild on PATH
            DependencyCheck("nix-darwin", lambda: self.runner.has_command("darwin-rebuild"), self.install_nix_darwin),
            DependencyCheck("bitwarden-cli", lambda: self.runner.has_command("bw"), self.install_bitwarden_cli),
            DependencyCheck("brew", lambda: self.runner.has_command("brew"), self.install_brew),
        ]

    def install_xcode(self) -> None:
        logger.info("Searching online for the Command Line Tools")
        # the placeholder makes softwareupdate list the Command Line Tools
        self.runner.run([SUDO, "/usr/bin/touch", CLT_PLACEHOLDER])
        try:
            label = parse_clt_label(self.runner.output([SOFTWAREUPDATE, "-l"]))
            if label:
                logger.info(f"Installing {label}")
                self.runner.run([SUDO, SOFTWAREUPDATE, "-i", label])
                self.runner.run([SUDO, XCODE_SELECT, "--switch", CLT_DIR])
            else:
                logger.warning("No Command Line Tools found by softwareupdate")
        finally:
            self.runner.run([SUDO, "/bin/rm", "-f", CLT_PLACEHOLDER])

    def install_rosetta(self) -> None:
        self.runner.run([SOFTWAREUPDATE, "--install-rosetta"])

    def install_nix(self) -> None:
        sha256 = parse_checksum(fetch_text(self.config.nix_checksum_url))
        script = download_verified(self.config.nix_install_url, sha256, self.scratch_dir, "nix.sh", self.progress_callback)

        logger.info("Running nix installer...")
        self.runner.run(["bash", script])
        logger.info("Nix installed successfully")

        # nix shell needs nix-command, and the development flakes need flakes
        enable_experimental_features(self.config.nix_conf_path, self.config.experimental_features)

    def install_nix_darwin(self) -> None:
        # nix-darwin refuses to install over an existing global nix.conf
        if SYSTEM_NIX_CONF.exists():
            self.runner.run([SUDO, "mv", SYSTEM_NIX_CONF, SYSTEM_NIX_CONF.with_name("nix.conf.backup")])

        logger.info("Building nix-darwin installer...")
        self.runner.run(["nix-build", self.config.nix_darwin_url, "-A", "installer"], cwd=self.scratch_dir)

        logger.info("Running nix-darwin installer...")
        self.runner.run([self.scratch_dir / "result" / "bin" / "darwin-installer"])

        # nix-darwin manages nix itself
        logger.info("Removing redundant nix version...")
        self.runner.run([SUDO, "-i", "nix-env", "-e", "nix"])

        logger.info("Adding home-manager channel...")
        self.runner.run(["nix-channel", "--add", self.config.home_manager_url, "home-manager"])
        self.runner.run(["nix-channel", "--update"])

    def install_bitwarden_cli(self) -> None:
        self.runner.run(["nix-env", "-i", "bitwarden-cli"])

    def install_brew(self) -> None:
        script = download_verified(
            self.config.brew_install_url, self.config.brew_checksum, self.scratch_dir, "brew.sh", self.progress_callback
        )

        logger.info("Running brew installer...")
        self.runner.run(["bash", script])

        persist_profile_line(self.config.shell_profile_path, self.config.brew_shellenv_line)
