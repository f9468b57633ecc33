import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

from py_app_dev.core.logging import logger

from devsetup.domain import SetupConfig
from devsetup.exceptions import DevSetupError
from devsetup.installers import MacInstallers
from devsetup.progress import ProgressCallback
from devsetup.sequencer import BootstrapSequencer, Confirm, prompt_yes_no
from devsetup.shell import CommandRunner
from devsetup.vault import SESSION_VARIABLE, unlock_vault

CHEZMOI = ["nix", "shell", "nixpkgs#chezmoi", "-c", "chezmoi"]


class DevSetup:
    """Bootstraps a development machine and hands over to the dotfiles."""

    def __init__(
        self,
        config: SetupConfig | None = None,
        runner: CommandRunner | None = None,
        confirm: Confirm = prompt_yes_no,
        progress_callback: ProgressCallback | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """
        Initialize a bootstrap run.

        Args:
            config: Version pins and locations; defaults are used when omitted.
            runner: Executes external commands.
            confirm: Asks the operator for consent before each install.
            progress_callback: Optional callback for installer downloads.
            environ: Base environment for the dotfiles commands; a snapshot of ``os.environ`` when omitted.

        """
        self.config = config or SetupConfig()
        self.runner = runner or CommandRunner()
        self.sequencer = BootstrapSequencer(confirm)
        self.progress_callback = progress_callback
        self.environ = dict(os.environ if environ is None else environ)

    def run(self) -> None:
        """
        Install every missing tool, then apply the dotfiles and start the GPG agent.

        Raises:
            DevSetupError: On any fatal condition; nothing after the failing step runs.

        """
        scratch_dir = self.create_scratch_dir()
        installers = MacInstallers(self.config, self.runner, scratch_dir, self.progress_callback)
        self.sequencer.run(installers.checks())

        self.apply_dotfiles()
        self.start_gpg_agent()
        logger.info("Done!")

    def create_scratch_dir(self) -> Path:
        """Create the directory holding downloaded installer payloads. It is left in place afterwards."""
        try:
            scratch_dir = Path(tempfile.mkdtemp(prefix=self.config.scratch_prefix))
        except OSError as exc:
            raise DevSetupError("Failed creating a temporary directory; cannot continue") from exc
        logger.debug(f"Using scratch directory {scratch_dir}")
        return scratch_dir

    def apply_dotfiles(self) -> None:
        logger.info("Logging into bitwarden...")
        session = unlock_vault(self.runner, self.environ)
        env = {**self.environ, SESSION_VARIABLE: session}

        logger.info("Fetching dotfiles...")
        self.runner.run([*CHEZMOI, "init", self.config.dotfiles_repo], env=env)

        logger.info("Applying dotfiles...")
        self.runner.run([*CHEZMOI, "apply"], env=env)

    def start_gpg_agent(self) -> None:
        if self.runner.succeeds(["pgrep", "-x", "gpg-agent"]):
            logger.info("GPG agent already running")
            return
        logger.info("Initializing GPG...")
        self.runner.run(["gpg-agent", "--daemon"])
