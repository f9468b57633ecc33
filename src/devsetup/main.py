"""CLI entry point for devsetup."""

import sys
from pathlib import Path
from typing import Annotated

import typer
from py_app_dev.core.exceptions import UserNotificationException
from py_app_dev.core.logging import logger, setup_logger, time_it

from devsetup import __version__
from devsetup.devsetup import DevSetup
from devsetup.domain import SetupConfig
from devsetup.integrity import verify_checksum_file, write_checksum_file
from devsetup.platform import ensure_supported_platform
from devsetup.progress import default_progress

package_name = "devsetup"

app = typer.Typer(
    name=package_name,
    help="Bootstrap a macOS development machine and apply the dotfiles.",
    add_completion=False,
)


@time_it("bootstrap")
def _bootstrap(config_file: Path | None) -> None:
    ensure_supported_platform()
    config = SetupConfig.load(config_file)
    DevSetup(config=config, progress_callback=default_progress.on_download).run()


@app.callback(invoke_without_command=True)
def bootstrap(
    ctx: typer.Context,
    version: bool = typer.Option(None, "--version", "-v", is_eager=True, help="Show version and exit."),
    config_file: Annotated[Path | None, typer.Option("-c", "--config", help="JSON file overriding the default pins and URLs.")] = None,
) -> None:
    """Install the missing tools, then apply the dotfiles. Runs when no command is given."""
    if version:
        typer.echo(f"{package_name} {__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is not None:
        return

    try:
        _bootstrap(config_file)
    except (UserNotificationException, OSError) as e:
        logger.error(str(e))
        raise typer.Exit(1) from e


@app.command(help="Write, or with --check verify, the companion .sha256 file of a script.")
def checksum(
    file: Annotated[Path, typer.Argument(help="Script to checksum.")],
    check: Annotated[bool, typer.Option("--check", help="Verify instead of writing.")] = False,
) -> None:
    try:
        if check:
            verify_checksum_file(file)
            logger.info(f"{file.name}: OK")
        else:
            logger.info(f"Wrote {write_checksum_file(file)}")
    except (UserNotificationException, OSError) as e:
        logger.error(str(e))
        raise typer.Exit(1) from e


def main() -> int:
    try:
        setup_logger()
        app()
        return 0
    except UserNotificationException as e:
        logger.error(f"{e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
