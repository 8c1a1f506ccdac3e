"""Command-line interface package for CommitCraft."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from commitcraft import __version__
from commitcraft.utils.log_setup import setup_logging, timestamped_log_path

from .commit_cmd import register_command as register_commit_command
from .config_cmd import register_command as register_config_command
from .hook_cmd import register_command as register_hook_command
from .pr_cmd import register_command as register_pr_command

logger = logging.getLogger(__name__)

# First existing file wins
ENV_FILES = (Path(".env.local"), Path(".env"))


def load_env_file(candidates: tuple[Path, ...] = ENV_FILES) -> Path | None:
	"""Load the first existing dotenv file so API keys can live next to the project."""
	for env_file in candidates:
		if env_file.is_file():
			load_dotenv(dotenv_path=env_file)
			logger.debug("Loaded environment variables from %s", env_file)
			return env_file
	return None


load_env_file()

app = typer.Typer(
	help=f"CommitCraft - Conventional commit messages from your diffs\n\nVersion: {__version__}",
	no_args_is_help=True,
	context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
	if value:
		typer.echo(f"CommitCraft version: {__version__}")
		raise typer.Exit


VerboseFlag = Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")]
SaveLogFlag = Annotated[
	bool,
	typer.Option("--save-log", help="Also write a debug log to logs/commitcraft_<timestamp>.log."),
]
VersionFlag = Annotated[
	bool | None,
	typer.Option("--version", help="Show version and exit.", callback=_version_callback, is_eager=True),
]


@app.callback(invoke_without_command=True)
def global_options(
	ctx: typer.Context,
	is_verbose: VerboseFlag = False,
	save_log: SaveLogFlag = False,
	_version: VersionFlag = None,
) -> None:
	"""Global CLI options and logging setup."""
	ctx.meta["is_verbose"] = is_verbose

	# The hook configures its own logging and must stay quiet
	if ctx.invoked_subcommand == "hook":
		return

	setup_logging(
		is_verbose=is_verbose or save_log,
		log_file_path=timestamped_log_path() if save_log else None,
	)


register_commit_command(app)
register_pr_command(app)
register_hook_command(app)
register_config_command(app)


def main() -> int:
	"""Run the CLI application."""
	return app()


if __name__ == "__main__":
	sys.exit(main())
