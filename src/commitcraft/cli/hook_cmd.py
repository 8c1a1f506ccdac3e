"""Commands for running and installing the prepare-commit-msg hook."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Annotated

import asyncer
import typer
from rich.console import Console

logger = logging.getLogger(__name__)
console = Console()

HOOK_NAME = "prepare-commit-msg"
HOOK_MARKER = "# Installed by commitcraft"
HOOK_SCRIPT = f"""#!/bin/sh
{HOOK_MARKER}
commitcraft hook "$@" || true
"""

MsgFileArg = Annotated[Path, typer.Argument(help="Commit message file passed by Git")]
SourceArg = Annotated[str | None, typer.Argument(help="Commit source passed by Git")]
ShaArg = Annotated[str | None, typer.Argument(help="Commit SHA passed by Git for amends")]
ForceFlag = Annotated[bool, typer.Option("--force", "-f", help="Replace a hook not installed by commitcraft")]


def hook_path(repo_root: Path) -> Path:
	"""Return the path of the prepare-commit-msg hook, honouring ``core.hooksPath``."""
	from commitcraft.git.utils import GitError, run_git_command

	try:
		hooks_dir = run_git_command(["git", "rev-parse", "--git-path", "hooks"], repo_root).strip()
	except GitError:
		hooks_dir = ".git/hooks"
	hooks = Path(hooks_dir)
	if not hooks.is_absolute():
		hooks = repo_root / hooks
	return hooks / HOOK_NAME


def install_hook(repo_root: Path, force: bool = False) -> Path:
	"""
	Write the hook script into the repository.

	Raises:
	    FileExistsError: If a foreign hook exists and ``force`` is not set

	"""
	path = hook_path(repo_root)
	if path.exists() and HOOK_MARKER not in path.read_text(encoding="utf-8", errors="replace") and not force:
		msg = f"{path} already exists and was not installed by commitcraft"
		raise FileExistsError(msg)

	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(HOOK_SCRIPT, encoding="utf-8")
	path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
	return path


def uninstall_hook(repo_root: Path) -> bool:
	"""Remove the hook if commitcraft installed it. Returns True when a file was removed."""
	path = hook_path(repo_root)
	if not path.exists() or HOOK_MARKER not in path.read_text(encoding="utf-8", errors="replace"):
		return False
	path.unlink()
	return True


def register_command(app: typer.Typer) -> None:
	"""Register the hook commands with the CLI app."""

	@app.command(name="hook")
	@asyncer.runnify
	async def hook_command(
		msg_file: MsgFileArg,
		source: SourceArg = None,
		sha: ShaArg = None,
	) -> None:
		"""Run the prepare-commit-msg hook. Always exits successfully."""
		await _hook_command_impl(msg_file, source, sha)

	@app.command(name="install-hook")
	def install_hook_command(force: ForceFlag = False) -> None:
		"""Install the prepare-commit-msg hook in the current repository."""
		from commitcraft.git.utils import GitError, get_repo_root
		from commitcraft.utils.cli_utils import exit_with_error

		try:
			path = install_hook(get_repo_root(Path.cwd()), force=force)
		except (GitError, FileExistsError, OSError) as e:
			exit_with_error(str(e), exception=e)
		else:
			console.print(f"[green]Installed {path}[/green]")

	@app.command(name="uninstall-hook")
	def uninstall_hook_command() -> None:
		"""Remove the prepare-commit-msg hook installed by commitcraft."""
		from commitcraft.git.utils import GitError, get_repo_root
		from commitcraft.utils.cli_utils import exit_with_error

		try:
			removed = uninstall_hook(get_repo_root(Path.cwd()))
		except (GitError, OSError) as e:
			exit_with_error(str(e), exception=e)
		else:
			console.print("[green]Hook removed[/green]" if removed else "[yellow]No commitcraft hook installed[/yellow]")


async def _hook_command_impl(msg_file: Path, source: str | None, sha: str | None) -> None:
	"""
	Actual implementation of the hook command.

	Failures are logged and never propagate: a broken hook must not block commits.

	"""
	from commitcraft.config import ConfigLoader
	from commitcraft.git.commit_generator.hook import HOOK_DEBUG_ENV, run_prepare_commit_msg
	from commitcraft.git.utils import get_repo_root
	from commitcraft.utils.log_setup import setup_logging

	setup_logging(is_verbose=bool(os.environ.get(HOOK_DEBUG_ENV)))
	logger.debug("prepare-commit-msg: file=%s source=%s sha=%s", msg_file, source, sha)

	try:
		repo_root = get_repo_root(msg_file.resolve().parent)
		config = ConfigLoader.get_instance(repo_root=repo_root).get
		await run_prepare_commit_msg(msg_file, source, repo_root, config)
	except Exception:
		logger.debug("commitcraft hook failed", exc_info=True)
