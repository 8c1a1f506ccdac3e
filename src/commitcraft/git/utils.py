"""Git utilities for CommitCraft."""

from __future__ import annotations

import logging
import subprocess
from enum import Enum
from pathlib import Path

from commitcraft.exceptions import GitError, NoChangesError

logger = logging.getLogger(__name__)

__all__ = [
	"ChangeScope",
	"GitError",
	"NoChangesError",
	"commit_with_message",
	"get_current_branch",
	"get_diff",
	"get_name_status",
	"get_repo_root",
	"has_changes",
	"run_git_command",
]


class ChangeScope(str, Enum):
	"""Which pending changes to describe."""

	STAGED = "staged"
	UNSTAGED = "unstaged"
	ALL = "all"


def run_git_command(command: list[str], cwd: Path | str | None = None) -> str:
	"""
	Run a Git command and return its output.

	Args:
	    command: Git command to run
	    cwd: Working directory (optional)

	Returns:
	    Command output as string

	Raises:
	    GitError: If the command fails

	"""
	try:
		result = subprocess.run(  # noqa: S603
			command,
			cwd=cwd,
			capture_output=True,
			text=True,
			encoding="utf-8",
			errors="replace",
			check=True,
		)
	except FileNotFoundError as e:
		msg = "Git executable not found"
		raise GitError(msg) from e
	except subprocess.CalledProcessError as e:
		error_msg = f"Git command failed: {' '.join(command)}\nError: {e.stderr}"
		logger.debug(error_msg)
		raise GitError(error_msg) from e
	else:
		return result.stdout


def get_repo_root(path: Path | None = None) -> Path:
	"""
	Get the root directory of the Git repository.

	Raises:
	    GitError: If not in a Git repository

	"""
	try:
		result = run_git_command(["git", "rev-parse", "--show-toplevel"], path)
		return Path(result.strip())
	except GitError as e:
		msg = "Not in a Git repository"
		raise GitError(msg) from e


def _scope_flags(scope: ChangeScope) -> list[str]:
	if scope is ChangeScope.STAGED:
		return ["--cached"]
	if scope is ChangeScope.UNSTAGED:
		return []
	msg = f"Scope {scope.value!r} must be split into staged and unstaged queries"
	raise ValueError(msg)


def get_diff(scope: ChangeScope, cwd: Path | None = None) -> str:
	"""Return the raw unified diff for a single (staged or unstaged) scope."""
	return run_git_command(["git", "diff", *_scope_flags(scope)], cwd)


def get_name_status(scope: ChangeScope, cwd: Path | None = None) -> str:
	"""Return the ``--name-status`` summary for a single (staged or unstaged) scope."""
	return run_git_command(["git", "diff", *_scope_flags(scope), "--name-status"], cwd)


def has_changes(scope: ChangeScope, cwd: Path | None = None) -> bool:
	"""
	Check whether there are pending changes in ``scope``.

	Args:
	    scope: Change scope to inspect
	    cwd: Repository path

	Returns:
	    True if at least one file changed

	"""
	scopes = [ChangeScope.STAGED, ChangeScope.UNSTAGED] if scope is ChangeScope.ALL else [scope]
	for single in scopes:
		names = run_git_command(["git", "diff", *_scope_flags(single), "--name-only"], cwd)
		if names.strip():
			return True
	return False


def get_current_branch(cwd: Path | None = None) -> str:
	"""
	Get the name of the current branch.

	Raises:
	    GitError: On a detached HEAD or outside a repository

	"""
	branch = run_git_command(["git", "rev-parse", "--abbrev-ref", "HEAD"], cwd).strip()
	if not branch or branch == "HEAD":
		msg = "HEAD is detached; no branch name available"
		raise GitError(msg)
	return branch


def commit_with_message(message: str, cwd: Path | None = None, *, all_tracked: bool = False) -> None:
	"""
	Create a commit from the staged changes.

	With ``all_tracked`` modified tracked files are committed too (``git commit -a``).

	Raises:
	    NoChangesError: If nothing is staged
	    GitError: If the commit fails

	"""
	scope = ChangeScope.ALL if all_tracked else ChangeScope.STAGED
	if not has_changes(scope, cwd):
		msg = "No changes to commit"
		raise NoChangesError(msg)
	command = ["git", "commit", "-a", "-m", message] if all_tracked else ["git", "commit", "-m", message]
	run_git_command(command, cwd)
	logger.info("Created commit: %s", message.splitlines()[0] if message else "")
