"""Exception hierarchy shared across CommitCraft packages."""

from __future__ import annotations


class CommitCraftError(Exception):
	"""Base exception for all CommitCraft errors."""


class GitError(CommitCraftError):
	"""Raised when a Git command fails or the repository is unusable."""


class NoChangesError(GitError):
	"""Raised when the requested change scope has nothing to describe."""


class ConfigError(CommitCraftError):
	"""Raised when the configuration cannot be loaded or validated."""
