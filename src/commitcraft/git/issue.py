"""Detection of issue references in branch names."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from commitcraft.utils.lookup import AbsentReason, Lookup

from .utils import GitError, get_current_branch

if TYPE_CHECKING:
	from pathlib import Path

logger = logging.getLogger(__name__)


def extract_issue_from_branch(branch_name: str, pattern: str) -> Lookup[str]:
	"""
	Extract an issue token from a branch name.

	The first capture group is used when the pattern has one and it matched
	something, otherwise the whole match.

	Args:
	    branch_name: Current branch name
	    pattern: Regular expression searched for in the branch name

	Returns:
	    The token, or the reason none was found

	"""
	if not pattern:
		return Lookup.absent(AbsentReason.DISABLED)

	try:
		regex = re.compile(pattern)
	except re.error as e:
		logger.warning("Ignoring invalid issue pattern %r: %s", pattern, e)
		return Lookup.absent(AbsentReason.INVALID_PATTERN)

	match = regex.search(branch_name)
	if match is None:
		return Lookup.absent(AbsentReason.NO_MATCH)

	issue = (match.group(1) if regex.groups else None) or match.group(0)
	if not issue:
		return Lookup.absent(AbsentReason.NO_MATCH)
	return Lookup.of(issue)


def format_issue_reference(issue: str, prefix: str = "") -> str:
	"""Prepend ``prefix`` unless the issue already starts with it (case-insensitively)."""
	if not prefix or issue.upper().startswith(prefix.upper()):
		return issue
	return f"{prefix}{issue}"


def resolve_issue_reference(cwd: Path | None, pattern: str, prefix: str = "") -> Lookup[str]:
	"""
	Resolve the issue reference for the current branch.

	Args:
	    cwd: Repository path
	    pattern: Issue pattern, empty to disable detection
	    prefix: Prefix added to the extracted token

	Returns:
	    The formatted reference, or the reason none is available

	"""
	if not pattern:
		return Lookup.absent(AbsentReason.DISABLED)

	try:
		branch = get_current_branch(cwd)
	except GitError as e:
		logger.debug("Could not determine branch for issue detection: %s", e)
		return Lookup.absent(AbsentReason.BRANCH_UNAVAILABLE)

	issue = extract_issue_from_branch(branch, pattern)
	if not issue.found:
		return issue
	return Lookup.of(format_issue_reference(issue.value, prefix))


def append_issue_reference(message: str, reference: str | None) -> str:
	"""Append ``reference`` to a commit message that does not already mention it."""
	if not reference or reference in message:
		return message
	return f"{message} {reference}"
