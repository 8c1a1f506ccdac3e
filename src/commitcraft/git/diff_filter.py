"""Exclusion of files from a diff and its name-status summary."""

from __future__ import annotations

import fnmatch
import logging
import re
from pathlib import PurePosixPath

logger = logging.getLogger(__name__)

# Zero-width split point in front of every file section.
SECTION_START = re.compile(r"^(?=diff --git )", re.MULTILINE)

# Declared "a/" path of a section header, quoted or not.
SECTION_PATH = re.compile(r'^diff --git "?a/(.+?)"? "?b/')

GLOB_CHARS = frozenset("*?[")


def _is_bare_name(pattern: str) -> bool:
	return "/" not in pattern and not GLOB_CHARS.intersection(pattern)


def should_exclude_file(file_path: str, patterns: list[str]) -> bool:
	"""
	Check whether a file path matches any exclusion pattern.

	A bare name such as ``node_modules`` also excludes everything below a
	top-level directory of that name. Every pattern is matched as a glob
	against the full path and against the base name.

	Args:
	    file_path: Repository-relative path
	    patterns: Exclusion globs or bare directory names

	Returns:
	    True if the file should be dropped

	"""
	base_name = PurePosixPath(file_path).name
	for pattern in patterns:
		if not pattern:
			continue
		if _is_bare_name(pattern) and (file_path == pattern or file_path.startswith(f"{pattern}/")):
			return True
		if fnmatch.fnmatchcase(file_path, pattern) or fnmatch.fnmatchcase(base_name, pattern):
			return True
	return False


def split_diff_sections(diff: str) -> list[str]:
	"""Split a unified diff into per-file sections, dropping blank ones."""
	return [section for section in SECTION_START.split(diff) if section.strip()]


def section_path(section: str) -> str | None:
	"""Return the path declared by a section header, or None if unparsable."""
	match = SECTION_PATH.match(section)
	return match.group(1) if match else None


def filter_diff(diff: str, patterns: list[str]) -> str:
	"""
	Drop the sections of a diff whose file matches an exclusion pattern.

	Sections whose header cannot be parsed are kept.

	Args:
	    diff: Unified diff text
	    patterns: Exclusion patterns

	Returns:
	    Diff text containing only the non-excluded sections, in order

	"""
	if not diff or not patterns:
		return diff

	kept: list[str] = []
	for section in split_diff_sections(diff):
		path = section_path(section)
		if path is not None and should_exclude_file(path, patterns):
			logger.debug("Excluding %s from diff", path)
			continue
		kept.append(section)
	return "".join(kept)


def filter_summary(summary: str, patterns: list[str]) -> str:
	"""
	Drop name-status lines whose file matches an exclusion pattern.

	Each line is ``<status>\\t<path>`` (renames carry a second path). Lines
	without a tab are kept as they are.

	"""
	if not summary or not patterns:
		return summary

	kept: list[str] = []
	for line in summary.splitlines():
		if not line.strip():
			continue
		parts = line.split("\t")
		if len(parts) > 1 and should_exclude_file(parts[1], patterns):
			continue
		kept.append(line)
	return "\n".join(kept)
