"""
Assembly of the change set shown to a model.

Raw diff and name-status text are fetched concurrently, filtered against the
exclusion patterns, masked, and cut down to the character budget.

"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .diff_filter import filter_diff, filter_summary
from .masking import contains_sensitive_info, mask_sensitive_info
from .utils import ChangeScope, get_diff, get_name_status

if TYPE_CHECKING:
	from pathlib import Path

	from commitcraft.config.config_schema import AppConfigSchema

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n... [diff truncated]"

# A newline is only used as the cut point if it keeps at least this share of the budget.
MIN_KEPT_RATIO = 0.8


@dataclass(frozen=True)
class ChangeSet:
	"""The sanitized diff and file summary for one invocation."""

	diff_text: str
	file_summary: str
	truncated: bool = False
	original_length: int = 0
	source_text: str = field(default="", repr=False)
	had_sensitive_content: bool = False
	summarized: bool = False

	@property
	def is_empty(self) -> bool:
		"""Whether there is no diff content to describe."""
		return not self.diff_text.strip()


def truncate_diff(diff: str, max_chars: int) -> tuple[str, bool]:
	"""
	Cut a diff down to ``max_chars`` without splitting a line if possible.

	The text is cut at the budget, then moved back to the last newline when
	that newline lies within the final 20% of the budget. A marker line is
	appended to any truncated text.

	Args:
	    diff: Diff text
	    max_chars: Character budget

	Returns:
	    The possibly truncated text and whether truncation happened

	"""
	if len(diff) <= max_chars:
		return diff, False

	cut = diff[:max_chars]
	last_newline = cut.rfind("\n")
	if last_newline > max_chars * MIN_KEPT_RATIO:
		cut = cut[:last_newline]
	return cut + TRUNCATION_MARKER, True


def merge_summaries(*summaries: str) -> str:
	"""Join name-status summaries, dropping repeated lines but keeping first-seen order."""
	seen: dict[str, None] = {}
	for summary in summaries:
		for line in summary.splitlines():
			if line.strip():
				seen.setdefault(line, None)
	return "\n".join(seen)


async def collect_raw_changes(scope: ChangeScope, cwd: Path | None = None) -> tuple[str, str]:
	"""
	Fetch the raw diff and name-status summary for ``scope``.

	The Git queries are independent reads and run concurrently. For
	:attr:`ChangeScope.ALL` the staged output precedes the unstaged output.

	Returns:
	    Tuple of (diff, summary)

	Raises:
	    GitError: If any Git query fails

	"""
	if scope is not ChangeScope.ALL:
		diff, summary = await asyncio.gather(
			asyncio.to_thread(get_diff, scope, cwd),
			asyncio.to_thread(get_name_status, scope, cwd),
		)
		return diff, summary

	staged_diff, unstaged_diff, staged_summary, unstaged_summary = await asyncio.gather(
		asyncio.to_thread(get_diff, ChangeScope.STAGED, cwd),
		asyncio.to_thread(get_diff, ChangeScope.UNSTAGED, cwd),
		asyncio.to_thread(get_name_status, ChangeScope.STAGED, cwd),
		asyncio.to_thread(get_name_status, ChangeScope.UNSTAGED, cwd),
	)
	diff = "\n".join(part for part in (staged_diff, unstaged_diff) if part)
	return diff, merge_summaries(staged_summary, unstaged_summary)


def build_change_set(
	diff: str,
	summary: str,
	*,
	exclude: list[str],
	mask: bool = True,
	max_chars: int = 12000,
) -> ChangeSet:
	"""
	Filter, mask and truncate raw change text.

	Args:
	    diff: Raw unified diff
	    summary: Raw name-status summary
	    exclude: Exclusion patterns
	    mask: Whether to redact sensitive content
	    max_chars: Character budget for the diff

	Returns:
	    The assembled change set

	"""
	filtered_diff = filter_diff(diff, exclude)
	filtered_summary = filter_summary(summary, exclude)

	sensitive = False
	if mask:
		sensitive = contains_sensitive_info(filtered_diff)
		filtered_diff = mask_sensitive_info(filtered_diff)
		filtered_summary = mask_sensitive_info(filtered_summary)

	diff_text, truncated = truncate_diff(filtered_diff, max_chars)
	if truncated:
		logger.info("Diff truncated from %d to %d characters", len(filtered_diff), max_chars)

	return ChangeSet(
		diff_text=diff_text,
		file_summary=filtered_summary,
		truncated=truncated,
		original_length=len(filtered_diff),
		source_text=filtered_diff,
		had_sensitive_content=sensitive,
	)


async def assemble_change_set(
	scope: ChangeScope, config: AppConfigSchema, cwd: Path | None = None
) -> ChangeSet:
	"""Collect the changes in ``scope`` and build a change set from them."""
	diff, summary = await collect_raw_changes(scope, cwd)
	return build_change_set(
		diff,
		summary,
		exclude=config.exclude,
		mask=config.mask_sensitive,
		max_chars=config.max_diff_chars,
	)


def needs_summarization(change_set: ChangeSet, config: AppConfigSchema) -> bool:
	"""Whether the change set is large enough to be summarized before generation."""
	return config.summarize_large_diff and change_set.original_length > config.summarize_threshold


def summarization_input(change_set: ChangeSet, config: AppConfigSchema) -> str:
	"""Return the masked diff to summarize, bounded by ``summarize_input_chars``."""
	text, _ = truncate_diff(change_set.source_text, config.summarize_input_chars)
	return text


def with_summary(change_set: ChangeSet, summary: str) -> ChangeSet:
	"""Return a copy of ``change_set`` whose diff is replaced by ``summary``."""
	note = f"[Summarized from {change_set.original_length} characters of diff]"
	return replace(change_set, diff_text=f"{note}\n\n{summary.strip()}", summarized=True)
