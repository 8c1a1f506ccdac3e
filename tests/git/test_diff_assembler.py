"""Tests for change set assembly."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from commitcraft.config import AppConfigSchema
from commitcraft.git.diff_assembler import (
	TRUNCATION_MARKER,
	ChangeSet,
	build_change_set,
	collect_raw_changes,
	merge_summaries,
	needs_summarization,
	summarization_input,
	truncate_diff,
	with_summary,
)
from commitcraft.git.utils import ChangeScope


@pytest.mark.unit
class TestTruncateDiff:
	"""Test cases for truncate_diff."""

	def test_within_budget(self) -> None:
		"""Test that short text is returned unchanged."""
		assert truncate_diff("line\n", 100) == ("line\n", False)

	def test_cuts_at_late_newline(self) -> None:
		"""Test that a newline in the last 20% of the budget becomes the cut point."""
		diff = "a" * 90 + "\n" + "b" * 50
		text, truncated = truncate_diff(diff, 100)
		assert truncated
		assert text == "a" * 90 + TRUNCATION_MARKER

	def test_hard_cut_when_newline_is_early(self) -> None:
		"""Test that an early newline is ignored in favour of the hard limit."""
		diff = "a" * 10 + "\n" + "b" * 200
		text, truncated = truncate_diff(diff, 100)
		assert truncated
		assert text == diff[:100] + TRUNCATION_MARKER

	@pytest.mark.parametrize("budget", [1, 7, 50, 99, 250, 1000])
	def test_length_bound(self, budget: int) -> None:
		"""Test that output never exceeds the budget plus the marker."""
		diff = "\n".join(f"+ line number {i}" for i in range(60))
		text, truncated = truncate_diff(diff, budget)
		assert len(text) <= budget + len(TRUNCATION_MARKER)
		if truncated:
			assert text.endswith(TRUNCATION_MARKER)
			kept = text[: -len(TRUNCATION_MARKER)]
			assert diff.startswith(kept)
		else:
			assert text == diff


@pytest.mark.unit
class TestMergeSummaries:
	"""Test cases for merge_summaries."""

	def test_deduplicates_in_order(self) -> None:
		"""Test that repeated lines are dropped and first-seen order kept."""
		merged = merge_summaries("M\ta.py\nA\tb.py", "M\ta.py\nD\tc.py\n")
		assert merged == "M\ta.py\nA\tb.py\nD\tc.py"

	def test_empty(self) -> None:
		"""Test merging empty summaries."""
		assert merge_summaries("", "") == ""


@pytest.mark.unit
class TestBuildChangeSet:
	"""Test cases for build_change_set."""

	def test_filters_and_masks(self) -> None:
		"""Test the filter, mask and truncate pipeline."""
		diff = (
			"diff --git a/app.py b/app.py\n+password = \"abc123XYZ\"\n"
			"diff --git a/yarn.lock b/yarn.lock\n+lock\n"
		)
		change_set = build_change_set(diff, "M\tapp.py\nM\tyarn.lock", exclude=["*.lock"])
		assert change_set.diff_text == 'diff --git a/app.py b/app.py\n+password = "[PASSWORD]"\n'
		assert change_set.file_summary == "M\tapp.py"
		assert change_set.had_sensitive_content
		assert not change_set.truncated
		assert change_set.original_length == len(change_set.diff_text)

	def test_mask_disabled(self) -> None:
		"""Test that masking can be turned off."""
		diff = 'diff --git a/app.py b/app.py\n+password = "abc123XYZ"\n'
		change_set = build_change_set(diff, "", exclude=[], mask=False)
		assert "abc123XYZ" in change_set.diff_text
		assert not change_set.had_sensitive_content

	def test_truncated_keeps_source(self) -> None:
		"""Test that the untruncated text is kept for summarization."""
		diff = "diff --git a/a.py b/a.py\n" + "+x\n" * 100
		change_set = build_change_set(diff, "M\ta.py", exclude=[], max_chars=50)
		assert change_set.truncated
		assert change_set.source_text == diff
		assert change_set.original_length == len(diff)
		assert len(change_set.diff_text) <= 50 + len(TRUNCATION_MARKER)

	def test_is_empty_after_exclusion(self) -> None:
		"""Test that a diff of only excluded files is empty."""
		change_set = build_change_set("diff --git a/yarn.lock b/yarn.lock\n+x\n", "", exclude=["*.lock"])
		assert change_set.is_empty


@pytest.mark.git
class TestCollectRawChanges:
	"""Test cases for collect_raw_changes."""

	def test_staged_scope(self) -> None:
		"""Test a single-scope query."""
		with (
			patch("commitcraft.git.diff_assembler.get_diff", return_value="DIFF") as mock_diff,
			patch("commitcraft.git.diff_assembler.get_name_status", return_value="M\ta.py") as mock_status,
		):
			diff, summary = asyncio.run(collect_raw_changes(ChangeScope.STAGED))

		assert (diff, summary) == ("DIFF", "M\ta.py")
		mock_diff.assert_called_once_with(ChangeScope.STAGED, None)
		mock_status.assert_called_once_with(ChangeScope.STAGED, None)

	def test_all_scope_combines(self) -> None:
		"""Test that staged output precedes unstaged output and summaries are de-duplicated."""
		diffs = {ChangeScope.STAGED: "staged diff", ChangeScope.UNSTAGED: "unstaged diff"}
		summaries = {ChangeScope.STAGED: "M\ta.py", ChangeScope.UNSTAGED: "M\ta.py\nM\tb.py"}
		with (
			patch("commitcraft.git.diff_assembler.get_diff", side_effect=lambda scope, _cwd: diffs[scope]),
			patch(
				"commitcraft.git.diff_assembler.get_name_status",
				side_effect=lambda scope, _cwd: summaries[scope],
			),
		):
			diff, summary = asyncio.run(collect_raw_changes(ChangeScope.ALL))

		assert diff == "staged diff\nunstaged diff"
		assert summary == "M\ta.py\nM\tb.py"


@pytest.mark.unit
class TestSummarization:
	"""Test cases for the summarization helpers."""

	def test_threshold(self) -> None:
		"""Test that only diffs above the threshold are summarized."""
		config = AppConfigSchema(summarize_threshold=10)
		small = ChangeSet(diff_text="x", file_summary="", original_length=10)
		large = ChangeSet(diff_text="x", file_summary="", original_length=11)
		assert not needs_summarization(small, config)
		assert needs_summarization(large, config)
		assert not needs_summarization(large, AppConfigSchema(summarize_threshold=10, summarize_large_diff=False))

	def test_input_is_bounded(self) -> None:
		"""Test that the summarization input respects its own budget."""
		config = AppConfigSchema(summarize_input_chars=20)
		change_set = ChangeSet(diff_text="", file_summary="", source_text="y" * 100, original_length=100)
		assert len(summarization_input(change_set, config)) <= 20 + len(TRUNCATION_MARKER)

	def test_with_summary(self) -> None:
		"""Test that the summary replaces the diff with a size note."""
		change_set = ChangeSet(diff_text="long diff", file_summary="M\ta.py", original_length=9000)
		summarized = with_summary(change_set, "  Added login.  ")
		assert summarized.diff_text == "[Summarized from 9000 characters of diff]\n\nAdded login."
		assert summarized.summarized
		assert summarized.file_summary == "M\ta.py"
		assert not change_set.summarized
