"""Tests for branch-name issue detection."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from commitcraft.git.issue import (
	append_issue_reference,
	extract_issue_from_branch,
	format_issue_reference,
	resolve_issue_reference,
)
from commitcraft.git.utils import GitError
from commitcraft.utils.lookup import AbsentReason


@pytest.mark.unit
class TestExtractIssueFromBranch:
	"""Test cases for extract_issue_from_branch."""

	def test_capture_group(self) -> None:
		"""Test that the first capture group is used."""
		issue = extract_issue_from_branch("feature/123-add-login", r"feature/(\d+)")
		assert issue.found
		assert issue.value == "123"

	def test_whole_match_without_group(self) -> None:
		"""Test that the whole match is used when the pattern has no group."""
		assert extract_issue_from_branch("fix/PROJ-42-crash", r"PROJ-\d+").value == "PROJ-42"

	def test_disabled(self) -> None:
		"""Test that an empty pattern disables detection."""
		assert extract_issue_from_branch("feature/123", "").reason is AbsentReason.DISABLED

	def test_no_match(self) -> None:
		"""Test a branch that does not match."""
		assert extract_issue_from_branch("main", r"feature/(\d+)").reason is AbsentReason.NO_MATCH

	def test_invalid_pattern(self, caplog: pytest.LogCaptureFixture) -> None:
		"""Test that an invalid regex is reported instead of raised."""
		issue = extract_issue_from_branch("feature/123", r"feature/(\d+")
		assert not issue.found
		assert issue.reason is AbsentReason.INVALID_PATTERN
		assert "invalid issue pattern" in caplog.text


@pytest.mark.unit
class TestFormatting:
	"""Test cases for issue reference formatting."""

	def test_prefix_added(self) -> None:
		"""Test that the prefix is prepended."""
		assert format_issue_reference("123", "#") == "#123"

	def test_prefix_not_duplicated(self) -> None:
		"""Test that an existing prefix is kept as is."""
		assert format_issue_reference("proj-42", "PROJ-") == "proj-42"
		assert format_issue_reference("42", "") == "42"

	def test_append(self) -> None:
		"""Test appending a reference to a message."""
		assert append_issue_reference("feat: add login", "#123") == "feat: add login #123"
		assert append_issue_reference("feat: add login #123", "#123") == "feat: add login #123"
		assert append_issue_reference("feat: add login", None) == "feat: add login"


@pytest.mark.git
class TestResolveIssueReference:
	"""Test cases for resolve_issue_reference."""

	def test_from_branch(self) -> None:
		"""Test the full branch-to-reference flow."""
		with patch("commitcraft.git.issue.get_current_branch", return_value="feature/123-add-login"):
			issue = resolve_issue_reference(None, r"feature/(\d+)", "#")
		assert issue.value == "#123"

	def test_branch_unavailable(self) -> None:
		"""Test that a detached HEAD degrades to an absent reference."""
		with patch("commitcraft.git.issue.get_current_branch", side_effect=GitError("detached")):
			issue = resolve_issue_reference(None, r"feature/(\d+)", "#")
		assert issue.reason is AbsentReason.BRANCH_UNAVAILABLE

	def test_disabled_skips_git(self) -> None:
		"""Test that Git is not queried when detection is off."""
		with patch("commitcraft.git.issue.get_current_branch") as mock_branch:
			issue = resolve_issue_reference(None, "", "#")
		assert issue.reason is AbsentReason.DISABLED
		mock_branch.assert_not_called()
