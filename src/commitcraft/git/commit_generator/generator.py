"""Generator module for commit messages."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from commitcraft.config.config_loader import resolve_credential
from commitcraft.git.commit_linter import build_ruleset_prompt_additions, load_ruleset, validate_against_ruleset
from commitcraft.git.diff_assembler import (
	ChangeSet,
	assemble_change_set,
	needs_summarization,
	summarization_input,
	with_summary,
)
from commitcraft.git.issue import append_issue_reference, resolve_issue_reference
from commitcraft.git.utils import ChangeScope, NoChangesError
from commitcraft.llm.gateway import ProviderGateway
from commitcraft.llm.response_parser import MAX_CANDIDATES
from commitcraft.utils.lookup import AbsentReason, Lookup

if TYPE_CHECKING:
	from pathlib import Path

	from commitcraft.config.config_schema import AppConfigSchema
	from commitcraft.git.commit_linter import Ruleset
	from commitcraft.llm.response_parser import CommitCandidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationContext:
	"""Per-invocation inputs that shape the prompt besides the diff."""

	ruleset: Lookup[Ruleset]
	issue_reference: Lookup[str]
	language: str

	@property
	def ruleset_additions(self) -> str:
		"""Prompt directives derived from the ruleset."""
		return build_ruleset_prompt_additions(self.ruleset.value)


@dataclass(frozen=True)
class ReviewedCandidate:
	"""A candidate together with its ruleset violations and final message text."""

	candidate: CommitCandidate
	message: str
	violations: tuple[str, ...] = ()

	@property
	def compliant(self) -> bool:
		"""Whether the candidate satisfies the ruleset."""
		return not self.violations


@dataclass
class GenerationResult:
	"""Candidates produced for one change set."""

	change_set: ChangeSet
	context: GenerationContext
	count: int
	candidates: list[ReviewedCandidate] = field(default_factory=list)
	attempts: int = 1

	@property
	def compliant_candidates(self) -> list[ReviewedCandidate]:
		"""Candidates without ruleset violations."""
		return [candidate for candidate in self.candidates if candidate.compliant]


class CommitMessageGenerator:
	"""Generates commit messages for the pending changes of a repository."""

	def __init__(
		self,
		repo_root: Path,
		config: AppConfigSchema,
		gateway: ProviderGateway | None = None,
	) -> None:
		"""
		Initialize the commit message generator.

		Args:
		    repo_root: Root directory of the Git repository
		    config: Effective configuration
		    gateway: Provider gateway; built from ``config`` on first use when omitted

		"""
		self.repo_root = repo_root
		self.config = config
		self._gateway = gateway

	@property
	def gateway(self) -> ProviderGateway:
		"""The provider gateway, created lazily so a missing key fails only when needed."""
		if self._gateway is None:
			self._gateway = ProviderGateway.from_config(self.config, resolve_credential(self.config))
		return self._gateway

	def load_context(self) -> GenerationContext:
		"""Load the ruleset and issue reference for this invocation."""
		ruleset = load_ruleset(self.repo_root)
		issue = resolve_issue_reference(self.repo_root, self.config.issue_pattern, self.config.issue_prefix)

		language = self.config.language
		if ruleset.found and ruleset.value.language:
			language = ruleset.value.language

		if issue.found:
			logger.info("Detected issue reference %s", issue.value)
		elif issue.reason is not AbsentReason.DISABLED:
			logger.debug("No issue reference: %s", issue.reason)

		return GenerationContext(ruleset=ruleset, issue_reference=issue, language=language)

	async def prepare_change_set(self, scope: ChangeScope) -> ChangeSet:
		"""
		Assemble the change set and summarize it when it is too large.

		Raises:
		    NoChangesError: If nothing remains to describe after filtering
		    GitError: If Git fails
		    LLMError: If summarization fails

		"""
		change_set = await assemble_change_set(scope, self.config, self.repo_root)
		if change_set.is_empty:
			msg = "No changes to describe after filtering excluded files"
			raise NoChangesError(msg)

		if needs_summarization(change_set, self.config):
			logger.info("Summarizing %d character diff before generation", change_set.original_length)
			summary = await asyncio.to_thread(self.gateway.summarize, summarization_input(change_set, self.config))
			change_set = with_summary(change_set, summary)
		return change_set

	def format_message(self, candidate: CommitCandidate, context: GenerationContext) -> str:
		"""Render a candidate, appending the issue reference when configured to."""
		message = candidate.format()
		if self.config.issue_reference_mode in ("append", "both") and context.issue_reference.found:
			message = append_issue_reference(message, context.issue_reference.value)
		return message

	def review(self, candidates: list[CommitCandidate], context: GenerationContext) -> list[ReviewedCandidate]:
		"""Check each candidate against the ruleset without changing it."""
		return [
			ReviewedCandidate(
				candidate=candidate,
				message=self.format_message(candidate, context),
				violations=tuple(validate_against_ruleset(candidate, context.ruleset.value)),
			)
			for candidate in candidates
		]

	async def _request(self, change_set: ChangeSet, context: GenerationContext, count: int) -> list[ReviewedCandidate]:
		issue_for_prompt = None
		if self.config.issue_reference_mode in ("prompt", "both"):
			issue_for_prompt = context.issue_reference.value

		candidates = await asyncio.to_thread(
			self.gateway.generate,
			change_set.diff_text,
			change_set.file_summary,
			language=context.language,
			count=count,
			ruleset_additions=context.ruleset_additions,
			issue_reference=issue_for_prompt,
			partial=self.config.accept_partial_candidates,
		)
		return self.review(candidates, context)

	async def generate(self, scope: ChangeScope = ChangeScope.STAGED, count: int = MAX_CANDIDATES) -> GenerationResult:
		"""
		Generate reviewed candidates for the changes in ``scope``.

		Args:
		    scope: Which pending changes to describe
		    count: Number of candidates, 3 for interactive use and 1 for the hook

		Returns:
		    The change set, context and reviewed candidates

		"""
		change_set = await self.prepare_change_set(scope)
		context = self.load_context()
		candidates = await self._request(change_set, context, count)
		return GenerationResult(change_set=change_set, context=context, count=count, candidates=candidates)

	async def regenerate(self, result: GenerationResult) -> GenerationResult:
		"""Request a fresh batch for the same change set and context."""
		candidates = await self._request(result.change_set, result.context, result.count)
		return GenerationResult(
			change_set=result.change_set,
			context=result.context,
			count=result.count,
			candidates=candidates,
			attempts=result.attempts + 1,
		)

	async def generate_compliant(
		self,
		scope: ChangeScope = ChangeScope.STAGED,
		count: int = MAX_CANDIDATES,
		max_regenerations: int | None = None,
	) -> GenerationResult:
		"""
		Generate, regenerating while no candidate satisfies the ruleset.

		Stops at the first batch with a compliant candidate or after
		``max_regenerations`` extra batches, returning the last batch either way.

		"""
		limit = self.config.max_regenerations if max_regenerations is None else max_regenerations
		result = await self.generate(scope, count)
		while not result.compliant_candidates and result.attempts <= limit:
			logger.info("No candidate satisfies the team ruleset, regenerating (%d/%d)", result.attempts, limit)
			result = await self.regenerate(result)
		return result
