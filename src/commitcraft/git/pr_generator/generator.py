"""Generator module for pull request descriptions."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from commitcraft.config.config_loader import resolve_credential
from commitcraft.git.commit_linter import load_ruleset
from commitcraft.git.diff_assembler import (
	assemble_change_set,
	needs_summarization,
	summarization_input,
	with_summary,
)
from commitcraft.git.utils import ChangeScope, NoChangesError
from commitcraft.llm.gateway import ProviderGateway

if TYPE_CHECKING:
	from pathlib import Path

	from commitcraft.config.config_schema import AppConfigSchema

logger = logging.getLogger(__name__)


class PRDescriptionGenerator:
	"""Generates markdown PR descriptions from pending changes."""

	def __init__(self, repo_root: Path, config: AppConfigSchema, gateway: ProviderGateway | None = None) -> None:
		self.repo_root = repo_root
		self.config = config
		self._gateway = gateway

	@property
	def gateway(self) -> ProviderGateway:
		"""The provider gateway, created on first use."""
		if self._gateway is None:
			self._gateway = ProviderGateway.from_config(self.config, resolve_credential(self.config))
		return self._gateway

	async def generate(self, scope: ChangeScope = ChangeScope.ALL) -> str:
		"""
		Generate a PR description for the changes in ``scope``.

		The team ruleset contributes its language and custom instructions.

		Returns:
		    Markdown with Title, Summary, Changes and Testing sections

		Raises:
		    NoChangesError: If there is nothing to describe
		    LLMError: If the provider fails twice

		"""
		change_set = await assemble_change_set(scope, self.config, self.repo_root)
		if change_set.is_empty:
			msg = "No changes to describe after filtering excluded files"
			raise NoChangesError(msg)

		if needs_summarization(change_set, self.config):
			summary = await asyncio.to_thread(self.gateway.summarize, summarization_input(change_set, self.config))
			change_set = with_summary(change_set, summary)

		ruleset = load_ruleset(self.repo_root)
		language = self.config.language
		custom_prompt = ""
		if ruleset.found:
			language = ruleset.value.language or language
			custom_prompt = ruleset.value.custom_prompt or ""

		return await asyncio.to_thread(
			self.gateway.generate_pr_description,
			change_set.diff_text,
			change_set.file_summary,
			language=language,
			custom_prompt=custom_prompt,
		)
