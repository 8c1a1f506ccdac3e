"""
Uniform access to commit generation, summarization and PR descriptions.

Every operation is attempted at most twice: any :class:`LLMError` from the
transport or from response validation triggers one identical retry, and a
second failure is raised with the operation name attached.

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from .errors import ErrorKind, LLMError
from .prompts import (
	build_pr_system_prompt,
	build_pr_user_prompt,
	build_summarize_prompts,
	build_system_prompt,
	build_user_prompt,
)
from .providers import ChatTransport, create_transport
from .response_parser import MAX_CANDIDATES, parse_candidates

if TYPE_CHECKING:
	from collections.abc import Callable

	from commitcraft.config.config_schema import AppConfigSchema

	from .response_parser import CommitCandidate

logger = logging.getLogger(__name__)

T = TypeVar("T")

CANDIDATE_TEMPERATURE = 0.7
CANDIDATE_MAX_TOKENS = 500
SUMMARY_TEMPERATURE = 0.3
SUMMARY_MAX_TOKENS = 800
PR_TEMPERATURE = 0.7
PR_MAX_TOKENS = 1000


class ProviderGateway:
	"""Runs prompts against one transport with the single-retry policy."""

	def __init__(self, transport: ChatTransport) -> None:
		self.transport = transport

	@classmethod
	def from_config(cls, config: AppConfigSchema, credential: str | None) -> ProviderGateway:
		"""
		Build a gateway for the configured provider.

		Raises:
		    LLMError: If a hosted provider has no credential

		"""
		endpoint = config.ollama_url if config.provider == "ollama" else config.provider_endpoint
		transport = create_transport(
			config.provider,
			credential,
			config.effective_model,
			endpoint,
			timeout=config.request_timeout,
		)
		return cls(transport)

	def _with_retry(self, operation: str, call: Callable[[], T]) -> T:
		try:
			return call()
		except LLMError as first_error:
			logger.warning("Attempt to %s failed (%s), retrying once", operation, first_error)

		try:
			return call()
		except LLMError as e:
			msg = f"Failed to {operation} after retry: {e}"
			raise LLMError(msg, kind=e.kind, detail=e.detail) from e

	def generate(
		self,
		diff_text: str,
		file_summary: str,
		*,
		language: str = "english",
		count: int = MAX_CANDIDATES,
		ruleset_additions: str = "",
		issue_reference: str | None = None,
		partial: bool = False,
	) -> list[CommitCandidate]:
		"""
		Generate commit message candidates for a change set.

		Args:
		    diff_text: Sanitized diff, or its summary
		    file_summary: Name-status summary
		    language: Language of the subject text
		    count: Number of candidates to request and keep
		    ruleset_additions: Team rule directives for the system prompt
		    issue_reference: Token every subject must end with
		    partial: Accept the valid part of a partly malformed batch

		Returns:
		    Normalized candidates, at most ``count``

		Raises:
		    LLMError: If both attempts fail

		"""
		messages = [
			{"role": "system", "content": build_system_prompt(language, count, ruleset_additions, issue_reference)},
			{"role": "user", "content": build_user_prompt(diff_text, file_summary, count)},
		]

		def call() -> list[CommitCandidate]:
			content = self.transport.chat(
				messages, json_mode=True, temperature=CANDIDATE_TEMPERATURE, max_tokens=CANDIDATE_MAX_TOKENS
			)
			return parse_candidates(content, limit=count, partial=partial)

		return self._with_retry("generate commit message", call)

	def summarize(self, diff_text: str) -> str:
		"""Condense a large diff into a plain-text change summary."""
		system_prompt, user_prompt = build_summarize_prompts(diff_text)
		messages = [{"role": "system", "content": system_prompt}, {"role": "user", "content": user_prompt}]

		def call() -> str:
			return self.transport.chat(
				messages, json_mode=False, temperature=SUMMARY_TEMPERATURE, max_tokens=SUMMARY_MAX_TOKENS
			).strip()

		return self._with_retry("summarize diff", call)

	def generate_pr_description(
		self, diff_text: str, file_summary: str, *, language: str = "english", custom_prompt: str = ""
	) -> str:
		"""
		Generate a markdown PR description.

		Returns:
		    Markdown with Title, Summary, Changes and Testing sections

		Raises:
		    LLMError: If both attempts fail or return blank text

		"""
		messages = [
			{"role": "system", "content": build_pr_system_prompt(language, custom_prompt)},
			{"role": "user", "content": build_pr_user_prompt(diff_text, file_summary)},
		]

		def call() -> str:
			content = self.transport.chat(
				messages, json_mode=False, temperature=PR_TEMPERATURE, max_tokens=PR_MAX_TOKENS
			).strip()
			if not content:
				msg = "Empty PR description"
				raise LLMError(msg, kind=ErrorKind.EMPTY_RESPONSE)
			return content

		return self._with_retry("generate PR description", call)


def generate_candidates(
	provider: str,
	credentials: str | None,
	diff_text: str,
	file_summary: str,
	model: str = "",
	language: str = "english",
	provider_endpoint: str | None = None,
	ruleset_additions: str = "",
	issue_reference: str | None = None,
	count: int = MAX_CANDIDATES,
) -> list[CommitCandidate]:
	"""Generate candidates with a one-off gateway for ``provider``."""
	gateway = ProviderGateway(create_transport(provider, credentials, model, provider_endpoint))
	return gateway.generate(
		diff_text,
		file_summary,
		language=language,
		count=count,
		ruleset_additions=ruleset_additions,
		issue_reference=issue_reference,
	)


def summarize(
	provider: str,
	credentials: str | None,
	diff_text: str,
	model: str = "",
	provider_endpoint: str | None = None,
) -> str:
	"""Summarize a diff with a one-off gateway for ``provider``."""
	return ProviderGateway(create_transport(provider, credentials, model, provider_endpoint)).summarize(diff_text)


def generate_pr_description(
	provider: str,
	credentials: str | None,
	diff_text: str,
	file_summary: str,
	model: str = "",
	language: str = "english",
	provider_endpoint: str | None = None,
	custom_prompt: str = "",
) -> str:
	"""Generate a PR description with a one-off gateway for ``provider``."""
	gateway = ProviderGateway(create_transport(provider, credentials, model, provider_endpoint))
	return gateway.generate_pr_description(diff_text, file_summary, language=language, custom_prompt=custom_prompt)
