"""
The ``prepare-commit-msg`` hook flow.

Git calls the hook with the message file, the commit source and, for
amends, a SHA. The hook only fills in an empty message for plain commits and
never makes the commit fail.

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from commitcraft.config.config_loader import resolve_credential
from commitcraft.exceptions import CommitCraftError
from commitcraft.git.utils import ChangeScope

from .generator import CommitMessageGenerator

if TYPE_CHECKING:
	from commitcraft.config.config_schema import AppConfigSchema
	from commitcraft.llm.gateway import ProviderGateway

logger = logging.getLogger(__name__)

HOOK_DEBUG_ENV = "COMMITCRAFT_HOOK_DEBUG"

# Commit sources for which the hook still generates a message.
GENERATING_SOURCES = frozenset({"", "template"})


def split_commit_message(text: str) -> tuple[str, list[str]]:
	"""Split a commit message file into its message body and its ``#`` comment lines."""
	lines = text.splitlines()
	comments = [line for line in lines if line.startswith("#")]
	body = "\n".join(line for line in lines if not line.startswith("#")).strip()
	return body, comments


async def run_prepare_commit_msg(
	msg_file: Path,
	source: str | None,
	repo_root: Path,
	config: AppConfigSchema,
	gateway: ProviderGateway | None = None,
) -> bool:
	"""
	Fill an empty commit message file with a generated message.

	Args:
	    msg_file: File Git opens in the editor
	    source: Commit source passed by Git (message, template, merge, squash, commit)
	    repo_root: Repository root
	    config: Effective configuration
	    gateway: Provider gateway, built from ``config`` when omitted

	Returns:
	    True if a message was written

	"""
	if (source or "") not in GENERATING_SOURCES:
		logger.debug('Skipping: commit source is "%s"', source)
		return False

	existing = ""
	if msg_file.exists():
		try:
			existing = msg_file.read_text(encoding="utf-8")
		except OSError as e:
			logger.debug("Could not read %s: %s", msg_file, e)
			return False

	body, comments = split_commit_message(existing)
	if body:
		logger.debug("Skipping: commit message already exists")
		return False

	if gateway is None and resolve_credential(config) is None:
		logger.debug("Skipping: no API key found for %s", config.provider)
		return False

	generator = CommitMessageGenerator(repo_root, config, gateway)
	try:
		result = await generator.generate(ChangeScope.STAGED, count=1)
	except CommitCraftError as e:
		logger.debug("Skipping: generation failed: %s", e)
		return False

	if not result.candidates:
		return False

	message = result.candidates[0].message
	content = f"{message}\n\n" + "\n".join(comments) if comments else f"{message}\n"
	try:
		msg_file.write_text(content if content.endswith("\n") else f"{content}\n", encoding="utf-8")
	except OSError as e:
		logger.debug("Could not write %s: %s", msg_file, e)
		return False

	logger.debug("Wrote commit message: %s", message)
	return True
