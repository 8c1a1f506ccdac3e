"""Command for generating conventional commit messages from Git diffs."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import asyncer
import questionary
import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

if TYPE_CHECKING:
	from commitcraft.git.commit_generator import GenerationResult, ReviewedCandidate

logger = logging.getLogger(__name__)
console = Console()

REGENERATE = "__regenerate__"
CANCEL = "__cancel__"

# --- Command Argument Annotations ---

PathArg = Annotated[
	Path | None,
	typer.Argument(help="Path inside the repository (defaults to the current directory)", exists=True),
]

AllChangesFlag = Annotated[
	bool, typer.Option("--all", "-a", help="Describe staged and unstaged changes instead of staged only")
]

ProviderOpt = Annotated[
	str | None, typer.Option("--provider", "-p", help="LLM provider (openai, groq, gemini, ollama)")
]

ModelOpt = Annotated[str | None, typer.Option("--model", "-m", help="Model to use")]

LanguageOpt = Annotated[str | None, typer.Option("--language", "-l", help="Language (english, korean)")]

CommitFlag = Annotated[bool, typer.Option("--commit", "-c", help="Commit with the selected message")]

PickOpt = Annotated[
	int | None, typer.Option("--pick", min=1, max=3, help="Select candidate N without prompting")
]

IssuePatternOpt = Annotated[
	str | None, typer.Option("--issue-pattern", help="Regex extracting an issue from the branch name")
]

IssuePrefixOpt = Annotated[str | None, typer.Option("--issue-prefix", help="Prefix for the issue reference (e.g. #)")]

StrictFlag = Annotated[
	bool, typer.Option("--strict", help="Regenerate while no candidate satisfies the team ruleset")
]

# --- Registration Function ---


def register_command(app: typer.Typer) -> None:
	"""Register the generate command with the CLI app."""

	@app.command(name="generate")
	@asyncer.runnify
	async def generate_command(
		path: PathArg = None,
		all_changes: AllChangesFlag = False,
		provider: ProviderOpt = None,
		model: ModelOpt = None,
		language: LanguageOpt = None,
		commit: CommitFlag = False,
		pick: PickOpt = None,
		issue_pattern: IssuePatternOpt = None,
		issue_prefix: IssuePrefixOpt = None,
		strict: StrictFlag = False,
	) -> None:
		"""
		Generate commit message candidates for the pending changes.

		Staged changes are described by default. Pick a candidate to print it,
		or add --commit to create the commit directly.

		"""
		await _generate_command_impl(
			path=path,
			all_changes=all_changes,
			provider=provider,
			model=model,
			language=language,
			commit=commit,
			pick=pick,
			issue_pattern=issue_pattern,
			issue_prefix=issue_prefix,
			strict=strict,
		)

	app.command(name="commit", help="Alias for generate.")(generate_command)


# --- Presentation helpers ---


def render_candidates(result: GenerationResult) -> None:
	"""Print the numbered candidates with any ruleset violations."""
	console.print()
	for number, reviewed in enumerate(result.candidates, start=1):
		line = Text(f"{number}. ", style="bold")
		line.append(reviewed.message, style="green" if reviewed.compliant else "yellow")
		console.print(line)
		for violation in reviewed.violations:
			console.print(Text(f"     ! {violation}", style="yellow"))
	console.print()


def render_notices(result: GenerationResult) -> None:
	"""Warn about redaction, truncation and summarization of the diff."""
	from commitcraft.utils.cli_utils import show_warning

	notices = []
	if result.change_set.had_sensitive_content:
		notices.append("Sensitive-looking values were masked before the diff was sent.")
	if result.change_set.summarized:
		notices.append(
			f"The diff ({result.change_set.original_length} characters) was summarized before generation."
		)
	elif result.change_set.truncated:
		notices.append("The diff was truncated due to size limits.")
	if notices:
		show_warning("\n".join(notices))


async def choose_candidate(result: GenerationResult, pick: int | None, interactive: bool) -> str | None:
	"""
	Resolve the user's choice.

	Returns:
	    A candidate message, ``REGENERATE``, ``CANCEL``, or None when nothing was chosen

	"""
	if pick is not None:
		if pick > len(result.candidates):
			msg = f"Only {len(result.candidates)} candidate(s) were generated"
			raise typer.BadParameter(msg, param_hint="--pick")
		return result.candidates[pick - 1].message

	if not interactive:
		return None

	choices: list[questionary.Choice] = [
		questionary.Choice(title=f"{number}. {reviewed.message}", value=reviewed.message)
		for number, reviewed in enumerate(result.candidates, start=1)
	]
	choices.append(questionary.Choice(title="Regenerate", value=REGENERATE))
	choices.append(questionary.Choice(title="Cancel", value=CANCEL))

	answer = await questionary.select("Select a commit message:", choices=choices).ask_async()
	return answer or CANCEL


def _selected(result: GenerationResult, message: str) -> ReviewedCandidate | None:
	return next((reviewed for reviewed in result.candidates if reviewed.message == message), None)


# --- Implementation Function ---


async def _generate_command_impl(
	path: Path | None,
	all_changes: bool,
	provider: str | None,
	model: str | None,
	language: str | None,
	commit: bool,
	pick: int | None,
	issue_pattern: str | None,
	issue_prefix: str | None,
	strict: bool,
) -> None:
	"""Actual implementation of the generate command."""
	from commitcraft.config import ConfigLoader, resolve_credential
	from commitcraft.config.config_schema import CREDENTIAL_ENV_VARS
	from commitcraft.exceptions import CommitCraftError, ConfigError, GitError, NoChangesError
	from commitcraft.git.commit_generator import CommitMessageGenerator
	from commitcraft.git.utils import ChangeScope, commit_with_message, get_repo_root, has_changes
	from commitcraft.llm.errors import LLMError
	from commitcraft.utils.cli_utils import (
		describe_llm_error,
		exit_with_error,
		handle_keyboard_interrupt,
		loading_spinner,
		show_warning,
	)

	key_hint = ""
	endpoint = ""
	try:
		repo_root = get_repo_root(path or Path.cwd())
		loader = ConfigLoader.get_instance(repo_root=repo_root)
		config = loader.with_overrides(
			provider=provider,
			model=model,
			language=language,
			issue_pattern=issue_pattern,
			issue_prefix=issue_prefix,
		)
		key_hint = CREDENTIAL_ENV_VARS.get(config.provider, "")
		endpoint = config.ollama_url if config.provider == "ollama" else (config.provider_endpoint or "")

		if resolve_credential(config) is None:
			exit_with_error(
				f"No API key found for {config.provider}.\n\n"
				f"Set {key_hint}, add it under api_keys in the config file, or run: commitcraft config"
			)

		scope = ChangeScope.ALL if all_changes else ChangeScope.STAGED
		if not has_changes(scope, repo_root):
			hint = "Make some changes first." if all_changes else "Stage files with: git add <files>"
			show_warning(f"No {'pending' if all_changes else 'staged'} changes found.\n{hint}")
			raise typer.Exit(1)

		generator = CommitMessageGenerator(repo_root, config)
		interactive = sys.stdin.isatty() and sys.stdout.isatty()
		if pick is None and commit and not interactive:
			pick = 1

		with loading_spinner(f"Generating commit messages via {config.provider}..."):
			if strict:
				result = await generator.generate_compliant(scope)
			else:
				result = await generator.generate(scope)
		render_notices(result)

		while True:
			render_candidates(result)
			choice = await choose_candidate(result, pick, interactive)
			if choice != REGENERATE:
				break
			with loading_spinner("Regenerating..."):
				result = await generator.regenerate(result)

		if choice is None:
			return
		if choice == CANCEL:
			console.print("[yellow]Cancelled.[/yellow]")
			return

		selected = _selected(result, choice)
		if selected is not None and not selected.compliant:
			logger.warning("Selected message violates the team ruleset: %s", "; ".join(selected.violations))

		if commit:
			commit_with_message(choice, repo_root, all_tracked=all_changes)
			console.print(f"[green]Committed:[/green] {choice}")
		else:
			console.print(Panel(choice, title="Commit message", border_style="green"))

	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except NoChangesError as e:
		show_warning(str(e))
		raise typer.Exit(1) from e
	except LLMError as e:
		exit_with_error(
			describe_llm_error(e, key_hint=key_hint, endpoint=endpoint),
			exception=e,
		)
	except (GitError, ConfigError) as e:
		exit_with_error(str(e), exception=e)
	except CommitCraftError as e:
		exit_with_error(f"Failed to generate commit message: {e}", exception=e)
