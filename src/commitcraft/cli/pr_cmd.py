"""Command for generating pull request descriptions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import asyncer
import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

logger = logging.getLogger(__name__)
console = Console()

PathArg = Annotated[
	Path | None,
	typer.Argument(help="Path inside the repository (defaults to the current directory)", exists=True),
]

StagedOnlyFlag = Annotated[
	bool, typer.Option("--staged", "-s", help="Describe staged changes only instead of all pending changes")
]

OutputOpt = Annotated[
	Path | None, typer.Option("--output", "-o", help="Write the description to this file instead of printing it")
]

ProviderOpt = Annotated[
	str | None, typer.Option("--provider", "-p", help="LLM provider (openai, groq, gemini, ollama)")
]

ModelOpt = Annotated[str | None, typer.Option("--model", "-m", help="Model to use")]

LanguageOpt = Annotated[str | None, typer.Option("--language", "-l", help="Language (english, korean)")]


def register_command(app: typer.Typer) -> None:
	"""Register the pr command with the CLI app."""

	@app.command(name="pr")
	@asyncer.runnify
	async def pr_command(
		path: PathArg = None,
		staged_only: StagedOnlyFlag = False,
		output: OutputOpt = None,
		provider: ProviderOpt = None,
		model: ModelOpt = None,
		language: LanguageOpt = None,
	) -> None:
		"""Generate a markdown PR description (Title, Summary, Changes, Testing)."""
		await _pr_command_impl(
			path=path,
			staged_only=staged_only,
			output=output,
			provider=provider,
			model=model,
			language=language,
		)


async def _pr_command_impl(
	path: Path | None,
	staged_only: bool,
	output: Path | None,
	provider: str | None,
	model: str | None,
	language: str | None,
) -> None:
	"""Actual implementation of the pr command."""
	from commitcraft.config import ConfigLoader
	from commitcraft.config.config_schema import CREDENTIAL_ENV_VARS
	from commitcraft.exceptions import CommitCraftError, NoChangesError
	from commitcraft.git.pr_generator import PRDescriptionGenerator
	from commitcraft.git.utils import ChangeScope, get_repo_root
	from commitcraft.llm.errors import LLMError
	from commitcraft.utils.cli_utils import (
		describe_llm_error,
		exit_with_error,
		handle_keyboard_interrupt,
		loading_spinner,
		show_warning,
	)

	key_hint = ""
	try:
		repo_root = get_repo_root(path or Path.cwd())
		config = ConfigLoader.get_instance(repo_root=repo_root).with_overrides(
			provider=provider, model=model, language=language
		)
		key_hint = CREDENTIAL_ENV_VARS.get(config.provider, "")
		scope = ChangeScope.STAGED if staged_only else ChangeScope.ALL

		with loading_spinner(f"Generating PR description via {config.provider}..."):
			description = await PRDescriptionGenerator(repo_root, config).generate(scope)

		if output is not None:
			output.write_text(f"{description}\n", encoding="utf-8")
			console.print(f"[green]PR description written to {output}[/green]")
		else:
			console.print(Panel(Markdown(description), title="PR description", border_style="blue"))

	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except NoChangesError as e:
		show_warning(str(e))
		raise typer.Exit(1) from e
	except LLMError as e:
		exit_with_error(describe_llm_error(e, key_hint=key_hint), exception=e)
	except OSError as e:
		exit_with_error(f"Could not write {output}: {e}", exception=e)
	except CommitCraftError as e:
		exit_with_error(f"Failed to generate PR description: {e}", exception=e)
