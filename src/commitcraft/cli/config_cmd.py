"""Interactive command for writing the user configuration file."""

from __future__ import annotations

import logging
from typing import Any

import questionary
import typer
from rich.console import Console

logger = logging.getLogger(__name__)
console = Console()


def register_command(app: typer.Typer) -> None:
	"""Register the config command with the CLI app."""

	@app.command(name="config")
	def config_command() -> None:
		"""Choose a provider, API key, language and model, and save them."""
		_config_command_impl()


def _ask(question: questionary.Question) -> Any:
	answer = question.ask()
	if answer is None:
		raise KeyboardInterrupt
	return answer


def collect_answers() -> dict[str, Any]:
	"""Prompt for configuration values. Empty answers are left out of the result."""
	from commitcraft.config.config_schema import CREDENTIAL_ENV_VARS, DEFAULT_MODELS, DEFAULT_OLLAMA_URL
	from commitcraft.llm.providers import PROVIDERS

	values: dict[str, Any] = {}
	provider = _ask(questionary.select("LLM provider:", choices=list(PROVIDERS)))
	values["provider"] = provider

	if provider in CREDENTIAL_ENV_VARS:
		api_key = _ask(
			questionary.password(f"API key for {provider} (leave empty to use {CREDENTIAL_ENV_VARS[provider]}):")
		).strip()
		if api_key:
			values["api_keys"] = {provider: api_key}
	else:
		url = _ask(questionary.text("Ollama server URL:", default=DEFAULT_OLLAMA_URL)).strip()
		if url:
			values["ollama_url"] = url

	values["language"] = _ask(questionary.select("Message language:", choices=["english", "korean"]))

	model = _ask(questionary.text("Model:", default=DEFAULT_MODELS[provider])).strip()
	if model:
		values["model"] = model
	return values


def _config_command_impl() -> None:
	"""Actual implementation of the config command."""
	from commitcraft.config import save_user_config
	from commitcraft.exceptions import ConfigError
	from commitcraft.utils.cli_utils import exit_with_error, handle_keyboard_interrupt

	try:
		values = collect_answers()
		path = save_user_config(values)
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except ConfigError as e:
		exit_with_error(str(e), exception=e)
	else:
		console.print(f"[green]Configuration saved to {path}[/green]")
