"""Utility functions for CLI operations in CommitCraft."""

from __future__ import annotations

import contextlib
import logging
import os
from typing import TYPE_CHECKING

import typer

from commitcraft.llm.errors import ErrorKind, LLMError
from commitcraft.utils.log_setup import console, display_error_summary, display_warning_summary

if TYPE_CHECKING:
	from collections.abc import Iterator

logger = logging.getLogger(__name__)

REMEDIATION_HINTS: dict[ErrorKind, str] = {
	ErrorKind.AUTHENTICATION: "Check the API key in {key_hint} or run: commitcraft config",
	ErrorKind.RATE_LIMITED: "Rate limit exceeded. Wait a moment and try again.",
	ErrorKind.CONNECTION_REFUSED: "Cannot reach the provider. Is the server at {endpoint} running?",
	ErrorKind.MODEL_NOT_FOUND: "Pick another model with --model, or install it first (ollama pull <model>).",
	ErrorKind.MISSING_CREDENTIAL: (
		"Set {key_hint}, add it under api_keys in the config file, or run: commitcraft config"
	),
	ErrorKind.INVALID_RESPONSE: "The model returned malformed output. Try again or use a different model.",
	ErrorKind.EMPTY_RESPONSE: "The model returned an empty response. Try again or use a different model.",
}


def describe_llm_error(error: LLMError, *, key_hint: str = "the API key variable", endpoint: str = "") -> str:
	"""Combine an LLM error with the remediation hint for its kind."""
	hint = REMEDIATION_HINTS.get(error.kind)
	if hint is None:
		return str(error)
	return f"{error}\n\n{hint.format(key_hint=key_hint, endpoint=endpoint or 'the configured URL')}"


def _spinner_disabled() -> bool:
	return bool(os.environ.get("PYTEST_CURRENT_TEST") or os.environ.get("CI")) or not console.is_terminal


@contextlib.contextmanager
def loading_spinner(message: str = "Processing...") -> Iterator[None]:
	"""Show a rich spinner with ``message`` while the block runs, when attached to a terminal."""
	if _spinner_disabled():
		yield
		return

	with console.status(message):
		yield


def show_warning(message: str) -> None:
	"""Print a warning panel."""
	display_warning_summary(message)


def exit_with_error(message: str, exit_code: int = 1, exception: Exception | None = None) -> None:
	"""
	Print an error panel and leave the command.

	Args:
	        message: What went wrong, shown to the user
	        exit_code: Process exit status
	        exception: The cause; its traceback is logged at debug level

	Raises:
	        typer.Exit: Always

	"""
	if exception is not None:
		logger.debug("Exiting after error", exc_info=exception)
	display_error_summary(message)
	raise typer.Exit(exit_code) from exception


def handle_keyboard_interrupt() -> None:
	"""Report a cancelled command and exit with 130."""
	console.print("\n[yellow]Cancelled.[/yellow]")
	raise typer.Exit(130)
