"""
Logging setup for CommitCraft.

Console output goes through rich. A log file can be added with ``--save-log``,
which is mostly useful for provider failures and hook runs.

"""

from __future__ import annotations

import datetime
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.rule import Rule
from rich.text import Text

console = Console(stderr=True)

LOG_DIR = Path("logs")
FILE_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d %(message)s"

# Only interesting in verbose mode
NOISY_LOGGERS = ("litellm", "LiteLLM", "httpx", "httpcore", "urllib3", "requests", "openai")


def timestamped_log_path(log_dir: Path = LOG_DIR) -> Path:
	"""Return ``<log_dir>/commitcraft_<UTC timestamp>.log``."""
	stamp = datetime.datetime.now(tz=datetime.UTC).strftime("%Y-%m-%d_%H-%M-%S")
	return log_dir / f"commitcraft_{stamp}.log"


def _file_handler(log_file_path: Path) -> logging.Handler:
	log_file_path.parent.mkdir(parents=True, exist_ok=True)
	handler = logging.FileHandler(log_file_path, mode="a", encoding="utf-8")
	handler.setLevel(logging.DEBUG)
	handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
	return handler


def setup_logging(
	is_verbose: bool = False,
	log_to_console: bool = True,
	log_file_path: Path | str | None = None,
) -> None:
	"""
	Configure the root logger for a CLI run.

	Existing root handlers are replaced, so calling this twice does not
	duplicate output.

	Args:
	    is_verbose: Log at DEBUG instead of WARNING and keep third-party loggers audible
	    log_to_console: Attach a rich console handler
	    log_file_path: Also write every record to this file

	"""
	level = logging.DEBUG if is_verbose else logging.WARNING
	root_logger = logging.getLogger()
	root_logger.setLevel(level)
	for handler in root_logger.handlers[:]:
		root_logger.removeHandler(handler)

	if log_to_console:
		root_logger.addHandler(
			RichHandler(
				console=console,
				level=level,
				rich_tracebacks=True,
				show_time=is_verbose,
				show_path=is_verbose,
			)
		)

	if log_file_path:
		path = Path(log_file_path)
		try:
			root_logger.addHandler(_file_handler(path))
		except OSError as e:
			console.print(f"[red]Could not write log file {path}: {e}[/red]")
		else:
			root_logger.debug("Logging to file: %s", path)

	noisy_level = logging.NOTSET if is_verbose else logging.ERROR
	for name in NOISY_LOGGERS:
		logging.getLogger(name).setLevel(noisy_level)


def _display_summary(title: str, message: str, style: str) -> None:
	console.print()
	console.print(Rule(Text(title, style=f"bold {style}"), style=style))
	console.print(f"\n{message}\n", markup=False)
	console.print(Rule(style=style))
	console.print()


def display_error_summary(error_message: str) -> None:
	"""Print ``error_message`` between red rules."""
	_display_summary("Error Summary", error_message, "red")


def display_warning_summary(warning_message: str) -> None:
	"""Print ``warning_message`` between yellow rules."""
	_display_summary("Warning Summary", warning_message, "yellow")
