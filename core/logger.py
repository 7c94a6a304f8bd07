"""
Ledgerline - Logging System
Timestamped rich console output on stderr + diagnostic file log

Console lines never go to stdout, which carries tool results.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "timestamp": "dim white",
    "header": "bold magenta",
    "config": "dim cyan",
})

console = Console(theme=THEME, stderr=True)

_logger: Optional[logging.Logger] = None

RULE = "=" * 60


def setup_logging(
    log_file_path: Path,
    level: str = "INFO",
    log_to_file: bool = True,
    log_to_console: bool = True
) -> logging.Logger:
    """
    Initialize the logging system.

    Args:
        log_file_path: Path to the diagnostic log file
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_to_file: Whether to write logs to file
        log_to_console: Whether to write logs to the rich console

    Returns:
        Configured "ledgerline" logger
    """
    global _logger

    _logger = logging.getLogger("ledgerline")
    _logger.setLevel(getattr(logging, level.upper()))
    _logger.handlers.clear()
    console.quiet = not log_to_console

    if log_to_file:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "[%(asctime)s] %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        _logger.addHandler(file_handler)

    return _logger


def get_timestamp() -> str:
    """Console timestamp (HH:MM:SS)."""
    return datetime.now().strftime("%H:%M:%S")


def _to_file(level: int, *lines: str) -> None:
    if _logger:
        for line in lines:
            _logger.log(level, line)


def log(message: str, level: str = "info", prefix: str = "") -> None:
    """
    Log a message to both console and file.

    Args:
        message: The message to log
        level: info, warning or error
        prefix: Optional emoji shown before the message
    """
    style = level if level in ("info", "warning", "error") else "info"
    text = f"{prefix} {message}" if prefix else message
    # Messages carry literal brackets ([ref=e4], [Browser]) that must not parse as markup
    console.print(
        f"[timestamp][{get_timestamp()}][/timestamp] {escape(text)}",
        style=style,
        highlight=False,
    )
    _to_file(getattr(logging, level.upper(), logging.INFO), text)


def log_info(message: str, prefix: str = "") -> None:
    log(message, "info", prefix)


def log_success(message: str, prefix: str = "") -> None:
    log(message, "info", prefix or "✅")


def log_warning(message: str, prefix: str = "") -> None:
    log(message, "warning", prefix or "⚠️")


def log_error(message: str, prefix: str = "") -> None:
    log(message, "error", prefix or "❌")


def log_debug(message: str) -> None:
    """File only; never printed."""
    _to_file(logging.DEBUG, message)


def _banner(title: str, timestamped: bool) -> None:
    stamp = f"[timestamp][{get_timestamp()}][/timestamp] " if timestamped else ""
    console.print()
    for line in (RULE, escape(title), RULE):
        console.print(f"{stamp}[header]{line}[/header]")
    _to_file(logging.INFO, RULE, title, RULE)


def log_header(title: str) -> None:
    """Ruled section header."""
    _banner(title, timestamped=False)


def log_startup_banner(version: str, project_name: str) -> None:
    """Ruled banner naming the project and version."""
    _banner(f"📈 {project_name} - v{version} - Agent Tool Surface", timestamped=True)


def log_section(title: str, emoji: str = "📋") -> None:
    console.print(f"\n[timestamp][{get_timestamp()}][/timestamp] [header]{emoji} {escape(title)}:[/header]")
    _to_file(logging.INFO, f"{title}:")


def log_config(key: str, value: str) -> None:
    """One "key: value" configuration line."""
    console.print(f"[timestamp][{get_timestamp()}][/timestamp] [config]{key}: {escape(str(value))}[/config]")
    _to_file(logging.INFO, f"{key}: {value}")
