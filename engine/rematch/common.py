"""Shared utilities: console output, prompts, logging setup.

Used by the CLI and the app factory. Commands should import from here rather
than building their own consoles or handlers.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

# ---------------------------------------------------------------------------
# Console singleton
# ---------------------------------------------------------------------------
console = Console()

# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def print_header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold]{title}[/bold]", border_style="blue", expand=True))
    console.print()


def print_success(msg: str) -> None:
    console.print(f"[bold green]✔ {msg}[/bold green]")


def print_error(msg: str) -> None:
    console.print(f"[bold red]✖ {msg}[/bold red]")


def print_detail(msg: str) -> None:
    console.print(f"  {msg}")


def die(msg: str, code: int = 1) -> None:
    print_error(msg)
    sys.exit(code)


# ---------------------------------------------------------------------------
# Prompt helpers
# ---------------------------------------------------------------------------


def confirm(msg: str, default: bool = False) -> bool:
    return Confirm.ask(f"[bold]{msg}[/bold]", default=default)


def prompt_input(msg: str, default: str = "") -> str:
    return Prompt.ask(f"[bold]{msg}[/bold]", default=default or None) or ""


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def init_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the ``rematch`` logger once, writing to stderr."""
    from .config import settings

    logger = logging.getLogger("rematch")
    logger.setLevel((level or settings.log_level).upper())
    if logger.handlers:
        return logger

    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(stream)
    return logger
