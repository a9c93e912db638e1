"""Logging setup for the CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(*, level: int = logging.WARNING, force: bool = False) -> None:
    """Send log records to stderr through rich. ``--debug`` passes DEBUG."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=force,
    )
    # request lines from httpx are noise below DEBUG
    logging.getLogger("httpx").setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
