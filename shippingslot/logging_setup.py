"""
Logging configuration for the command line application.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str, console: Console) -> None:
    """Route all ``shippingslot`` loggers through a rich handler on ``console``."""
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    package_logger = logging.getLogger("shippingslot")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
