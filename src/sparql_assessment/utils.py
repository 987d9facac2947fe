"""
Utility helpers: shared console, logging setup, pluralization.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool = False) -> None:
    """Route engine logs through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def pluralize(count, singular: str, plural: str | None = None) -> str:
    """Render ``count`` followed by the right form of ``singular``.

    Examples
    --------
    >>> pluralize(1, "graph")
    '1 graph'
    >>> pluralize(3, "class")
    '3 classes'
    >>> pluralize(0.4, "second")
    '0.4 seconds'
    """
    if count == 1:
        return f"{count} {singular}"
    if plural is None:
        if singular.endswith(("s", "x", "ch", "sh")):
            plural = singular + "es"
        elif singular.endswith("y") and singular[-2:-1] not in "aeiou":
            plural = singular[:-1] + "ies"
        else:
            plural = singular + "s"
    return f"{count} {plural}"
