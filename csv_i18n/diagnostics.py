"""Advisory messages produced while converting CSV translation tables."""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class Diagnostic:
    """
    A single advisory message.

    ``level`` is a standard logging level. ``source`` and ``row`` locate the
    problem when it belongs to one CSV file or one line of it; ``message``
    is complete on its own.
    """
    level: int
    message: str
    source: Optional[str] = None
    row: Optional[int] = None


def warning(message: str, source: Optional[str] = None, row: Optional[int] = None) -> Diagnostic:
    return Diagnostic(logging.WARNING, message, source, row)


def error(message: str, source: Optional[str] = None, row: Optional[int] = None) -> Diagnostic:
    return Diagnostic(logging.ERROR, message, source, row)


def report_diagnostics(diagnostics: Iterable[Diagnostic], logger: logging.Logger) -> int:
    """
    Log every diagnostic at its own level.

    Returns:
        int: The number of diagnostics reported.
    """
    count = 0
    for diagnostic in diagnostics:
        logger.log(diagnostic.level, diagnostic.message)
        count += 1
    return count
