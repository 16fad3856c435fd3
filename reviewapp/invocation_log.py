"""Request-scoped invocation log and process logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from reviewapp.models import InvocationResult, Outcome

LOGGER_NAME = "reviewapp"


def configure_logging(verbose: bool = False) -> None:
    """Send the reviewapp logger to stderr through rich."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False, markup=False))
    logger.propagate = False


class InvocationLog:
    """Ordered lines accumulated over one deploy/stop invocation.

    Every exit path returns ``result()``, so callers always see the full
    sequence of lines regardless of where the workflow stopped. Lines are
    mirrored to the ``reviewapp.<component>`` logger.
    """

    def __init__(self, component: str = "workflow") -> None:
        self._logger = logging.getLogger(f"{LOGGER_NAME}.{component}")
        self._lines: list[str] = []
        self._warnings = 0
        self._errors = 0

    def info(self, message: str) -> None:
        self._lines.append(message)
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._warnings += 1
        self._lines.append(f"WARNING: {message}")
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._errors += 1
        self._lines.append(f"ERROR: {message}")
        self._logger.error(message)

    def debug(self, message: str) -> None:
        # Process log only; payload dumps would swamp the CI job output
        self._logger.debug(message)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def outcome(self) -> Outcome:
        if self._errors:
            return Outcome.FAILED
        if self._warnings:
            return Outcome.DEGRADED
        return Outcome.SUCCEEDED

    def result(self) -> InvocationResult:
        return InvocationResult(outcome=self.outcome, lines=self.lines)
