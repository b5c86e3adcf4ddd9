"""
Logging for the document compiler.

Every compilation phase reports through one ``CompilerLogger``. The
``mddoctest`` logger stays silent unless ``verbose`` is set, in which case
phase results go to stderr.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Dict, Generator, Union

LogValue = Union[str, int, float, bool, None]

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CompilerLogger:
    """
    Logger shared by the phases of one compilation.

    Messages take keyword values that are appended as ``key=value`` pairs,
    so phase summaries read ``Scan complete (samples=2)``.
    """

    def __init__(
        self,
        name: str = "mddoctest",
        level: int = logging.INFO,
        verbose: bool = False,
    ):
        self.name = name
        self.level = level
        self.verbose = verbose

        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Clear existing handlers
        self.logger.handlers.clear()
        if verbose:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
            handler.setLevel(level)
            self.logger.addHandler(handler)

    def debug(self, message: str, **values: LogValue) -> None:
        self.logger.debug(self._format_message(message, values))

    def info(self, message: str, **values: LogValue) -> None:
        self.logger.info(self._format_message(message, values))

    def error(self, message: str, **values: LogValue) -> None:
        self.logger.error(self._format_message(message, values))

    def _format_message(self, message: str, values: Dict[str, LogValue]) -> str:
        if not values:
            return message
        pairs = ", ".join(f"{key}={value}" for key, value in values.items())
        return f"{message} ({pairs})"

    @contextmanager
    def time_operation(self, phase: str) -> Generator[None, None, None]:
        """Log how long the enclosed phase took, at DEBUG."""
        started = time.perf_counter()
        try:
            yield
        finally:
            self.debug(f"Operation '{phase}' took {time.perf_counter() - started:.3f}s")

    @contextmanager
    def log_context(self, context_name: str) -> Generator[None, None, None]:
        """Log the start and end of a compilation; failures are logged and re-raised."""
        self.debug(f"Starting: {context_name}")
        try:
            yield
        except Exception as exc:
            self.error(f"Failed: {context_name}", error=str(exc))
            raise
        self.debug(f"Completed: {context_name}")

    def phase_complete(self, phase: str, **counts: int) -> None:
        """Log the result of one compilation phase."""
        self.info(f"{phase} complete", **counts)
