"""Progress log lines for the extraction and placement phases."""

from __future__ import annotations

import logging
import os
import sys
import threading

_BLUE = "\033[34m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_RESET = "\033[0m"

# Log output goes to stderr (logging.basicConfig default)
_COLOR_ENABLED = sys.stderr.isatty() and os.environ.get("NO_COLOR") is None


def _paint(text: str, color: str) -> str:
    return f"{color}{text}{_RESET}" if _COLOR_ENABLED else text


def format_progress(done: int, total: int, *, width: int = 20) -> str:
    """Render ``[####----]  40% (2/5)``.

    ``done`` is clamped to ``0..total``; a started bar always shows at least
    one filled cell.
    """
    total = max(total, 1)
    done = max(0, min(done, total))
    filled = done * width // total
    if done and not filled:
        filled = 1
    bar = _paint("[" + "#" * filled + "-" * (width - filled) + "]", _BLUE)
    return f"{bar} {round(100 * done / total):3d}% ({done}/{total})"


class ProgressTracker:
    """Counts finished units of one phase and logs a bar line per step.

    Worker threads call :meth:`advance` concurrently.
    """

    def __init__(self, total: int, *, label: str, prefix: str = "  ") -> None:
        self.total = max(int(total), 1)
        self.label = label
        self.done = 0
        self.failed = 0
        self._prefix = prefix
        self._lock = threading.Lock()

    def _line(self, message: str) -> str:
        return f"{self._prefix}{format_progress(self.done, self.total)} {message}"

    def start(self, logger: logging.Logger, detail: str = "") -> None:
        suffix = f" {detail}" if detail else ""
        logger.info("%s: %d item(s)%s", self.label, self.total, suffix)

    def advance(self, logger: logging.Logger, message: str, *, failed: bool = False) -> None:
        with self._lock:
            self.done = min(self.total, self.done + 1)
            if failed:
                self.failed += 1
                logger.warning("%s", self._line(_paint(message, _RED)))
            else:
                logger.info("%s", self._line(message))

    def finish(self, logger: logging.Logger) -> None:
        """Log the phase summary; failures turn it into a warning."""
        with self._lock:
            ok = self.done - self.failed
            summary = f"{self.label} finished: {ok} ok, {self.failed} failed"
            if self.failed:
                logger.warning("%s", summary)
            else:
                logger.info("%s", _paint(summary, _GREEN))


__all__ = ["format_progress", "ProgressTracker"]
