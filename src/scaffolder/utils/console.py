"""Terminal output for the scaffold CLI."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Iterator

from rich.console import Console
from rich.markup import escape
from rich.traceback import Traceback

PREFIX = "scaffold"


class Reporter:
    """Levelled, coloured messages on stderr plus a transient spinner.

    ``verbose`` lines are only shown in debug mode.
    """

    def __init__(self, console: Console | None = None, *, debug: bool = False) -> None:
        self._console = console or Console(stderr=True, highlight=False)
        self.debug = debug

    @property
    def console(self) -> Console:
        return self._console

    def verbose(self, topic: str, message: object = "") -> None:
        if not self.debug:
            return
        self._emit("dim", "verb", f"{topic} {message}".rstrip())

    def info(self, message: str) -> None:
        self._emit("cyan", "info", message)

    def success(self, message: str) -> None:
        self._emit("green", "success", message)

    def warn(self, message: str) -> None:
        self._emit("yellow", "warn", message)

    def error(self, message: str) -> None:
        self._emit("red", "ERR!", message)

    def exception(self, exc: BaseException, message: str | None = None) -> None:
        """Report a failure; the traceback is only printed in debug mode."""
        self.error(message or str(exc) or exc.__class__.__name__)
        if self.debug and exc.__traceback__ is not None:
            self._console.print(Traceback.from_exception(type(exc), exc, exc.__traceback__))

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        if not self._console.is_terminal:
            self.info(message)
            yield
            return
        with self._console.status(escape(message), spinner="line"):
            yield

    def _emit(self, style: str, level: str, message: str) -> None:
        self._console.print(f"[bold]{PREFIX}[/bold] [{style}]{level}[/{style}] {escape(message)}")


def default_reporter(debug: bool = False) -> Reporter:
    return Reporter(Console(file=sys.stderr, highlight=False), debug=debug)


__all__ = ["Reporter", "default_reporter"]
