"""TerminalPresenter — full-screen Rich ``Live`` display with keyboard input.

The presenter takes over the terminal for the lifetime of a ``with`` block:
stdin is switched to non-canonical, no-echo mode so single key presses can
be read without Enter, and a ``Live`` display is started on the alternate
screen.  Both are undone on exit.

Keys
----
- ``q`` / ``Q`` / ``Ctrl-C`` : quit
- ``r`` / ``R``              : refresh now

Resize events are detected by polling ``Console.size`` between key reads.
"""

from __future__ import annotations

import logging
import os
import select
import sys
from collections.abc import Iterator
from typing import IO, Any

from rich.console import Console
from rich.live import Live

from monocle.models.builds import DisplayModel
from monocle.monitor.presenter import PresenterEvent
from monocle.monitor.renderer import BuildTableRenderer

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 0.1

_KEY_EVENTS: dict[str, PresenterEvent] = {
    "q": PresenterEvent.QUIT,
    "Q": PresenterEvent.QUIT,
    "\x03": PresenterEvent.QUIT,  # Ctrl-C when ISIG is off
    "r": PresenterEvent.REFRESH,
    "R": PresenterEvent.REFRESH,
}


class PresentationInitError(RuntimeError):
    """Raised when the terminal cannot be prepared for the dashboard."""


def key_event(char: str) -> PresenterEvent | None:
    """Map a single input character to a presenter event, if any."""
    return _KEY_EVENTS.get(char)


class TerminalPresenter:
    """Draws display models full-screen and yields keyboard/resize events.

    Parameters
    ----------
    console:
        Rich Console to draw on.  A new one is created if not provided.
    renderer:
        Turns display models into renderables.
    stdin:
        Input stream for key presses.  Must be a tty.
    """

    def __init__(
        self,
        console: Console | None = None,
        renderer: BuildTableRenderer | None = None,
        stdin: IO[str] | None = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self._console = console or Console()
        self._renderer = renderer or BuildTableRenderer()
        self._stdin = stdin or sys.stdin
        self._poll_interval = poll_interval
        self._live: Live | None = None
        self._saved_tty: list[Any] | None = None
        self._last_size = self._console.size

    # ------------------------------------------------------------------
    # Terminal lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> TerminalPresenter:
        if not self._console.is_terminal or not self._stdin.isatty():
            raise PresentationInitError("monocle must be run in an interactive terminal")

        try:
            import termios
        except ImportError as exc:
            raise PresentationInitError(
                "keyboard input requires a POSIX terminal (termios unavailable)"
            ) from exc

        fd = self._stdin.fileno()
        try:
            self._saved_tty = termios.tcgetattr(fd)
            mode = termios.tcgetattr(fd)
            # Disable canonical mode and echo; leave signals (Ctrl-C) intact.
            mode[3] &= ~(termios.ICANON | termios.ECHO)
            mode[6][termios.VMIN] = 0
            mode[6][termios.VTIME] = 0
            termios.tcsetattr(fd, termios.TCSADRAIN, mode)
        except termios.error as exc:
            self._saved_tty = None
            raise PresentationInitError(f"initializing terminal failed: {exc}") from exc

        live = Live(console=self._console, screen=True, auto_refresh=False)
        try:
            live.start()
        except Exception as exc:
            self._restore_tty()
            raise PresentationInitError(f"initializing terminal failed: {exc}") from exc

        self._live = live
        self._last_size = self._console.size
        logger.debug("Terminal presenter started (%dx%d)", *self._last_size)
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
        self._restore_tty()
        logger.debug("Terminal presenter stopped")

    def _restore_tty(self) -> None:
        if self._saved_tty is None:
            return
        import termios

        termios.tcsetattr(self._stdin.fileno(), termios.TCSADRAIN, self._saved_tty)
        self._saved_tty = None

    # ------------------------------------------------------------------
    # Presenter protocol
    # ------------------------------------------------------------------

    def render(self, model: DisplayModel) -> None:
        self._require_live().update(self._renderer.render(model), refresh=True)

    def clear(self) -> None:
        self._require_live()
        self._console.clear()

    def events(self) -> Iterator[PresenterEvent]:
        """Yield key and resize events until the caller stops iterating."""
        fd = self._stdin.fileno()
        while True:
            size = self._console.size
            if size != self._last_size:
                self._last_size = size
                yield PresenterEvent.RESIZE
                continue

            ready, _, _ = select.select([fd], [], [], self._poll_interval)
            if not ready:
                continue
            try:
                data = os.read(fd, 32).decode("utf-8", errors="ignore")
            except OSError as exc:
                logger.warning("Reading keyboard input failed: %s", exc)
                continue
            for char in data:
                event = key_event(char)
                if event is not None:
                    yield event

    def _require_live(self) -> Live:
        if self._live is None:
            raise RuntimeError("TerminalPresenter used outside its context manager")
        return self._live
