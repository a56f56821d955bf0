"""Presenter protocol — the boundary between the refresh loop and the screen.

A presenter draws ``DisplayModel`` snapshots and delivers user and
environment events.  ``TerminalPresenter`` is the production
implementation; tests use in-memory doubles.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Protocol, runtime_checkable

from monocle.models.builds import DisplayModel


class PresenterEvent(str, Enum):
    """Events a presenter delivers to the refresh loop."""

    QUIT = "quit"
    REFRESH = "refresh"
    RESIZE = "resize"


@runtime_checkable
class Presenter(Protocol):
    """Protocol every presenter must implement.

    ``render`` and ``clear`` are only ever called by the refresh
    coordinator from inside its guarded section, so implementations need
    no locking of their own.
    """

    def render(self, model: DisplayModel) -> None:
        """Replace whatever is on screen with *model*."""
        ...

    def clear(self) -> None:
        """Blank the drawing surface (after a resize invalidates layout)."""
        ...

    def events(self) -> Iterator[PresenterEvent]:
        """Yield events as they arrive; blocks between events."""
        ...
