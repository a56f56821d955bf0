"""Tests for the TerminalPresenter — key mapping, events and init failures."""

from __future__ import annotations

import io
import itertools
import os
import sys

import pytest
from rich.console import Console

from monocle.models.builds import DisplayModel
from monocle.monitor.presenter import Presenter, PresenterEvent
from monocle.monitor.terminal import PresentationInitError, TerminalPresenter, key_event

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="select() on pipes is POSIX-only")


@pytest.fixture
def pipe_stdin():
    """A readable pipe standing in for the keyboard, plus its write end."""
    read_fd, write_fd = os.pipe()
    reader = os.fdopen(read_fd, "r")
    yield reader, write_fd
    reader.close()
    os.close(write_fd)


def _console() -> Console:
    return Console(file=io.StringIO(), width=80, height=24)


class TestKeyMapping:
    @pytest.mark.parametrize("char", ["q", "Q", "\x03"])
    def test_quit_keys(self, char: str):
        assert key_event(char) is PresenterEvent.QUIT

    @pytest.mark.parametrize("char", ["r", "R"])
    def test_refresh_keys(self, char: str):
        assert key_event(char) is PresenterEvent.REFRESH

    @pytest.mark.parametrize("char", ["x", " ", "\n", "\x1b"])
    def test_other_keys_ignored(self, char: str):
        assert key_event(char) is None


class TestProtocol:
    def test_satisfies_presenter_protocol(self):
        assert isinstance(TerminalPresenter(console=_console(), stdin=io.StringIO()), Presenter)


class TestInitFailures:
    def test_non_terminal_console(self):
        presenter = TerminalPresenter(console=_console(), stdin=io.StringIO())
        with pytest.raises(PresentationInitError, match="interactive terminal"):
            presenter.__enter__()

    def test_non_tty_stdin(self):
        console = Console(file=io.StringIO(), force_terminal=True, width=80, height=24)
        presenter = TerminalPresenter(console=console, stdin=io.StringIO())
        with pytest.raises(PresentationInitError):
            with presenter:
                pass  # pragma: no cover

    def test_render_requires_context(self):
        presenter = TerminalPresenter(console=_console(), stdin=io.StringIO())
        with pytest.raises(RuntimeError, match="outside its context manager"):
            presenter.render(DisplayModel(title="t"))


@posix_only
class TestEvents:
    def test_keys_become_events(self, pipe_stdin):
        reader, write_fd = pipe_stdin
        presenter = TerminalPresenter(console=_console(), stdin=reader, poll_interval=0.01)
        os.write(write_fd, b"xrq")

        events = list(itertools.islice(presenter.events(), 2))
        assert events == [PresenterEvent.REFRESH, PresenterEvent.QUIT]

    def test_size_change_becomes_resize(self, pipe_stdin):
        reader, _ = pipe_stdin
        console = _console()
        presenter = TerminalPresenter(console=console, stdin=reader, poll_interval=0.01)
        console.size = (120, 40)

        assert next(presenter.events()) is PresenterEvent.RESIZE

    def test_resize_reported_once(self, pipe_stdin):
        reader, write_fd = pipe_stdin
        console = _console()
        presenter = TerminalPresenter(console=console, stdin=reader, poll_interval=0.01)
        events = presenter.events()

        console.size = (120, 40)
        assert next(events) is PresenterEvent.RESIZE
        os.write(write_fd, b"q")
        assert next(events) is PresenterEvent.QUIT
