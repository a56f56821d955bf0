"""Shared test fixtures for monocle."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from typing import Any

import pytest

from monocle.models.builds import DisplayModel, RawBuild
from monocle.models.project import ProjectRef
from monocle.monitor.presenter import PresenterEvent

FIXED_NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep the developer's CircleCI token and .env file out of tests."""
    for name in (
        "CIRCLECI_TOKEN",
        "MONOCLE_CIRCLE_TOKEN",
        "CIRCLE_TOKEN",
        "MONOCLE_UPDATE_INTERVAL",
        "MONOCLE_ON_FETCH_ERROR",
        "MONOCLE_PAGE_SIZE",
        "MONOCLE_CIRCLE_HOST",
        "MONOCLE_LOG_FILE",
        "MONOCLE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

    # The CLI detaches the package logger from the root; undo that per test.
    package_logger = logging.getLogger("monocle")
    monkeypatch.setattr(package_logger, "propagate", True)
    monkeypatch.setattr(package_logger, "handlers", list(package_logger.handlers))


@pytest.fixture
def project_ref() -> ProjectRef:
    """Provide a resolved project for fetch and build tests."""
    return ProjectRef(user="acme", project_name="widgets", branch="main")


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """A clock frozen at ``FIXED_NOW``."""
    return lambda: FIXED_NOW


@pytest.fixture
def make_raw_build() -> Callable[..., RawBuild]:
    """Factory fixture: build a RawBuild with sensible defaults."""

    def _factory(build_num: int = 1, status: str = "success", **overrides: Any) -> RawBuild:
        defaults: dict[str, Any] = {
            "build_num": build_num,
            "status": status,
            "build_url": f"https://circleci.com/gh/acme/widgets/{build_num}",
        }
        defaults.update(overrides)
        return RawBuild(**defaults)

    return _factory


class RecordingPresenter:
    """In-memory presenter that records every call in order."""

    def __init__(self, events: list[PresenterEvent] | None = None) -> None:
        self.calls: list[str] = []
        self.models: list[DisplayModel] = []
        self._events = list(events or [])
        self._lock = threading.Lock()

    def render(self, model: DisplayModel) -> None:
        with self._lock:
            self.calls.append("render")
            self.models.append(model)

    def clear(self) -> None:
        with self._lock:
            self.calls.append("clear")

    def events(self) -> Iterator[PresenterEvent]:
        yield from self._events


class StaticBuildSource:
    """Build source returning a fixed list and recording its queries."""

    def __init__(self, builds: list[RawBuild] | None = None, error: Exception | None = None) -> None:
        self.builds = list(builds or [])
        self.error = error
        self.queries: list[dict[str, Any]] = []

    def list_recent_builds_for_project(
        self,
        user: str,
        project: str,
        branch: str,
        *,
        limit: int = 30,
        offset: int = 0,
        vcs_type: str = "github",
    ) -> list[RawBuild]:
        self.queries.append(
            {
                "user": user,
                "project": project,
                "branch": branch,
                "limit": limit,
                "offset": offset,
                "vcs_type": vcs_type,
            }
        )
        if self.error is not None:
            raise self.error
        return list(self.builds)


@pytest.fixture
def recording_presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def build_source() -> StaticBuildSource:
    return StaticBuildSource()


@pytest.fixture
def make_presenter() -> Callable[..., RecordingPresenter]:
    """Factory fixture: a RecordingPresenter that yields the given events."""
    return RecordingPresenter


@pytest.fixture
def make_build_source() -> Callable[..., StaticBuildSource]:
    """Factory fixture: a StaticBuildSource with canned builds or an error."""
    return StaticBuildSource
