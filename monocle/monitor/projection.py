"""DisplayModelBuilder — pure projection of raw builds into a display model.

The builder does not keep state between calls.  Given the same project,
builds and clock reading it always produces the same ``DisplayModel``;
the only time-dependent value is the elapsed time of builds that are still
running, which is measured against the injected clock at build time.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone

from monocle.core.durations import format_duration
from monocle.models.builds import (
    FAILURE_STATUSES,
    HEADER_ROW,
    SUCCESS_STATUSES,
    BuildRow,
    ColorClass,
    DisplayModel,
    RawBuild,
)
from monocle.models.project import ProjectRef

DEFAULT_JOB_NAME = "build"
NO_DURATION = "n/a"

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def classify_status(status: str) -> ColorClass:
    """Map a CircleCI status string to a row colour.

    Classification depends on the status alone.
    """
    if status in FAILURE_STATUSES:
        return ColorClass.FAILURE
    if status in SUCCESS_STATUSES:
        return ColorClass.SUCCESS
    return ColorClass.NEUTRAL


def resolve_job_name(build: RawBuild) -> str:
    """Explicit job name, else the workflow job name, else ``"build"``."""
    if build.job_name is not None:
        return build.job_name
    if build.workflows is not None and build.workflows.job_name:
        return build.workflows.job_name
    return DEFAULT_JOB_NAME


def format_title(ref: ProjectRef) -> str:
    return f"builds for {ref.user}/{ref.project_name}/tree/{ref.branch}"


class DisplayModelBuilder:
    """Turns ``RawBuild`` records into a frozen ``DisplayModel``.

    Parameters
    ----------
    clock:
        Returns the current time (timezone-aware).  Used for the elapsed
        time of in-progress builds.  Defaults to UTC wall-clock time.
    """

    def __init__(self, clock: Clock = _utcnow) -> None:
        self._clock = clock

    def build(self, ref: ProjectRef, raws: Sequence[RawBuild]) -> DisplayModel:
        """Project *raws*, in order, into a display model for *ref*.

        An empty sequence yields a model with the header only.
        """
        now = self._clock()
        rows = tuple(self._build_row(raw, now) for raw in raws)
        return DisplayModel(title=format_title(ref), header_row=HEADER_ROW, rows=rows)

    def _build_row(self, raw: RawBuild, now: datetime) -> BuildRow:
        color_class = classify_status(raw.status)
        return BuildRow(
            job_name=resolve_job_name(raw),
            build_num=str(raw.build_num),
            status=raw.status,
            duration=self._duration(raw, now),
            url=raw.build_url,
            color_class=color_class,
        )

    @staticmethod
    def _duration(raw: RawBuild, now: datetime) -> str:
        if raw.start_time is None:
            return NO_DURATION
        if raw.stop_time is not None:
            return format_duration(_difference(raw.stop_time, raw.start_time))
        # Still running; a start in the future (clock skew) reads as zero.
        elapsed = _difference(now, raw.start_time)
        return format_duration(max(elapsed, timedelta(0)))


def _difference(later: datetime, earlier: datetime) -> timedelta:
    """``later - earlier`` that tolerates mixing naive and aware datetimes."""
    if (later.tzinfo is None) != (earlier.tzinfo is None):
        later = _as_utc(later)
        earlier = _as_utc(earlier)
    return later - earlier


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
