"""Build records as returned by CircleCI and as shown on screen.

``RawBuild`` mirrors the subset of the CircleCI v1.1 build summary the
dashboard needs.  ``BuildRow`` and ``DisplayModel`` are the display-side
projection: a fresh, frozen ``DisplayModel`` is produced on every refresh
cycle and handed to the presenter as a whole.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class ColorClass(str, Enum):
    """Status colouring for a single table row."""

    NEUTRAL = "neutral"
    SUCCESS = "success"
    FAILURE = "failure"


# Statuses that colour a row; anything else is NEUTRAL.
FAILURE_STATUSES: frozenset[str] = frozenset({"failed"})
SUCCESS_STATUSES: frozenset[str] = frozenset({"fixed", "success"})

HEADER_ROW: tuple[str, str, str, str, str] = (
    "build_num",
    "job",
    "state",
    "duration",
    "url",
)


class WorkflowInfo(BaseModel):
    """Workflow metadata attached to a build (CircleCI 2.0 workflows)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    job_name: str = ""
    workflow_name: str = ""

    @field_validator("job_name", "workflow_name", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class RawBuild(BaseModel):
    """One build summary from the CI provider.

    Unknown keys in the provider payload are ignored.  Transient: owned by
    a single fetch cycle and discarded once the display model is built.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    build_num: int
    status: str = ""
    job_name: str | None = None
    workflows: WorkflowInfo | None = None
    start_time: datetime | None = None
    stop_time: datetime | None = None
    build_url: str = ""

    # The API sends null for fields it has not filled in yet.
    @field_validator("status", "build_url", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class BuildRow(BaseModel):
    """A single formatted table row with its colour classification."""

    model_config = ConfigDict(frozen=True)

    job_name: str
    build_num: str
    status: str
    duration: str
    url: str
    color_class: ColorClass = ColorClass.NEUTRAL

    def cells(self) -> tuple[str, str, str, str, str]:
        """Cell values in ``HEADER_ROW`` column order."""
        return (self.build_num, self.job_name, self.status, self.duration, self.url)


class DisplayModel(BaseModel):
    """Immutable snapshot of everything the presenter draws in one frame."""

    model_config = ConfigDict(frozen=True)

    title: str
    header_row: tuple[str, str, str, str, str] = HEADER_ROW
    rows: tuple[BuildRow, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.rows
