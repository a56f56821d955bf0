"""monocle data models — all Pydantic v2, all frozen (immutable)."""

from monocle.models.builds import (
    FAILURE_STATUSES,
    HEADER_ROW,
    SUCCESS_STATUSES,
    BuildRow,
    ColorClass,
    DisplayModel,
    RawBuild,
    WorkflowInfo,
)
from monocle.models.project import ProjectRef

__all__ = [
    # project
    "ProjectRef",
    # builds
    "BuildRow",
    "ColorClass",
    "DisplayModel",
    "FAILURE_STATUSES",
    "HEADER_ROW",
    "RawBuild",
    "SUCCESS_STATUSES",
    "WorkflowInfo",
]
