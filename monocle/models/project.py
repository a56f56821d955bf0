"""Project identity resolved from local repository metadata."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProjectRef(BaseModel):
    """The organization/repository/branch triple a dashboard session watches.

    Created once at startup and shared by every refresh cycle.  All three
    identity fields are non-empty; a partially resolved project is never
    constructed.
    """

    model_config = ConfigDict(frozen=True)

    user: str = Field(min_length=1)
    project_name: str = Field(min_length=1)
    branch: str = Field(min_length=1)
    vcs_type: str = "github"  # path segment required by the CircleCI v1.1 API

    @property
    def slug(self) -> str:
        """``user/project_name`` as shown on the CI provider."""
        return f"{self.user}/{self.project_name}"
