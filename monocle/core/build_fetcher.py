"""BuildFetcher — one CircleCI query per refresh cycle, with an error policy.

Under the default ``DEGRADE`` policy a failed query is logged and turned
into an empty build list, so the dashboard keeps running and simply shows
an empty table until the next cycle.  ``PROPAGATE`` raises ``FetchError``
instead and leaves the decision to the caller.
"""

from __future__ import annotations

import logging
from typing import Protocol

from monocle.bridge.circleci_client import CircleCIError
from monocle.config import DEFAULT_PAGE_SIZE, FetchErrorPolicy
from monocle.models.builds import RawBuild
from monocle.models.project import ProjectRef

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised by ``BuildFetcher.fetch`` under the ``PROPAGATE`` policy."""


class BuildSource(Protocol):
    """Anything that can list recent builds — ``CircleCIClient`` in production."""

    def list_recent_builds_for_project(
        self,
        user: str,
        project: str,
        branch: str,
        *,
        limit: int = ...,
        offset: int = ...,
        vcs_type: str = ...,
    ) -> list[RawBuild]:
        ...


class BuildFetcher:
    """Fetches the most recent builds of a project branch.

    Parameters
    ----------
    source:
        The CircleCI client (or a test double).
    policy:
        What to do when the query fails.
    page_size:
        Number of builds requested, always starting at offset 0.
    """

    def __init__(
        self,
        source: BuildSource,
        policy: FetchErrorPolicy = FetchErrorPolicy.DEGRADE,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._source = source
        self._policy = policy
        self._page_size = page_size

    @property
    def policy(self) -> FetchErrorPolicy:
        return self._policy

    def fetch(self, ref: ProjectRef) -> list[RawBuild]:
        """Return up to ``page_size`` recent builds for *ref*.

        Raises
        ------
        FetchError
            Only under ``FetchErrorPolicy.PROPAGATE``.
        """
        try:
            return self._source.list_recent_builds_for_project(
                ref.user,
                ref.project_name,
                ref.branch,
                limit=self._page_size,
                offset=0,
                vcs_type=ref.vcs_type,
            )
        except CircleCIError as exc:
            if self._policy is FetchErrorPolicy.PROPAGATE:
                raise FetchError(
                    f"fetching builds for {ref.slug}@{ref.branch} failed: {exc}"
                ) from exc
            logger.warning(
                "Fetching builds for %s@%s failed, showing empty table: %s",
                ref.slug,
                ref.branch,
                exc,
            )
            return []
