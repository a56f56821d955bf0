"""Minimal CircleCI v1.1 REST client.

Only the one query the dashboard needs is implemented: the recent builds of
a project branch.  Every failure mode (transport error, non-2xx status,
unexpected JSON shape, or a record that does not validate) surfaces as a
single ``CircleCIError`` so callers can apply one error policy.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from monocle.models.builds import RawBuild

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://circleci.com/api/v1.1"
USER_AGENT = "monocle"


class CircleCIError(RuntimeError):
    """Raised when a CircleCI API query fails for any reason."""


class CircleCIClient:
    """Authenticated CircleCI API client backed by ``httpx.Client``.

    Parameters
    ----------
    token:
        Personal API token, sent as the ``Circle-Token`` header.
    base_url:
        API root, e.g. ``https://circleci.com/api/v1.1``.
    timeout:
        Per-request timeout in seconds.
    transport:
        Optional ``httpx`` transport; tests pass ``httpx.MockTransport``.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={
                "Circle-Token": token,
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> CircleCIClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

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
        """Return up to *limit* most recent builds of *branch*, newest first."""
        path = (
            f"/project/{quote(vcs_type, safe='')}/{quote(user, safe='')}"
            f"/{quote(project, safe='')}/tree/{quote(branch, safe='')}"
        )
        params = {"limit": limit, "offset": offset, "shallow": "true"}

        payload = self._get_json(path, params)
        if not isinstance(payload, list):
            raise CircleCIError(
                f"unexpected response for {path}: expected a list, got {type(payload).__name__}"
            )

        try:
            builds = [RawBuild.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise CircleCIError(f"malformed build record from {path}: {exc}") from exc

        logger.debug("Fetched %d builds from %s", len(builds), path)
        return builds

    def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        try:
            response = self._http.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise CircleCIError(
                f"GET {path} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise CircleCIError(f"GET {path} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise CircleCIError(f"GET {path} returned invalid JSON") from exc
