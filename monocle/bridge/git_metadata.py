"""Resolve the watched project from the local git checkout.

Runs two read-only git queries: the ``origin`` remote URL and the current
branch. They are combined into a ``ProjectRef``.  Resolution is all or
nothing: any failure raises ``ResolutionError`` and no partial project is
produced.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from pydantic import ValidationError

from monocle.models.project import ProjectRef

logger = logging.getLogger(__name__)

REMOTE_URL_COMMAND: tuple[str, ...] = ("git", "config", "--get", "remote.origin.url")
CURRENT_BRANCH_COMMAND: tuple[str, ...] = ("git", "rev-parse", "--abbrev-ref", "HEAD")

# <host>.<tld>(:|/)<org>/<repo>, matching both SSH and HTTPS remotes.
_REMOTE_PATTERN = re.compile(
    r"(?P<host>[a-zA-Z0-9]*\.[a-zA-Z0-9]*)(?::|/)"
    r"(?P<org>[a-zA-Z0-9\-_]*)/(?P<repo>[a-zA-Z0-9\-_]*)"
)

_VCS_TYPES: dict[str, str] = {
    "github.com": "github",
    "bitbucket.org": "bitbucket",
}

CommandRunner = Callable[..., "subprocess.CompletedProcess[str]"]


class ResolutionError(RuntimeError):
    """Raised when git metadata is unavailable or cannot be parsed.

    Fatal at startup: the dashboard cannot know what to watch.
    """


def parse_remote_url(remote_url: str) -> tuple[str, str, str]:
    """Extract ``(host, org, repo)`` from a git remote URL.

    Raises
    ------
    ResolutionError
        If the URL does not contain an ``<org>/<repo>`` pair after a host.
    """
    match = _REMOTE_PATTERN.search(remote_url.strip())
    if match is None or not match.group("org") or not match.group("repo"):
        raise ResolutionError(
            f"could not determine organization/repository from remote {remote_url.strip()!r}"
        )
    return match.group("host").lower(), match.group("org"), match.group("repo")


class GitProjectResolver:
    """Derives the ``ProjectRef`` for the repository in *cwd*.

    The first successful result is cached; later calls return it without
    invoking git again.

    Parameters
    ----------
    cwd:
        Directory to run git in.  Defaults to the process working directory.
    runner:
        Callable with the ``subprocess.run`` signature.  Injected by tests.
    """

    def __init__(
        self,
        cwd: Path | None = None,
        runner: CommandRunner = subprocess.run,
    ) -> None:
        self._cwd = cwd
        self._runner = runner
        self._resolved: ProjectRef | None = None

    def resolve(self) -> ProjectRef:
        """Return the project for the current checkout.

        Raises
        ------
        ResolutionError
            If either git query fails or its output cannot be parsed.
        """
        if self._resolved is not None:
            return self._resolved

        remote_url = self._query(REMOTE_URL_COMMAND)
        branch = self._query(CURRENT_BRANCH_COMMAND)

        host, org, repo = parse_remote_url(remote_url)
        if not branch:
            raise ResolutionError("could not determine the current branch")

        try:
            ref = ProjectRef(
                user=org,
                project_name=repo,
                branch=branch,
                vcs_type=_VCS_TYPES.get(host, "github"),
            )
        except ValidationError as exc:
            raise ResolutionError(f"incomplete project metadata: {exc}") from exc

        logger.info("Resolved project %s on branch %s", ref.slug, ref.branch)
        self._resolved = ref
        return ref

    def _query(self, command: Sequence[str]) -> str:
        """Run a git command and return its stripped stdout."""
        try:
            result = self._runner(
                list(command),
                cwd=self._cwd,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            raise ResolutionError(
                f"{' '.join(command)} failed with exit code {exc.returncode}"
                + (f": {stderr}" if stderr else "")
            ) from exc
        except OSError as exc:
            raise ResolutionError(f"could not run {command[0]}: {exc}") from exc
        return (result.stdout or "").strip()
