"""``monocle`` — watch the recent CircleCI builds of the current branch.

Resolves the project from the git checkout, then takes over the terminal
and refreshes the build table on a timer, on resize and on ``r`` until
``q`` or Ctrl-C.  With ``--once`` a single snapshot is printed instead.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from monocle.bridge.circleci_client import CircleCIClient
from monocle.bridge.git_metadata import GitProjectResolver, ResolutionError
from monocle.config import ConfigError, FetchErrorPolicy, MonocleConfig, load_config
from monocle.core.build_fetcher import BuildFetcher, FetchError
from monocle.core.refresh_coordinator import RefreshCoordinator
from monocle.monitor.projection import DisplayModelBuilder
from monocle.monitor.renderer import BuildTableRenderer
from monocle.monitor.terminal import PresentationInitError, TerminalPresenter

logger = logging.getLogger(__name__)

console = Console()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def watch_cmd(
    circle_token: str = typer.Option(
        None,
        "--circle-token",
        help="CircleCI API Token, or ENV(CIRCLECI_TOKEN).",
        show_default=False,
    ),
    update_interval: str = typer.Option(
        None,
        "--update-interval",
        help="Refresh interval as a duration, e.g. 30s, 1m30s. [default: 30s]",
        show_default=False,
    ),
    circle_host: str = typer.Option(
        None,
        "--circle-host",
        help="CircleCI host for server installs. [default: https://circleci.com]",
        show_default=False,
    ),
    page_size: int = typer.Option(
        None,
        "--page-size",
        help="Number of recent builds to show (1-100). [default: 30]",
        show_default=False,
    ),
    on_fetch_error: FetchErrorPolicy = typer.Option(
        None,
        "--on-fetch-error",
        help="degrade: show an empty table; propagate: keep the last table and log.",
        show_default=False,
    ),
    log_file: Path = typer.Option(
        None,
        "--log-file",
        help="Write logs to this file (nothing is logged to the terminal).",
        show_default=False,
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Log level for --log-file. [default: INFO]",
        show_default=False,
    ),
    repo: Path = typer.Option(
        None,
        "--repo",
        help="Path to the git checkout to watch. [default: current directory]",
        show_default=False,
    ),
    once: bool = typer.Option(
        False,
        "--once",
        help="Print a single snapshot and exit instead of the live dashboard.",
    ),
) -> None:
    """Show the recent CircleCI builds of the current git branch."""
    try:
        config = load_config(
            circle_token=circle_token,
            update_interval=update_interval,
            circle_host=circle_host,
            page_size=page_size,
            on_fetch_error=on_fetch_error,
            log_file=log_file,
            log_level=log_level,
        )
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    configure_logging(config)

    try:
        ref = GitProjectResolver(cwd=repo).resolve()
    except ResolutionError as exc:
        logger.error("Project resolution failed: %s", exc)
        console.print(f"[bold red]Could not resolve project:[/bold red] {exc}")
        raise typer.Exit(code=1)

    with CircleCIClient(
        config.circle_token,
        config.api_base_url,
        timeout=config.request_timeout,
    ) as client:
        fetcher = BuildFetcher(client, config.on_fetch_error, config.page_size)
        builder = DisplayModelBuilder()

        if once:
            try:
                model = builder.build(ref, fetcher.fetch(ref))
            except FetchError as exc:
                console.print(f"[bold red]Fetch failed:[/bold red] {exc}")
                raise typer.Exit(code=1)
            console.print(BuildTableRenderer().render(model))
            return

        try:
            with TerminalPresenter(console=console) as presenter:
                coordinator = RefreshCoordinator(
                    ref, fetcher, builder, presenter, config.update_interval
                )
                coordinator.run(presenter.events())
        except PresentationInitError as exc:
            logger.error("Terminal initialization failed: %s", exc)
            console.print(f"[bold red]Terminal error:[/bold red] {exc}")
            raise typer.Exit(code=1)


def configure_logging(config: MonocleConfig) -> None:
    """Send logs to ``config.log_file``, or silence them entirely.

    The dashboard owns the screen, so log records must never reach the
    terminal.
    """
    package_logger = logging.getLogger("monocle")
    if config.log_file is None:
        if not package_logger.handlers:
            package_logger.addHandler(logging.NullHandler())
        package_logger.propagate = False
        return

    config.log_file.parent.mkdir(parents=True, exist_ok=True)
    package_logger.propagate = True
    logging.basicConfig(
        filename=str(config.log_file),
        level=config.log_level,
        format=LOG_FORMAT,
    )
