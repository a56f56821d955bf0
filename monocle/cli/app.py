"""Main Typer application for the ``monocle`` command.

Entry point: ``monocle`` (configured via pyproject.toml console_scripts).
The application has a single command, so Typer runs it directly without a
subcommand name.
"""

from __future__ import annotations

import typer

from monocle.cli.commands.watch_cmd import watch_cmd

app = typer.Typer(
    name="monocle",
    help="A simple terminal client for viewing the state of your CircleCI builds.",
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="watch", help="Watch recent builds of the current branch.")(watch_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
