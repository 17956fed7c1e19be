"""`manage` CLI (Typer).

Why Typer:
- Declarative flags with types, on top of the click parser typer ships.
- The command only parses and validates; the work happens in
  `core.services.environment_manager` against a `ClusterAdapter`.

Every failure exits with code 1, including the usage errors typer would
normally report with 2; `run()` maps them and prints the usage text.
"""

from __future__ import annotations

from typing import Sequence

import typer
from rich.console import Console

from adapters.openshift_cluster import build_cluster_adapter
from cli.doctor import run_doctor
from cli.ui_components import (
    configure_logging,
    echo_error,
    echo_warning,
    print_and_wait,
    print_usage,
)
from core.config import load_settings
from core.domain.models import InvocationOptions, Subcommand
from core.errors import EXIT_ERROR, EXIT_SUCCESS, ManageError
from core.services.environment_manager import EnvironmentManager, ManagerHooks, parse_subcommand

app = typer.Typer(add_completion=False, help="Maintenance actions for a deployed OrgBook environment.")

_console = Console()

# exit code typer uses for usage errors (unknown option, missing value)
_USAGE_EXIT_CODE = 2


@app.command(add_help_option=False)
def manage(
    environment: str | None = typer.Option(None, "-e", "--env", help="Deployment environment."),
    profile: str | None = typer.Option(None, "-p", "--profile", help="Settings profile."),
    ignore_profiles: bool = typer.Option(False, "-P", "--ignore-profiles", help="Ignore named profiles."),
    apply_local_settings: bool = typer.Option(False, "-l", "--local", help="Apply local settings."),
    debug: bool = typer.Option(False, "-x", "--debug", help="Trace external commands."),
    show_help: bool = typer.Option(False, "-h", "--help", help="Show usage and exit."),
    command: str | None = typer.Argument(None, help="Maintenance command."),
    pods: list[str] | None = typer.Argument(None, help="Pod name overrides."),
) -> None:
    if show_help:
        print_usage(_console)
        raise typer.Exit(EXIT_ERROR)

    if not environment:
        echo_error(_console, "You must specify an environment using the '-e' flag.")
        print_usage(_console)
        raise typer.Exit(EXIT_ERROR)

    subcommand = parse_subcommand(command)
    if subcommand is None:
        echo_warning(_console, f"Unrecognized command: {command or '<none>'}")
        print_usage(_console)
        raise typer.Exit(EXIT_ERROR)

    options = InvocationOptions(
        environment=environment,
        profile=profile,
        ignore_profiles=ignore_profiles,
        apply_local_settings=apply_local_settings,
        debug=debug,
    )
    configure_logging(options.debug)

    try:
        settings = load_settings(options)

        if subcommand is Subcommand.DOCTOR:
            if not run_doctor(options, settings, _console):
                raise typer.Exit(EXIT_ERROR)
            return

        cluster = build_cluster_adapter(options, settings)
        manager = EnvironmentManager(
            cluster,
            search_index_command=settings.search_index_command,
            hooks=ManagerHooks(
                warning=lambda message: echo_warning(_console, message),
                confirm=lambda message: print_and_wait(_console, message),
            ),
        )
        manager.dispatch(subcommand, pods)
    except ManageError as exc:
        echo_error(_console, exc.message)
        raise typer.Exit(exc.exit_code) from exc


def run(argv: Sequence[str] | None = None) -> None:
    """Console-script entry point."""

    command = typer.main.get_command(app)
    try:
        command.main(
            args=list(argv) if argv is not None else None,
            prog_name="manage",
        )
    except SystemExit as exc:
        if exc.code in (None, EXIT_SUCCESS):
            return
        if exc.code == _USAGE_EXIT_CODE:
            print_usage(_console)
            raise SystemExit(EXIT_ERROR) from exc
        raise
