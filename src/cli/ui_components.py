"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from presentation details.
- Lets the warning/confirmation helpers be handed to the Core as hooks.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text


USAGE = """\
Usage: manage -e <environment> [options] <command> [pod names...]

  Maintenance actions for a deployed OrgBook environment.

Options:
  -e <environment>  Deployment environment (dev, test, prod). Required.
  -p <profile>      Load the named settings profile on top of the defaults.
  -P                Use only the default settings, ignore named profiles.
  -l                Apply local settings overrides (settings.local.env).
  -x                Trace every external command.
  -h                Show this help.

Commands:
  resetDatabase [apiPod] [dbPod]
      Drop and recreate the application database, apply the migrations and
      rebuild the search index.
      Defaults: apiPod=django, dbPod=postgresql

  hardReset [apiPod] [dbPod] [walletApiPod] [walletDbPod]
      resetDatabase plus: recreate the wallet database and register the
      application's DIDs with the ledger. Pauses twice for confirmation.
      Defaults: apiPod=django, dbPod=postgresql, walletApiPod=wallet,
                walletDbPod=wallet-db

  rebuildSearchIndex [apiPod]
      Rebuild the search index in the API pod (interactive).
      Default: apiPod=django

  registerDids
      Register the_org_book and the_org_book_on with the ledger.

  doctor
      Check the local tooling and configuration.

Examples:
  manage -e test resetDatabase
  manage -e dev rebuildSearchIndex myapi
"""


def print_usage(console: Console) -> None:
    console.print(Text(USAGE), soft_wrap=True)


def echo_warning(console: Console, message: str) -> None:
    console.print(Text(message, style="yellow"), soft_wrap=True)


def echo_error(console: Console, message: str) -> None:
    console.print(Text(message, style="bold red"), soft_wrap=True)


def print_and_wait(console: Console, message: str) -> None:
    """Show `message` and block until the operator presses Enter.

    Ctrl-C / EOF abort the run (the prompt raises `typer.Abort`).
    """

    echo_warning(console, message)
    typer.prompt("Press Enter to continue", default="", show_default=False)


def configure_logging(debug: bool) -> None:
    """Route stdlib logging through Rich on stderr; DEBUG traces external commands."""

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=False,
        markup=False,
    )
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


def build_doctor_table() -> Table:
    table = Table(title="manage doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    return table
