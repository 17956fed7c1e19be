"""Doctor command for environment diagnostics."""

from __future__ import annotations

from rich.console import Console

from adapters.ledger_client import resolve_ledger_url
from adapters.oc_client import OC_INSTALL_HINT, OcClient, find_oc_binary
from cli.ui_components import build_doctor_table
from core.config import AppSettings, settings_files
from core.domain.models import InvocationOptions, get_did_names
from core.errors import ManageError


def _check_login(settings: AppSettings, options: InvocationOptions) -> tuple[bool, str]:
    try:
        oc = OcClient.from_settings(settings, extra_env=options.as_environ())
        user = oc.run(["whoami"]).strip()
        return True, f"Logged in as {user}"
    except ManageError as exc:
        return False, exc.message


def run_doctor(options: InvocationOptions, settings: AppSettings, console: Console) -> bool:
    """Print baseline diagnostics; return True when every required check passed."""

    table = build_doctor_table()
    ok = True

    binary = find_oc_binary(settings)
    if binary:
        table.add_row("oc", "OK", binary)
        logged_in, detail = _check_login(settings, options)
        table.add_row("oc login", "OK" if logged_in else "FAIL", detail)
        ok = ok and logged_in
    else:
        table.add_row("oc", "FAIL", OC_INSTALL_HINT)
        table.add_row("oc login", "SKIPPED", "oc not found")
        ok = False

    table.add_row("Project", "OK", f"{settings.project_namespace}-{options.environment}")

    applied = [str(p) for p in settings_files(options) if p.is_file()]
    table.add_row("Settings files", "OK", ", ".join(applied) if applied else "defaults only")

    try:
        table.add_row("Ledger", "OK", resolve_ledger_url(settings, options.environment))
    except ManageError as exc:
        table.add_row("Ledger", "FAIL", exc.message)
        ok = False

    table.add_row("DIDs", "OK", ", ".join(get_did_names()))

    console.print(table)
    return ok
