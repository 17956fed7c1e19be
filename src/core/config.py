"""Core configuration.

Why here:
- Centralizes environment variables and settings files (pydantic-settings)
  without leaking them into the CLI.
- Lets adapters (`oc`, ledger HTTP) read configuration consistently.

Settings files are plain dotenv files layered in this order, later files
winning over earlier ones:

1) <user config dir>/settings.env
2) <settings dir>/settings.env
3) <settings dir>/settings.<profile>.env            (unless profiles are ignored)
4) <settings dir>/settings.local.env                (only with local settings)
5) <settings dir>/settings.<profile>.local.env      (local, profile not ignored)

Process environment variables always win over every file.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import InvocationOptions
from core.errors import ConfigurationError


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "orgbook-manage"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "orgbook-manage"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "orgbook-manage"
    return Path.home() / ".config" / "orgbook-manage"


def get_settings_dir() -> Path:
    override = (os.environ.get("MANAGE_SETTINGS_DIR") or "").strip()
    if override:
        return Path(override)
    return Path.cwd()


def settings_files(options: InvocationOptions, settings_dir: Path | None = None) -> list[Path]:
    """Candidate settings files for an invocation, lowest precedence first.

    Files are returned whether or not they exist; pydantic-settings skips the
    missing ones.
    """

    base = settings_dir or get_settings_dir()
    use_profile = bool(options.profile) and not options.ignore_profiles

    files = [get_user_config_dir() / "settings.env", base / "settings.env"]
    if use_profile:
        files.append(base / f"settings.{options.profile}.env")
    if options.apply_local_settings:
        files.append(base / "settings.local.env")
        if use_profile:
            files.append(base / f"settings.{options.profile}.local.env")
    return files


class AppSettings(BaseSettings):
    """Central application configuration.

    Why pydantic-settings:
    - Typing + validation at the edge (env vars, settings files) without
      filling the Core with parsing logic.
    - A single configuration contract for the CLI and the adapters.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file_encoding="utf-8",
    )

    project_namespace: str = Field(
        default="devex-von",
        min_length=1,
        description="Project prefix; the target project is '<namespace>-<environment>'.",
    )
    octoolsbin: Path | None = Field(
        default=None,
        description="Directory holding the OpenShift tooling; searched for `oc` before PATH.",
    )
    oc_binary: str = Field(
        default="oc",
        min_length=1,
        description="Name or path of the OpenShift CLI executable.",
    )
    pod_label: str = Field(
        default="name",
        min_length=1,
        description="Label used to find the running pod of a deployment.",
    )
    search_index_command: str = Field(
        default="./scripts/rebuildSearchIndex.sh",
        min_length=1,
        description="Command run inside the API pod to rebuild the search index.",
    )
    migrate_command: str = Field(
        default="python manage.py migrate",
        min_length=1,
        description="Command run inside an API pod to apply database migrations.",
    )
    wait_timeout_seconds: int = Field(
        default=300,
        gt=0,
        description="How long to wait for pods to stop or become ready (seconds).",
    )
    poll_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Pause between pod status checks while waiting (seconds).",
    )

    ledger_url: str | None = Field(
        default=None,
        description="Ledger base URL; defaults to the static address of the environment.",
    )
    did_seed_key: str = Field(
        default="seed",
        min_length=1,
        description="Key, inside each DID's secret, holding the base64 encoded seed.",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per ledger request (seconds).",
    )


def load_settings(options: InvocationOptions, settings_dir: Path | None = None) -> AppSettings:
    """Load settings for an invocation; invalid values raise `ConfigurationError`."""

    files = settings_files(options, settings_dir)
    try:
        return AppSettings(_env_file=tuple(str(p) for p in files))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']).upper()}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"Invalid settings: {problems}") from exc
