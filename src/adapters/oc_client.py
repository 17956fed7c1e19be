"""Wrapper around the OpenShift CLI (`oc`).

Why a wrapper:
- Standardizes how `oc` is located, how child environments are built and how
  failures are reported (`ExternalCommandError`).
- Every command is logged at DEBUG before it runs, which is what `-x` shows.
- Eases testing: `subprocess.run` is the only seam to replace.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from typing import Mapping, Sequence

from core.config import AppSettings
from core.errors import ConfigurationError, ExternalCommandError

logger = logging.getLogger(__name__)

OC_INSTALL_HINT = (
    "Install the OpenShift CLI (oc) from https://mirror.openshift.com/pub/openshift-v4/clients/ocp/ "
    "and make sure it is on PATH, or point OCTOOLSBIN at the directory that holds it."
)


def find_oc_binary(settings: AppSettings) -> str | None:
    """Locate `oc`, searching OCTOOLSBIN before PATH."""

    search_path = os.environ.get("PATH", "")
    if settings.octoolsbin:
        search_path = os.pathsep.join([str(settings.octoolsbin), search_path])
    return shutil.which(settings.oc_binary, path=search_path)


class OcClient:
    """Runs `oc` commands synchronously."""

    def __init__(
        self,
        binary: str,
        *,
        extra_env: Mapping[str, str] | None = None,
    ) -> None:
        self._binary = binary
        self._extra_env = dict(extra_env or {})

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        *,
        extra_env: Mapping[str, str] | None = None,
    ) -> "OcClient":
        binary = find_oc_binary(settings)
        if binary is None:
            raise ConfigurationError(f"'{settings.oc_binary}' was not found. {OC_INSTALL_HINT}")

        env = dict(extra_env or {})
        if settings.octoolsbin:
            env["OCTOOLSBIN"] = str(settings.octoolsbin)
        return cls(binary, extra_env=env)

    def _environ(self) -> dict[str, str]:
        env = os.environ.copy()
        env.update(self._extra_env)
        return env

    def run(self, args: Sequence[str], *, interactive: bool = False) -> str:
        """Run `oc <args>` and return its stdout.

        Interactive commands inherit the operator's terminal and return "".
        A non-zero exit raises `ExternalCommandError`.
        """

        command = [self._binary, *args]
        logger.debug("+ %s", shlex.join(command))

        if interactive:
            result = subprocess.run(command, env=self._environ(), check=False)
            stdout = ""
            stderr = ""
        else:
            result = subprocess.run(
                command,
                env=self._environ(),
                capture_output=True,
                text=True,
                check=False,
            )
            stdout = result.stdout or ""
            stderr = (result.stderr or "").strip()

        if result.returncode != 0:
            detail = f": {stderr}" if stderr else ""
            raise ExternalCommandError(
                f"'{shlex.join(['oc', *args])}' failed with exit code {result.returncode}{detail}",
                command=command,
                returncode=result.returncode,
            )
        return stdout
