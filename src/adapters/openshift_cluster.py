"""OpenShift implementation of `ClusterAdapter`.

Drives the cluster exclusively through `oc` (see `adapters.oc_client`):
- the target project is `<PROJECT_NAMESPACE>-<environment>`;
- a "pod" is addressed by its deployment name and resolved to the running pod
  carrying the `<POD_LABEL>=<name>` label;
- DID seeds are read from OpenShift secrets and registered through the
  ledger's HTTP endpoint (`adapters.ledger_client`).

Every `oc` call names the project explicitly (`-n`), so a stale current
project on the operator's machine cannot redirect the work.
"""

from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Callable, Sequence

import httpx

from adapters.ledger_client import LedgerClient, build_client, resolve_ledger_url
from adapters.oc_client import OcClient
from core.config import AppSettings
from core.domain.models import InvocationOptions
from core.errors import ExternalCommandError
from core.interfaces.cluster import ClusterAdapter

logger = logging.getLogger(__name__)

DROP_DATABASE_COMMAND = (
    'psql -v ON_ERROR_STOP=1 -c "DROP DATABASE IF EXISTS \\"${POSTGRESQL_DATABASE}\\";"'
)
CREATE_DATABASE_COMMAND = (
    'psql -v ON_ERROR_STOP=1 -c '
    '"CREATE DATABASE \\"${POSTGRESQL_DATABASE}\\" OWNER \\"${POSTGRESQL_USER}\\";"'
)


class OpenShiftCluster(ClusterAdapter):
    """Runs maintenance primitives against one OpenShift project."""

    def __init__(
        self,
        oc: OcClient,
        *,
        settings: AppSettings,
        environment: str,
        ledger_transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._oc = oc
        self._settings = settings
        self._environment = environment
        self._ledger_transport = ledger_transport
        self._sleep = sleep
        self._clock = clock

    @property
    def project(self) -> str:
        return f"{self._settings.project_namespace}-{self._environment}"

    def switch_project(self) -> None:
        self._oc.run(["project", self.project])

    def _pods(self, name: str, *, running_only: bool = True) -> list[str]:
        args = ["get", "pods", "-n", self.project, "-l", f"{self._settings.pod_label}={name}"]
        if running_only:
            args.append("--field-selector=status.phase=Running")
        args += ["-o", "name"]
        out = self._oc.run(args)
        return [line.strip().removeprefix("pod/") for line in out.splitlines() if line.strip()]

    def resolve_pod(self, name: str) -> str:
        pods = self._pods(name)
        if not pods:
            raise ExternalCommandError(f"No running pod found for '{name}' in '{self.project}'.")
        return pods[0]

    def run_in_pod(self, pod: str, command: str, interactive: bool = False) -> None:
        pod_name = self.resolve_pod(pod)
        args = ["exec", "-n", self.project]
        if interactive:
            args.append("-it")
        args += [pod_name, "--", "bash", "-c", command]
        self._oc.run(args, interactive=interactive)

    def _wait_until(self, check: Callable[[], bool], what: str) -> None:
        deadline = self._clock() + self._settings.wait_timeout_seconds
        while not check():
            if self._clock() >= deadline:
                raise ExternalCommandError(
                    f"Timed out after {self._settings.wait_timeout_seconds}s waiting for {what}."
                )
            self._sleep(self._settings.poll_interval_seconds)

    def _scale(self, deployment: str, replicas: int) -> None:
        self._oc.run(
            ["scale", f"dc/{deployment}", f"--replicas={replicas}", "-n", self.project]
        )

    def scale_down(self, deployment: str) -> None:
        self._scale(deployment, 0)
        self._wait_until(
            lambda: not self._pods(deployment, running_only=False),
            f"the '{deployment}' pods to stop",
        )

    def scale_up(self, deployment: str) -> None:
        self._scale(deployment, 1)
        self._wait_until(lambda: bool(self._pods(deployment)), f"a running '{deployment}' pod")
        pod_name = self.resolve_pod(deployment)
        self._oc.run(
            [
                "wait",
                "--for=condition=Ready",
                f"pod/{pod_name}",
                "-n",
                self.project,
                f"--timeout={self._settings.wait_timeout_seconds}s",
            ]
        )

    def drop_and_recreate_database(self, api_pod: str, db_pod: str) -> None:
        logger.info("Recreating the '%s' database of '%s' in %s", db_pod, api_pod, self.project)

        self.scale_down(api_pod)
        self.run_in_pod(db_pod, DROP_DATABASE_COMMAND)
        self.run_in_pod(db_pod, CREATE_DATABASE_COMMAND)
        self.scale_up(api_pod)
        self.run_in_pod(api_pod, self._settings.migrate_command)

    def read_did_seed(self, name: str) -> str:
        key = self._settings.did_seed_key
        encoded = self._oc.run(
            ["get", "secret", name, "-n", self.project, "-o", f"jsonpath={{.data.{key}}}"]
        ).strip()
        if not encoded:
            raise ExternalCommandError(f"Secret '{name}' has no '{key}' entry in '{self.project}'.")
        try:
            return base64.b64decode(encoded, validate=True).decode("utf-8").strip()
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ExternalCommandError(f"Secret '{name}' holds an invalid '{key}' value.") from exc

    def register_dids(self, names: Sequence[str]) -> None:
        base_url = resolve_ledger_url(self._settings, self._environment)
        with build_client(self._settings, transport=self._ledger_transport) as client:
            ledger = LedgerClient(base_url, client)
            for name in names:
                seed = self.read_did_seed(name)
                result = ledger.register(alias=name, seed=seed)
                logger.info("Registered DID for %s: %s", name, result.get("did", "<unknown>"))


def build_cluster_adapter(options: InvocationOptions, settings: AppSettings) -> OpenShiftCluster:
    """Build the OpenShift adapter; raises `ConfigurationError` when `oc` is missing."""

    oc = OcClient.from_settings(settings, extra_env=options.as_environ())
    return OpenShiftCluster(oc, settings=settings, environment=options.environment)
