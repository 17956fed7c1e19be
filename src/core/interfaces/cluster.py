"""Cluster adapter contract.

Why Protocol:
- Defines a structural contract (duck typing) without rigid inheritance.
- Lets the OpenShift adapter and test fakes be swapped freely, without
  coupling the Core to `oc` or to a terminal.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class ClusterAdapter(Protocol):
    """Minimal set of cluster capabilities the maintenance operations need.

    Design rules:
    - Every method blocks until the external work is done.
    - Failures raise (`ExternalCommandError`, `ConfigurationError`); there are
      no error return values to check.
    """

    def switch_project(self) -> None:
        """Select the project/namespace of the configured environment."""

        ...

    def run_in_pod(self, pod: str, command: str, interactive: bool = False) -> None:
        """Run a shell command in the running pod of the `pod` deployment.

        With `interactive=True` the operator's terminal is attached, so in-pod
        prompts can be answered.
        """

        ...

    def drop_and_recreate_database(self, api_pod: str, db_pod: str) -> None:
        """Drop the database served by `db_pod`, recreate it and migrate via `api_pod`."""

        ...

    def register_dids(self, names: Sequence[str]) -> None:
        """Register the DIDs of `names` with the environment's ledger."""

        ...
