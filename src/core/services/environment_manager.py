"""Environment maintenance orchestration.

This module holds the maintenance operations (database reset, hard reset,
search-index rebuild, DID registration) and the subcommand dispatch table.
All cluster work is delegated to a `ClusterAdapter`; printing and operator
prompts are delegated to `ManagerHooks`, which keeps side-effects out of the
sequencing logic and lets tests drive every operation without a terminal.

Every step is blocking and the first failure aborts the operation: adapters
raise, nothing here catches. There is no rollback, so a failed reset can
leave a recreated database with a stale search index; the operator sees the
error and reruns the missing step.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from core.domain.models import PodNames, Subcommand, get_did_names
from core.errors import MissingParameterError
from core.interfaces.cluster import ClusterAdapter


SCALE_DOWN_MESSAGE = (
    "Use the deployment tooling to scale down all of the pods that depend on the "
    "databases and the ledger (API, wallet, search, agents).\n"
    "Wait until they have fully stopped before continuing."
)
LEDGER_RESTART_MESSAGE = (
    "If the ledger is being reset, wait until it has fully restarted before "
    "continuing; the DIDs are registered next."
)
RESET_COMPLETE_MESSAGE = (
    "The database has been reset and the search index rebuilt.\n"
    "Use the deployment tooling to recycle the dependent service pods so they "
    "reconnect to the new database."
)
HARD_RESET_COMPLETE_MESSAGE = (
    "The hard reset is complete.\n"
    "Use the deployment tooling to scale the dependent pods back up."
)
INTERACTIVE_WARNING = (
    "Rebuilding the search index in '{pod}'. The indexing script may ask for "
    "confirmation inside the pod; answer it to continue."
)


def _noop(message: str) -> None:
    return None


@dataclass
class ManagerHooks:
    """Callbacks for UI layers.

    - `warning` prints an operator-facing warning.
    - `confirm` shows a message and blocks until the operator acknowledges it.
      It has no timeout; to abort, it raises.
    """

    warning: Callable[[str], None] = _noop
    confirm: Callable[[str], None] = _noop


def parse_subcommand(name: str | None) -> Subcommand | None:
    """Case-insensitive lookup of a subcommand; `None` when it is unknown."""

    if not name:
        return None
    try:
        return Subcommand(name.strip().lower())
    except ValueError:
        return None


def _require(operation: str, **params: str) -> None:
    for key, value in params.items():
        if not value:
            raise MissingParameterError(operation, key)


class EnvironmentManager:
    """Runs maintenance operations against one environment."""

    def __init__(
        self,
        cluster: ClusterAdapter,
        *,
        search_index_command: str = "./scripts/rebuildSearchIndex.sh",
        hooks: ManagerHooks | None = None,
    ) -> None:
        self._cluster = cluster
        self._search_index_command = search_index_command
        self._hooks = hooks or ManagerHooks()

    def switch_project(self) -> None:
        self._cluster.switch_project()

    def reset_database(self, api_pod: str, db_pod: str) -> None:
        _require("resetDatabase", api_pod=api_pod, db_pod=db_pod)

        self.switch_project()
        self._cluster.drop_and_recreate_database(api_pod, db_pod)
        self.rebuild_search_index(api_pod)
        self._hooks.warning(RESET_COMPLETE_MESSAGE)

    def rebuild_search_index(self, api_pod: str) -> None:
        _require("rebuildSearchIndex", api_pod=api_pod)

        self._hooks.warning(INTERACTIVE_WARNING.format(pod=api_pod))
        self._cluster.run_in_pod(api_pod, self._search_index_command, interactive=True)

    def hard_reset(
        self,
        api_pod: str,
        db_pod: str,
        wallet_api_pod: str,
        wallet_db_pod: str,
    ) -> None:
        _require(
            "hardReset",
            api_pod=api_pod,
            db_pod=db_pod,
            wallet_api_pod=wallet_api_pod,
            wallet_db_pod=wallet_db_pod,
        )

        self._hooks.confirm(SCALE_DOWN_MESSAGE)

        self.switch_project()
        self._cluster.drop_and_recreate_database(wallet_api_pod, wallet_db_pod)
        self._cluster.drop_and_recreate_database(api_pod, db_pod)
        self.rebuild_search_index(api_pod)

        self._hooks.confirm(LEDGER_RESTART_MESSAGE)
        self.register_dids(get_did_names())

        self._hooks.warning(HARD_RESET_COMPLETE_MESSAGE)

    def register_dids(self, names: Sequence[str]) -> None:
        self._cluster.register_dids(list(names))

    def dispatch(self, subcommand: Subcommand, args: Sequence[str] | None = None) -> None:
        """Route a parsed subcommand and its positional pod overrides to its handler."""

        handler = _HANDLERS.get(subcommand)
        if handler is None:
            raise ValueError(f"No maintenance handler for '{subcommand.value}'.")
        handler(self, PodNames.from_positional(args))


def _run_reset_database(manager: EnvironmentManager, pods: PodNames) -> None:
    manager.reset_database(pods.api, pods.db)


def _run_hard_reset(manager: EnvironmentManager, pods: PodNames) -> None:
    manager.hard_reset(pods.api, pods.db, pods.wallet_api, pods.wallet_db)


def _run_rebuild_search_index(manager: EnvironmentManager, pods: PodNames) -> None:
    manager.switch_project()
    manager.rebuild_search_index(pods.api)


def _run_register_dids(manager: EnvironmentManager, pods: PodNames) -> None:
    manager.register_dids(get_did_names())


_HANDLERS: dict[Subcommand, Callable[[EnvironmentManager, PodNames], None]] = {
    Subcommand.RESET_DATABASE: _run_reset_database,
    Subcommand.HARD_RESET: _run_hard_reset,
    Subcommand.REBUILD_SEARCH_INDEX: _run_rebuild_search_index,
    Subcommand.REGISTER_DIDS: _run_register_dids,
}
