"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Gives us strict, self-documenting values (Field) without coupling the Core
  to `oc`, subprocesses or the terminal.
- `frozen=True` makes the invocation state immutable once parsed, so every
  operation reads the same environment/profile for the whole run.

Note:
- These models describe *what* an invocation targets, not *how* the cluster
  is driven.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


DID_NAMES: tuple[str, ...] = ("the_org_book", "the_org_book_on")

_LEDGER_ADDRESSES: dict[str, str] = {
    "dev": "159.89.115.24",
    "test": "159.89.116.191",
    "prod": "159.89.124.226",
}


class Subcommand(str, Enum):
    """Maintenance actions the CLI can dispatch to."""

    RESET_DATABASE = "resetdatabase"
    HARD_RESET = "hardreset"
    REBUILD_SEARCH_INDEX = "rebuildsearchindex"
    REGISTER_DIDS = "registerdids"
    DOCTOR = "doctor"


class InvocationOptions(BaseModel):
    """Options parsed from the command line, built once per process."""

    model_config = ConfigDict(frozen=True)

    environment: str = Field(
        ...,
        min_length=1,
        description="Deployment environment (dev/test/prod); selects the target project.",
    )
    profile: str | None = Field(
        default=None,
        description="Named settings profile loaded on top of the defaults.",
    )
    ignore_profiles: bool = Field(
        default=False,
        description="Load only the default settings, skipping named profiles.",
    )
    apply_local_settings: bool = Field(
        default=False,
        description="Apply local developer overrides to the settings.",
    )
    debug: bool = Field(
        default=False,
        description="Trace every external command before it runs.",
    )

    def as_environ(self) -> dict[str, str]:
        """Environment variables exported to child processes (in-pod scripts, `oc`)."""

        return {
            "DEPLOYMENT_ENV_NAME": self.environment,
            "PROFILE": self.profile or "",
            "IGNORE_PROFILES": "1" if self.ignore_profiles else "",
            "APPLY_LOCAL_SETTINGS": "1" if self.apply_local_settings else "",
            "DEBUG": "1" if self.debug else "",
        }


class PodNames(BaseModel):
    """Deployment names of the pods an operation acts on."""

    model_config = ConfigDict(frozen=True)

    api: str = Field(default="django", description="Application API pod.")
    db: str = Field(default="postgresql", description="Application database pod.")
    wallet_api: str = Field(default="wallet", description="Wallet API pod.")
    wallet_db: str = Field(default="wallet-db", description="Wallet database pod.")

    @classmethod
    def from_positional(cls, args: Sequence[str] | None) -> "PodNames":
        """Overlay positional overrides, in order, onto the defaults.

        Extra arguments beyond the four known pods are ignored.
        """

        fields = ("api", "db", "wallet_api", "wallet_db")
        overrides = dict(zip(fields, args or ()))
        return cls(**overrides)


def get_did_names() -> list[str]:
    return list(DID_NAMES)


def get_ledger_address(environment: str) -> str | None:
    """Static ledger address for `dev`/`test`/`prod`; `None` for anything else."""

    return _LEDGER_ADDRESSES.get(environment)
