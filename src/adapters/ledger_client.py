"""httpx client for the ledger's DID registration endpoint.

Why a wrapper:
- Standardizes timeouts and headers for every ledger request.
- Eases testing: a `httpx.MockTransport` can stand in for the ledger.
"""

from __future__ import annotations

import logging

import httpx

from core.config import AppSettings
from core.domain.models import get_ledger_address
from core.errors import ConfigurationError, ExternalCommandError

logger = logging.getLogger(__name__)


def resolve_ledger_url(settings: AppSettings, environment: str) -> str:
    """Configured `LEDGER_URL`, else the static address of the environment."""

    if settings.ledger_url:
        return settings.ledger_url.rstrip("/")
    address = get_ledger_address(environment)
    if address is None:
        raise ConfigurationError(
            f"No ledger address is known for the '{environment}' environment; set LEDGER_URL."
        )
    return f"http://{address}"


def build_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an `httpx.Client` with the application's defaults."""

    settings = settings or AppSettings()
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers={"Accept": "application/json"},
        transport=transport,
    )


class LedgerClient:
    """Registers DIDs from their seeds."""

    def __init__(self, base_url: str, client: httpx.Client) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client

    def register(self, *, alias: str, seed: str, role: str = "TRUST_ANCHOR") -> dict:
        url = f"{self._base_url}/register"
        logger.debug("+ POST %s alias=%s", url, alias)
        try:
            response = self._client.post(url, json={"seed": seed, "alias": alias, "role": role})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ExternalCommandError(f"Registering the DID for '{alias}' failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
