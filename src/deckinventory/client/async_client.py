"""Asynchronous HTTP client for the deck inventory endpoint.

This module provides :class:`InventoryClient`, a thin wrapper around
:class:`httpx.AsyncClient` that issues a single GET to the configured
inventory URL and maps every failure onto the typed exceptions from
:mod:`deckinventory.exceptions`:

* transport errors (DNS, refused, timeout) and non-2xx statuses raise
  :class:`~deckinventory.exceptions.NetworkError`;
* bodies that are not JSON or do not match
  :class:`~deckinventory.models.RemoteInventory` raise
  :class:`~deckinventory.exceptions.ParseError`.

A partially parsed document is never returned. Requests are not retried;
the cache's failure placeholder governs when the next attempt happens.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from deckinventory import __version__
from deckinventory.exceptions import NetworkError, ParseError
from deckinventory.models import RemoteInventory, RequestConfig

logger = logging.getLogger(__name__)

USER_AGENT = f"deckinventory/{__version__}"


class InventoryClient:
    """Async client that fetches the remote deck inventory.

    Must be used as an async context manager.

    Args:
        config: Endpoint URL, timeout and SSL settings.
        transport: Optional :mod:`httpx` transport, used by tests to
            substitute an :class:`httpx.MockTransport`.

    Example::

        async with InventoryClient(RequestConfig()) as client:
            inventory = await client.fetch_inventory()
    """

    def __init__(
        self,
        config: RequestConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def url(self) -> str:
        return self._config.url

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> InventoryClient:
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def fetch_inventory(self) -> RemoteInventory:
        """GET the inventory document and validate it.

        Returns:
            The parsed :class:`~deckinventory.models.RemoteInventory`.

        Raises:
            NetworkError: On transport failure or a non-2xx status.
            ParseError: When the body is not a valid inventory document.
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        logger.info("Fetching deck inventory from %s", self.url)
        try:
            response = await self._client.get(self.url)
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request to {self.url} failed: {exc}") from exc

        self._raise_for_status(response)
        return self._parse(response)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Raise :class:`NetworkError` for any non-2xx status."""
        status = response.status_code
        if 200 <= status < 300:
            return
        detail = response.text[:200] if response.text else ""
        prefix = f"HTTP {status}"
        message = f"{prefix}: {detail}" if detail else prefix
        raise NetworkError(message, status_code=status)

    def _parse(self, response: httpx.Response) -> RemoteInventory:
        try:
            return RemoteInventory.model_validate_json(response.content)
        except ValidationError as exc:
            raise ParseError(f"Malformed inventory document from {self.url}: {exc}") from exc
