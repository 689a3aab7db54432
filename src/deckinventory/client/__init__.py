"""HTTP client module for deckinventory.

Provides :class:`InventoryClient`, an async wrapper around
:class:`httpx.AsyncClient` that fetches the remote deck inventory and
raises typed errors on failure.

Example::

    from deckinventory.client import InventoryClient

    async with InventoryClient(config.request) as client:
        inventory = await client.fetch_inventory()
"""

from deckinventory.client.async_client import InventoryClient

__all__ = ["InventoryClient"]
