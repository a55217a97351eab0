"""
Controller reconciling CAPIProvider resources.

A reconciliation runs one synchronization pass for a CAPIProvider: the
mirrored provider is loaded (or created), synced, and persisted, then the
CAPIProvider itself is persisted so its phase and conditions are visible.
Retrying a failed reconciliation is left to the caller.
"""

import logging

from provider_sync.client import ResourceClient
from provider_sync.config import SyncConfig
from provider_sync.context import trace_context
from provider_sync.exceptions import (
    AggregateSyncError,
    ClientException,
    SyncException,
)
from provider_sync.manifest import CAPIProvider, NamedResource

from .provider import ProviderSync
from .synchronizer import SynchronizerList

__all__ = [
    "ProviderController",
]

_LOGGER = logging.getLogger(__name__)


class ProviderController:
    """Controller for reconciling CAPIProvider resources."""

    def __init__(self, client: ResourceClient, config: SyncConfig) -> None:
        """Initialize the controller with a client and configuration."""
        self._client = client
        self._config = config

    async def reconcile(self, resource_id: NamedResource) -> CAPIProvider:
        """Reconcile a single CAPIProvider, returning its updated state.

        The destination and the CAPIProvider are persisted even when the sync
        fails. Errors from every step are raised together afterwards, with the
        sync errors first.

        Raises:
            ObjectNotFoundError: If the CAPIProvider does not exist.
            UnknownProviderError: If the provider type is not supported.
            AggregateSyncError: If synchronizing or persisting failed.
        """
        with trace_context(f"Reconcile {resource_id.namespaced_name}"):
            source = await self._client.get(resource_id, CAPIProvider)
            source_base = source.deep_copy()
            syncers = SynchronizerList(
                [ProviderSync(self._client, source, self._config)]
            )
            errors: list[Exception] = []
            try:
                await syncers.sync()
            except AggregateSyncError as err:
                errors.extend(err.errors)
            try:
                await syncers.apply()
            except AggregateSyncError as err:
                errors.extend(err.errors)
            try:
                await self._client.patch(source, source_base)
            except ClientException as err:
                _LOGGER.error("Unable to update %s: %s", resource_id, err)
                errors.append(err)
            if errors:
                raise AggregateSyncError(errors)
            return source

    async def reconcile_all(self) -> list[CAPIProvider]:
        """Reconcile every CAPIProvider held by the client.

        Every resource is attempted even when some fail.

        Raises:
            AggregateSyncError: If any reconciliation failed.
        """
        results: list[CAPIProvider] = []
        errors: list[Exception] = []
        for source in await self._client.list_objects(CAPIProvider):
            try:
                results.append(await self.reconcile(source.resource_id))
            except SyncException as err:
                _LOGGER.error("Failed to reconcile %s: %s", source.resource_id, err)
                errors.append(err)
        if errors:
            raise AggregateSyncError(errors)
        return results
