"""Generic synchronizer mirroring a CAPIProvider into a destination resource.

A synchronizer is used for a single reconciliation pass:

1. `get` loads the destination resource, creating it when missing.
2. `sync` mirrors state between the source and the destination in memory.
3. `apply` persists the destination resource.

Persisting the source is left to the caller.
"""

from abc import ABC, abstractmethod
import logging
from typing import Generic, TypeVar

from provider_sync.client import ResourceClient
from provider_sync.config import SyncConfig
from provider_sync.exceptions import AggregateSyncError, ObjectNotFoundError
from provider_sync.manifest import CAPIProvider, OwnerReference, Provider

__all__ = [
    "Synchronizer",
    "DefaultSynchronizer",
    "SynchronizerList",
]

_LOGGER = logging.getLogger(__name__)

D = TypeVar("D", bound=Provider)


class Synchronizer(ABC):
    """Interface of a synchronizer for one source and destination pair."""

    @abstractmethod
    async def get(self) -> None:
        """Load the destination resource."""

    @abstractmethod
    async def sync(self) -> None:
        """Mirror state between the source and destination."""

    @abstractmethod
    async def apply(self) -> None:
        """Persist the destination resource."""


class DefaultSynchronizer(Synchronizer, Generic[D]):
    """Synchronizer holding the source and destination of a mirror."""

    def __init__(
        self,
        client: ResourceClient,
        source: CAPIProvider,
        destination: D,
        config: SyncConfig | None = None,
    ) -> None:
        """Initialize DefaultSynchronizer."""
        self._client = client
        self._config = config or SyncConfig()
        self.source = source
        self.destination = destination
        self._persisted: D | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.destination.resource_id})"

    async def get(self) -> None:
        """Load the destination resource, creating it from the template if missing."""
        resource_id = self.destination.resource_id
        try:
            self.destination = await self._client.get(
                resource_id, type(self.destination)
            )
        except ObjectNotFoundError:
            _LOGGER.info("Creating %s for %s", resource_id, self.source.resource_id)
            self._set_owner_reference()
            await self._client.create(self.destination)
        self._persisted = self.destination.deep_copy()

    async def sync(self) -> None:
        """Mirror state between the source and destination, nothing by default."""

    async def apply(self) -> None:
        """Patch the destination against the state loaded by `get`.

        Nothing is written when `get` did not complete.
        """
        resource_id = self.destination.resource_id
        if self._persisted is None:
            _LOGGER.debug("Skipping apply of %s, it was never loaded", resource_id)
            return
        self._set_owner_reference()
        _LOGGER.debug("Patching %s", resource_id)
        await self._client.patch(self.destination, self._persisted)
        self._persisted = self.destination.deep_copy()

    def _set_owner_reference(self) -> None:
        owner = OwnerReference(
            api_version=self.source.api_version,
            kind=self.source.kind,
            name=self.source.metadata.name,
            uid=self.source.metadata.uid,
            controller=True,
        )
        references = [
            ref
            for ref in self.destination.metadata.owner_references or []
            if not (ref.kind == owner.kind and ref.name == owner.name)
        ]
        self.destination.metadata.owner_references = references + [owner]


class SynchronizerList(list[Synchronizer]):
    """A list of synchronizers run together, collecting their errors."""

    async def sync(self) -> None:
        """Load and sync every synchronizer.

        Raises:
            AggregateSyncError: If any synchronizer failed.
        """
        errors: list[Exception] = []
        for synchronizer in self:
            try:
                await synchronizer.get()
                await synchronizer.sync()
            except Exception as err:
                _LOGGER.debug("Synchronizer %s failed: %s", synchronizer, err)
                errors.append(err)
        if errors:
            raise AggregateSyncError(errors)

    async def apply(self) -> None:
        """Apply every synchronizer.

        Raises:
            AggregateSyncError: If any synchronizer failed.
        """
        errors: list[Exception] = []
        for synchronizer in self:
            try:
                await synchronizer.apply()
            except Exception as err:
                _LOGGER.error("Unable to apply %s: %s", synchronizer, err)
                errors.append(err)
        if errors:
            raise AggregateSyncError(errors)
