"""Client for reading and writing resource records.

The synchronizer only talks to the cluster through this interface, so that
the records may be held by a real API server or in memory.
"""

from abc import ABC, abstractmethod
from typing import TypeVar

from provider_sync.manifest import NamedResource, CAPIProvider, Provider

__all__ = [
    "ResourceClient",
]

Resource = CAPIProvider | Provider
T = TypeVar("T", CAPIProvider, Provider)


class ResourceClient(ABC):
    """Abstract client for resource records.

    Implementations must be safe for use by concurrent reconciliations.
    """

    @abstractmethod
    async def get(self, resource_id: NamedResource, cls: type[T]) -> T:
        """Return the current state of a resource.

        Raises:
            ObjectNotFoundError: If the resource does not exist.
        """

    @abstractmethod
    async def create(self, obj: Resource) -> None:
        """Create the resource, updating its metadata with the stored state.

        Raises:
            ObjectExistsError: If the resource already exists.
        """

    @abstractmethod
    async def patch(self, obj: Resource, base: Resource) -> None:
        """Send the fields of `obj` that differ from `base` as a merge patch.

        The metadata of `obj` is updated with the stored state.

        Raises:
            ObjectNotFoundError: If the resource does not exist.
        """

    @abstractmethod
    async def delete(self, resource_id: NamedResource) -> None:
        """Delete the resource.

        Raises:
            ObjectNotFoundError: If the resource does not exist.
        """

    @abstractmethod
    async def list_objects(self, cls: type[T]) -> list[T]:
        """Return all resources of the given type."""
