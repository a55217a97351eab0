"""Module for an in memory resource client."""

import asyncio
from dataclasses import dataclass
import logging
from typing import Any, TypeVar
import uuid

from provider_sync.exceptions import ObjectExistsError, ObjectNotFoundError
from provider_sync.manifest import CAPIProvider, NamedResource, Provider

from .client import Resource, ResourceClient
from .patch import apply_merge_patch, create_merge_patch

__all__ = [
    "InMemoryClient",
    "PatchRecord",
]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T", CAPIProvider, Provider)


@dataclass(frozen=True)
class PatchRecord:
    """A merge patch sent to the client."""

    resource_id: NamedResource
    patch: dict[str, Any]


class InMemoryClient(ResourceClient):
    """In-memory implementation of the ResourceClient interface.

    Resources are stored as serialized kubernetes objects keyed by
    NamedResource, so that reads always return an independent copy.
    """

    def __init__(self) -> None:
        """Initialize the InMemoryClient."""
        self._objects: dict[NamedResource, dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self._generation = 0
        self.patches: list[PatchRecord] = []

    def _next_version(self) -> str:
        self._generation += 1
        return str(self._generation)

    async def get(self, resource_id: NamedResource, cls: type[T]) -> T:
        """Return the current state of a resource."""
        if resource_id.kind != cls.kind:
            raise ValueError(
                f"Resource {resource_id} is not of type {cls.__name__}"
            )
        if (doc := self._objects.get(resource_id)) is None:
            raise ObjectNotFoundError(f"{resource_id} not found")
        return cls.from_dict(doc)

    async def create(self, obj: Resource) -> None:
        """Create the resource."""
        resource_id = obj.resource_id
        async with self._lock:
            if resource_id in self._objects:
                raise ObjectExistsError(f"{resource_id} already exists")
            _LOGGER.debug("Creating object %s", resource_id)
            obj.metadata.uid = str(uuid.uuid4())
            obj.metadata.resource_version = self._next_version()
            self._objects[resource_id] = obj.to_doc()

    async def patch(self, obj: Resource, base: Resource) -> None:
        """Apply the difference between `base` and `obj` as a merge patch."""
        resource_id = obj.resource_id
        patch = create_merge_patch(base.to_doc(), obj.to_doc())
        async with self._lock:
            if (doc := self._objects.get(resource_id)) is None:
                raise ObjectNotFoundError(f"{resource_id} not found")
            _LOGGER.debug("Patching object %s: %s", resource_id, patch)
            self.patches.append(PatchRecord(resource_id, patch))
            doc = apply_merge_patch(doc, patch)
            doc["metadata"]["resourceVersion"] = self._next_version()
            self._objects[resource_id] = doc
            obj.metadata.uid = doc["metadata"].get("uid")
            obj.metadata.resource_version = doc["metadata"]["resourceVersion"]

    async def delete(self, resource_id: NamedResource) -> None:
        """Delete the resource."""
        async with self._lock:
            if self._objects.pop(resource_id, None) is None:
                raise ObjectNotFoundError(f"{resource_id} not found")
            _LOGGER.debug("Deleted object %s", resource_id)

    async def list_objects(self, cls: type[T]) -> list[T]:
        """Return all resources of the given type."""
        return [
            cls.from_dict(doc)
            for resource_id, doc in self._sorted_items()
            if resource_id.kind == cls.kind
        ]

    def list_docs(self) -> list[dict[str, Any]]:
        """Return every stored kubernetes object, ordered by identity."""
        return [doc for _, doc in self._sorted_items()]

    def _sorted_items(self) -> list[tuple[NamedResource, dict[str, Any]]]:
        return sorted(self._objects.items(), key=lambda item: str(item[0]))
