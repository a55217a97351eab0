"""
The client module provides access to the resource records mirrored by the
synchronizer.

- Uses NamedResource as the key for all objects.
- Writes are sent as JSON merge patches computed against a base snapshot.
"""

from .client import ResourceClient
from .in_memory import InMemoryClient, PatchRecord
from .patch import apply_merge_patch, create_merge_patch

__all__ = [
    "ResourceClient",
    "InMemoryClient",
    "PatchRecord",
    "apply_merge_patch",
    "create_merge_patch",
]
