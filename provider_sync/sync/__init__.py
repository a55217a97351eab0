"""The sync module mirrors CAPIProvider resources into operator providers."""

from .controller import ProviderController
from .provider import ProviderSync
from .synchronizer import DefaultSynchronizer, Synchronizer, SynchronizerList

__all__ = [
    "ProviderController",
    "ProviderSync",
    "DefaultSynchronizer",
    "Synchronizer",
    "SynchronizerList",
]
