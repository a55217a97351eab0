"""Registry of provider templates keyed by provider type.

Each supported operator provider kind is registered once as a prototype. A
CAPIProvider is mirrored by copying the prototype matching its `spec.type`.
"""

from collections.abc import Mapping
import copy
import logging
from types import MappingProxyType

from .manifest import PROVIDER_KINDS, CAPIProvider, ObjectMeta, Provider

__all__ = [
    "PROVIDERS",
    "resolve",
    "instantiate",
]

_LOGGER = logging.getLogger(__name__)


PROVIDERS: tuple[Provider, ...] = tuple(
    cls(metadata=ObjectMeta(name="")) for cls in PROVIDER_KINDS
)

_TEMPLATES: Mapping[str, Provider] = MappingProxyType(
    {provider.provider_type.lower(): provider for provider in PROVIDERS}
)


def resolve(provider_type: str) -> Provider | None:
    """Return a fresh copy of the template for a provider type.

    The match is case insensitive, so `controlPlane` and `ControlPlane` both
    resolve to a ControlPlaneProvider.
    """
    if (template := _TEMPLATES.get(provider_type.lower())) is None:
        return None
    return copy.deepcopy(template)


def instantiate(source: CAPIProvider) -> Provider | None:
    """Return an empty provider named after the CAPIProvider, if its type is known."""
    if (provider := resolve(source.spec.type)) is None:
        _LOGGER.debug(
            "No provider template for type '%s' of %s",
            source.spec.type,
            source.resource_id,
        )
        return None
    provider.metadata.name = source.spec.name or source.metadata.name
    provider.metadata.namespace = source.metadata.namespace
    return provider
