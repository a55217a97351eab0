"""Tests for the provider template registry."""

import pytest

from provider_sync.manifest import (
    CAPIProvider,
    CAPIProviderSpec,
    ControlPlaneProvider,
    InfrastructureProvider,
    ObjectMeta,
)
from provider_sync import registry


@pytest.mark.parametrize(
    ("provider_type", "kind"),
    [
        ("core", "CoreProvider"),
        ("Core", "CoreProvider"),
        ("bootstrap", "BootstrapProvider"),
        ("controlPlane", "ControlPlaneProvider"),
        ("ControlPlane", "ControlPlaneProvider"),
        ("INFRASTRUCTURE", "InfrastructureProvider"),
        ("addon", "AddonProvider"),
        ("ipam", "IPAMProvider"),
        ("runtimeExtension", "RuntimeExtensionProvider"),
    ],
)
def test_resolve(provider_type: str, kind: str) -> None:
    """Test resolving provider types case insensitively."""
    template = registry.resolve(provider_type)
    assert template is not None
    assert template.kind == kind


@pytest.mark.parametrize("provider_type", ["", "cloud", "infra"])
def test_resolve_unknown(provider_type: str) -> None:
    """Test that unknown provider types have no template."""
    assert registry.resolve(provider_type) is None


def test_resolve_returns_copy() -> None:
    """Test that changing a resolved template does not change the registry."""
    template = registry.resolve("infrastructure")
    assert template is not None
    template.metadata.name = "changed"
    template.spec.version = "v1.0.0"

    again = registry.resolve("infrastructure")
    assert again is not None
    assert again.metadata.name == ""
    assert again.spec.version == ""


def test_instantiate_uses_spec_name() -> None:
    """Test the destination is named after the desired name."""
    source = CAPIProvider(
        metadata=ObjectMeta(name="kubeadm", namespace="capi-kubeadm"),
        spec=CAPIProviderSpec(type="controlPlane", name="kubeadm-control-plane"),
    )
    provider = registry.instantiate(source)
    assert isinstance(provider, ControlPlaneProvider)
    assert provider.metadata.name == "kubeadm-control-plane"
    assert provider.metadata.namespace == "capi-kubeadm"


def test_instantiate_defaults_to_source_name() -> None:
    """Test the destination is named after the source without a desired name."""
    source = CAPIProvider(
        metadata=ObjectMeta(name="docker", namespace="capd-system"),
        spec=CAPIProviderSpec(type="infrastructure"),
    )
    provider = registry.instantiate(source)
    assert isinstance(provider, InfrastructureProvider)
    assert provider.metadata.name == "docker"
    assert provider.metadata.namespace == "capd-system"
    assert provider.metadata.annotations is None


def test_instantiate_unknown_type() -> None:
    """Test that no destination is created for an unknown type."""
    source = CAPIProvider(
        metadata=ObjectMeta(name="docker", namespace="capd-system"),
        spec=CAPIProviderSpec(type="cloud"),
    )
    assert registry.instantiate(source) is None
