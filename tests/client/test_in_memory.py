"""Tests for the in memory resource client."""

import pytest

from provider_sync.client import InMemoryClient, PatchRecord
from provider_sync.exceptions import ObjectExistsError, ObjectNotFoundError
from provider_sync.manifest import (
    CAPIProvider,
    CAPIProviderSpec,
    InfrastructureProvider,
    InstallSpec,
    NamedResource,
    ObjectMeta,
)

PROVIDER_ID = NamedResource("InfrastructureProvider", "capd-system", "docker")


def _provider(version: str = "v1.7.0") -> InfrastructureProvider:
    return InfrastructureProvider(
        metadata=ObjectMeta(name="docker", namespace="capd-system"),
        spec=InstallSpec(version=version),
    )


async def test_create_and_get(client: InMemoryClient) -> None:
    """Test creating and reading back a resource."""
    provider = _provider()
    await client.create(provider)
    assert provider.metadata.uid
    assert provider.metadata.resource_version == "1"

    result = await client.get(PROVIDER_ID, InfrastructureProvider)
    assert result == provider
    assert result is not provider


async def test_create_exists(client: InMemoryClient) -> None:
    """Test creating a resource twice."""
    await client.create(_provider())
    with pytest.raises(ObjectExistsError):
        await client.create(_provider())


async def test_get_not_found(client: InMemoryClient) -> None:
    """Test reading a missing resource."""
    with pytest.raises(ObjectNotFoundError):
        await client.get(PROVIDER_ID, InfrastructureProvider)


async def test_get_wrong_type(client: InMemoryClient) -> None:
    """Test reading a resource as the wrong type."""
    await client.create(_provider())
    with pytest.raises(ValueError, match="is not of type CAPIProvider"):
        await client.get(PROVIDER_ID, CAPIProvider)


async def test_patch_sends_difference(client: InMemoryClient) -> None:
    """Test that a patch only sends changed fields and keeps remote changes."""
    await client.create(_provider())
    remote = await client.get(PROVIDER_ID, InfrastructureProvider)
    remote.status.installed_version = "v1.7.0"
    await client.patch(remote, _provider())

    local = await client.get(PROVIDER_ID, InfrastructureProvider)
    base = local.deep_copy()
    local.spec.version = ""
    local.status.installed_version = None
    # Fields equal to the base are not sent
    base.status.installed_version = None
    await client.patch(local, base)

    result = await client.get(PROVIDER_ID, InfrastructureProvider)
    assert result.spec.version == ""
    assert result.status.installed_version == "v1.7.0"
    assert client.patches[-1] == PatchRecord(
        PROVIDER_ID, {"spec": {"version": ""}}
    )


async def test_patch_not_found(client: InMemoryClient) -> None:
    """Test patching a missing resource."""
    provider = _provider()
    with pytest.raises(ObjectNotFoundError):
        await client.patch(provider, provider.deep_copy())
    assert client.patches == []


async def test_delete(client: InMemoryClient) -> None:
    """Test deleting a resource."""
    await client.create(_provider())
    await client.delete(PROVIDER_ID)
    with pytest.raises(ObjectNotFoundError):
        await client.get(PROVIDER_ID, InfrastructureProvider)
    with pytest.raises(ObjectNotFoundError):
        await client.delete(PROVIDER_ID)


async def test_list_objects(client: InMemoryClient) -> None:
    """Test listing resources by type."""
    await client.create(_provider())
    await client.create(
        CAPIProvider(
            metadata=ObjectMeta(name="docker", namespace="capd-system"),
            spec=CAPIProviderSpec(type="infrastructure"),
        )
    )
    await client.create(
        CAPIProvider(
            metadata=ObjectMeta(name="aws", namespace="capa-system"),
            spec=CAPIProviderSpec(type="infrastructure"),
        )
    )
    sources = await client.list_objects(CAPIProvider)
    assert [source.metadata.name for source in sources] == ["aws", "docker"]
    providers = await client.list_objects(InfrastructureProvider)
    assert [provider.metadata.name for provider in providers] == ["docker"]
    assert len(client.list_docs()) == 3
