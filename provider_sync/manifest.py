"""Representation of the resource records mirrored by provider-sync.

A `CAPIProvider` is the source of truth for a provider owned by the end user.
It is mirrored into one of the Cluster API Operator provider kinds (e.g. an
`InfrastructureProvider`) which is owned by the downstream operator that
installs the provider components.
"""

import copy
from dataclasses import dataclass, field
from enum import StrEnum
import logging
from pathlib import Path
from typing import Any, ClassVar

import aiofiles
import yaml
from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

from .conditions import Conditions
from .exceptions import InputException

__all__ = [
    "read_manifests",
    "parse_raw_obj",
    "NamedResource",
    "ObjectMeta",
    "Phase",
    "InstallSpec",
    "CAPIProvider",
    "Provider",
    "CoreProvider",
    "BootstrapProvider",
    "ControlPlaneProvider",
    "InfrastructureProvider",
    "AddonProvider",
    "IPAMProvider",
    "RuntimeExtensionProvider",
]

_LOGGER = logging.getLogger(__name__)


# Match a prefix of apiVersion to ensure we have the right type of object.
# We don't check specific versions for forward compatibility on upgrade.
TURTLES_DOMAIN = "turtles-capi.cattle.io"
OPERATOR_DOMAIN = "operator.cluster.x-k8s.io"
TURTLES_API_VERSION = f"{TURTLES_DOMAIN}/v1alpha1"
OPERATOR_API_VERSION = f"{OPERATOR_DOMAIN}/v1alpha2"
CAPI_PROVIDER_KIND = "CAPIProvider"

# Set by the operator to skip a rollout when the spec did not change. An empty
# value forces the operator to redeploy the provider.
APPLIED_SPEC_HASH_ANNOTATION = "operator.cluster.x-k8s.io/applied-spec-hash"

# Conditions reported by the operator on a provider
PROVIDER_INSTALLED_CONDITION = "ProviderInstalled"
PREFLIGHT_CHECK_CONDITION = "PreflightCheckPassed"

# Conditions maintained on the CAPIProvider by the synchronizer
LAST_APPLIED_CONFIGURATION_TIME = "LastAppliedConfigurationTime"
CHECK_LATEST_VERSION_TIME = "CheckLatestVersionTime"


def _check_version(doc: dict[str, Any], version: str) -> None:
    """Assert that the resource has the specified version."""
    if not (api_version := doc.get("apiVersion")):
        raise InputException(f"Invalid object missing apiVersion: {doc}")
    if not api_version.startswith(version):
        raise InputException(f"Invalid object expected '{version}': {doc}")


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for all manifest objects."""

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a kubernetes resource."""

    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass
class OwnerReference(BaseManifest):
    """Reference to the object owning another object."""

    api_version: str = field(metadata=field_options(alias="apiVersion"))
    kind: str
    name: str
    uid: str | None = None
    controller: bool | None = None


@dataclass
class ObjectMeta(BaseManifest):
    """Standard object metadata."""

    name: str
    """The name of the object."""

    namespace: str | None = None
    """The namespace of the object."""

    labels: dict[str, str] | None = None
    """Labels attached to the object."""

    annotations: dict[str, str] | None = None
    """Annotations attached to the object."""

    uid: str | None = None
    """Unique identifier assigned by the resource client on creation."""

    resource_version: str | None = field(
        metadata=field_options(alias="resourceVersion"), default=None
    )
    """Opaque version assigned by the resource client on every write."""

    generation: int | None = None
    """Generation of the desired state."""

    owner_references: list[OwnerReference] | None = field(
        metadata=field_options(alias="ownerReferences"), default=None
    )
    """Objects that own this object."""


@dataclass
class SecretReference(BaseManifest):
    """Reference to a secret holding provider configuration variables."""

    name: str
    namespace: str | None = None


@dataclass
class ConfigMapReference(BaseManifest):
    """Reference to a config map holding additional manifests."""

    name: str
    namespace: str | None = None


@dataclass
class FetchConfiguration(BaseManifest):
    """Where the operator fetches the provider components from."""

    url: str | None = None
    oci: str | None = None


@dataclass
class ObjectStoreBackend(BaseManifest):
    """An object store used as a backend by the provider (e.g. for snapshots)."""

    bucket: str
    endpoint: str | None = None
    region: str | None = None
    folder: str | None = None
    insecure: bool | None = None
    secret_ref: SecretReference | None = field(
        metadata=field_options(alias="secretRef"), default=None
    )


@dataclass
class InstallSpec(BaseManifest):
    """The spec of a provider as understood by the operator installing it."""

    version: str = ""
    """The provider version, empty to install the latest version."""

    config_secret: SecretReference | None = field(
        metadata=field_options(alias="configSecret"), default=None
    )
    """Secret with variables used when installing the provider."""

    fetch_config: FetchConfiguration | None = field(
        metadata=field_options(alias="fetchConfig"), default=None
    )
    """Overrides the location of the provider components."""

    additional_manifests: ConfigMapReference | None = field(
        metadata=field_options(alias="additionalManifests"), default=None
    )
    """Extra manifests applied together with the provider components."""


@dataclass
class ProviderStatus(BaseManifest):
    """Status of a provider reported by the operator."""

    installed_version: str | None = field(
        metadata=field_options(alias="installedVersion"), default=None
    )
    """The version of the provider currently installed."""

    contract: str | None = None
    """The Cluster API contract implemented by the installed provider."""

    observed_generation: int | None = field(
        metadata=field_options(alias="observedGeneration"), default=None
    )
    """The generation last observed by the operator."""

    conditions: Conditions = field(default_factory=Conditions)
    """Conditions reported for the provider."""


class Phase(StrEnum):
    """Coarse lifecycle phase of a CAPIProvider."""

    PROVISIONING = "Provisioning"
    READY = "Ready"
    FAILED = "Failed"


@dataclass
class CAPIProviderSpec(InstallSpec):
    """Desired state of a CAPIProvider."""

    type: str = ""
    """The kind of provider, e.g. infrastructure or controlPlane."""

    name: str = ""
    """Name of the mirrored provider, defaults to the CAPIProvider name."""

    variables: dict[str, str] | None = None
    """Free form variables used to configure the provider."""

    object_store: ObjectStoreBackend | None = field(
        metadata=field_options(alias="objectStore"), default=None
    )
    """Optional object store backend used by the provider."""

    def install_spec(self) -> InstallSpec:
        """Return a copy of the fields the operator acts on."""
        return InstallSpec(
            version=self.version,
            config_secret=copy.deepcopy(self.config_secret),
            fetch_config=copy.deepcopy(self.fetch_config),
            additional_manifests=copy.deepcopy(self.additional_manifests),
        )


@dataclass
class CAPIProviderStatus(ProviderStatus):
    """Observed state of a CAPIProvider."""

    phase: Phase = Phase.PROVISIONING
    """The lifecycle phase derived from the conditions."""


@dataclass
class _Resource(BaseManifest):
    """Common behavior of the kubernetes resources in this module."""

    kind: ClassVar[str]
    api_version: ClassVar[str]
    domain: ClassVar[str]

    metadata: ObjectMeta

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> Any:
        """Parse a resource from a kubernetes object."""
        _check_version(doc, cls.domain)
        if doc.get("kind") != cls.kind:
            raise InputException(f"Invalid {cls.kind} object kind: {doc}")
        if not (metadata := doc.get("metadata")):
            raise InputException(f"Invalid {cls.kind} missing metadata: {doc}")
        if not metadata.get("name"):
            raise InputException(f"Invalid {cls.kind} missing metadata.name: {doc}")
        return cls.from_dict(doc)

    def to_doc(self) -> dict[str, Any]:
        """Return the kubernetes object for the resource."""
        return {"apiVersion": self.api_version, "kind": self.kind, **self.to_dict()}

    @property
    def resource_id(self) -> NamedResource:
        """Identity of the resource."""
        return NamedResource(self.kind, self.metadata.namespace, self.metadata.name)

    def deep_copy(self) -> Any:
        """Return an independent copy of the resource."""
        return copy.deepcopy(self)


@dataclass
class CAPIProvider(_Resource):
    """A provider requested by the user, the source of truth for mirroring."""

    kind: ClassVar[str] = CAPI_PROVIDER_KIND
    api_version: ClassVar[str] = TURTLES_API_VERSION
    domain: ClassVar[str] = TURTLES_DOMAIN

    spec: CAPIProviderSpec = field(default_factory=CAPIProviderSpec)
    status: CAPIProviderStatus = field(default_factory=CAPIProviderStatus)

    def set_status(self, status: ProviderStatus) -> None:
        """Replace the status with a copy of the provider status.

        The phase is kept since it is derived here, not reported downstream.
        """
        status = copy.deepcopy(status)
        self.status = CAPIProviderStatus(
            installed_version=status.installed_version,
            contract=status.contract,
            observed_generation=status.observed_generation,
            conditions=status.conditions,
            phase=self.status.phase,
        )


@dataclass
class Provider(_Resource):
    """A provider installed by the Cluster API Operator."""

    provider_type: ClassVar[str]
    domain: ClassVar[str] = OPERATOR_DOMAIN
    api_version: ClassVar[str] = OPERATOR_API_VERSION

    spec: InstallSpec = field(default_factory=InstallSpec)
    status: ProviderStatus = field(default_factory=ProviderStatus)


@dataclass
class CoreProvider(Provider):
    """The Cluster API core provider."""

    kind: ClassVar[str] = "CoreProvider"
    provider_type: ClassVar[str] = "core"


@dataclass
class BootstrapProvider(Provider):
    """A bootstrap provider."""

    kind: ClassVar[str] = "BootstrapProvider"
    provider_type: ClassVar[str] = "bootstrap"


@dataclass
class ControlPlaneProvider(Provider):
    """A control plane provider."""

    kind: ClassVar[str] = "ControlPlaneProvider"
    provider_type: ClassVar[str] = "controlPlane"


@dataclass
class InfrastructureProvider(Provider):
    """An infrastructure provider."""

    kind: ClassVar[str] = "InfrastructureProvider"
    provider_type: ClassVar[str] = "infrastructure"


@dataclass
class AddonProvider(Provider):
    """An addon provider."""

    kind: ClassVar[str] = "AddonProvider"
    provider_type: ClassVar[str] = "addon"


@dataclass
class IPAMProvider(Provider):
    """An IP address management provider."""

    kind: ClassVar[str] = "IPAMProvider"
    provider_type: ClassVar[str] = "ipam"


@dataclass
class RuntimeExtensionProvider(Provider):
    """A runtime extension provider."""

    kind: ClassVar[str] = "RuntimeExtensionProvider"
    provider_type: ClassVar[str] = "runtimeExtension"


PROVIDER_KINDS: tuple[type[Provider], ...] = (
    CoreProvider,
    BootstrapProvider,
    ControlPlaneProvider,
    InfrastructureProvider,
    AddonProvider,
    IPAMProvider,
    RuntimeExtensionProvider,
)

_RESOURCE_KINDS: dict[str, type[_Resource]] = {
    cls.kind: cls for cls in (CAPIProvider, *PROVIDER_KINDS)
}


def parse_raw_obj(obj: dict[str, Any]) -> CAPIProvider | Provider | None:
    """Parse a raw kubernetes object, returning None for unsupported kinds."""
    if not (kind := obj.get("kind")):
        raise InputException(f"Invalid object missing kind: {obj}")
    if not obj.get("apiVersion"):
        raise InputException(f"Invalid object missing apiVersion: {obj}")
    if (cls := _RESOURCE_KINDS.get(kind)) is None:
        return None
    if not obj["apiVersion"].startswith(cls.domain):
        return None
    return cls.parse_doc(obj)  # type: ignore[no-any-return]


async def read_manifests(path: Path) -> list[CAPIProvider | Provider]:
    """Return the supported resources in a YAML file or a directory of files."""
    if path.is_dir():
        files = sorted(
            p for p in path.rglob("*") if p.suffix in (".yaml", ".yml") and p.is_file()
        )
    else:
        files = [path]
    results: list[CAPIProvider | Provider] = []
    for file in files:
        async with aiofiles.open(str(file)) as manifest_file:
            content = await manifest_file.read()
        try:
            docs = list(yaml.safe_load_all(content))
        except yaml.YAMLError as err:
            raise InputException(f"File {file} failed to parse as yaml: {err}") from err
        for doc in docs:
            if not isinstance(doc, dict):
                _LOGGER.debug("Skipping non-object document in %s", file)
                continue
            if (obj := parse_raw_obj(doc)) is None:
                _LOGGER.debug(
                    "Skipping unsupported object %s in %s", doc.get("kind"), file
                )
                continue
            results.append(obj)
    return results
