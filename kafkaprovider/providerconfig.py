"""Provider configuration resources: credentials and usage tracking."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .resources import ObjectMeta, ResourceStatus

GROUP = "kafka.crossplane.io"
VERSION = "v1alpha1"
GROUP_VERSION = f"{GROUP}/{VERSION}"


def group_kind(kind: str) -> str:
    """The group-qualified kind, such as ``Kind.kafka.crossplane.io``."""
    return f"{kind}.{GROUP}"


def kind_api_version(kind: str) -> str:
    """The kind followed by the group and version it belongs to."""
    return f"{kind}.{GROUP_VERSION}"


PROVIDER_CONFIG_KIND = "ProviderConfig"
PROVIDER_CONFIG_GROUP_KIND = group_kind(PROVIDER_CONFIG_KIND)
PROVIDER_CONFIG_KIND_API_VERSION = kind_api_version(PROVIDER_CONFIG_KIND)
PROVIDER_CONFIG_GROUP_VERSION_KIND = (GROUP, VERSION, PROVIDER_CONFIG_KIND)

PROVIDER_CONFIG_USAGE_KIND = "ProviderConfigUsage"
PROVIDER_CONFIG_USAGE_GROUP_KIND = group_kind(PROVIDER_CONFIG_USAGE_KIND)
PROVIDER_CONFIG_USAGE_KIND_API_VERSION = kind_api_version(PROVIDER_CONFIG_USAGE_KIND)
PROVIDER_CONFIG_USAGE_GROUP_VERSION_KIND = (GROUP, VERSION, PROVIDER_CONFIG_USAGE_KIND)

PROVIDER_CONFIG_USAGE_LIST_KIND = "ProviderConfigUsageList"
PROVIDER_CONFIG_USAGE_LIST_GROUP_KIND = group_kind(PROVIDER_CONFIG_USAGE_LIST_KIND)
PROVIDER_CONFIG_USAGE_LIST_KIND_API_VERSION = kind_api_version(PROVIDER_CONFIG_USAGE_LIST_KIND)
PROVIDER_CONFIG_USAGE_LIST_GROUP_VERSION_KIND = (GROUP, VERSION, PROVIDER_CONFIG_USAGE_LIST_KIND)


class CredentialsSource(str, Enum):
    """Where the provider's credentials come from."""

    NONE = "None"
    SECRET = "Secret"
    INJECTED_IDENTITY = "InjectedIdentity"
    ENVIRONMENT = "Environment"
    FILESYSTEM = "Filesystem"


@dataclass(frozen=True)
class SecretKeySelector:
    """A key within a named secret."""

    name: str
    namespace: str
    key: str


@dataclass
class ProviderCredentials:
    """Credentials required to authenticate to Kafka."""

    source: CredentialsSource
    secret_ref: Optional[SecretKeySelector] = None
    env_name: str = ""
    fs_path: str = ""

    def __post_init__(self) -> None:
        # Accepts the plain string form; anything outside the enum is rejected.
        self.source = CredentialsSource(self.source)


@dataclass
class ProviderConfigSpec:
    """Desired state of a provider configuration."""

    credentials: ProviderCredentials


@dataclass
class ProviderConfig:
    """Configures how the provider connects to Kafka."""

    spec: ProviderConfigSpec
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    status: ResourceStatus = field(default_factory=ResourceStatus)
    users: int = 0


@dataclass
class ProviderConfigUsage:
    """Records that a managed resource uses a provider configuration."""

    provider_config_ref: str
    resource_api_version: str = ""
    resource_kind: str = ""
    resource_name: str = ""
    metadata: ObjectMeta = field(default_factory=ObjectMeta)