"""Managed resource types for Kafka access control lists and topics."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Optional, Union

EXTERNAL_NAME_ANNOTATION = "crossplane.io/external-name"

CONDITION_READY = "Ready"
CONDITION_SYNCED = "Synced"

STATUS_TRUE = "True"
STATUS_FALSE = "False"
STATUS_UNKNOWN = "Unknown"

REASON_AVAILABLE = "Available"

DEFAULT_PROVIDER_CONFIG = "default"

VERSION = "v1alpha1"
ACL_GROUP = "acl.kafka.crossplane.io"
TOPIC_GROUP = "topic.kafka.crossplane.io"

ACCESS_CONTROL_LIST_KIND = "AccessControlList"
ACCESS_CONTROL_LIST_GROUP_KIND = f"{ACCESS_CONTROL_LIST_KIND}.{ACL_GROUP}"
ACCESS_CONTROL_LIST_KIND_API_VERSION = f"{ACCESS_CONTROL_LIST_GROUP_KIND}/{VERSION}"
ACCESS_CONTROL_LIST_GROUP_VERSION_KIND = (ACL_GROUP, VERSION, ACCESS_CONTROL_LIST_KIND)

TOPIC_KIND = "Topic"
TOPIC_GROUP_KIND = f"{TOPIC_KIND}.{TOPIC_GROUP}"
TOPIC_KIND_API_VERSION = f"{TOPIC_GROUP_KIND}/{VERSION}"
TOPIC_GROUP_VERSION_KIND = (TOPIC_GROUP, VERSION, TOPIC_KIND)

RESOURCE_TYPES = ("Unknown", "Any", "Topic", "Group", "Cluster", "TransactionalID")
RESOURCE_OPERATIONS = (
    "Unknown",
    "Any",
    "All",
    "Read",
    "Write",
    "Create",
    "Delete",
    "Alter",
    "Describe",
    "ClusterAction",
    "DescribeConfigs",
    "AlterConfigs",
    "IdempotentWrite",
)
PERMISSION_TYPES = ("Unknown", "Any", "Allow", "Deny")
PATTERN_TYPE_FILTERS = ("Prefixed", "Any", "Match", "Literal")


@dataclass
class ObjectMeta:
    """Name and annotations of a resource."""

    name: str = ""
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Condition:
    """One observed condition of a resource."""

    type: str
    status: str
    reason: str = ""
    message: str = ""
    last_transition_time: Optional[datetime.datetime] = None

    def equivalent(self, other: Condition) -> bool:
        """True if both conditions match, ignoring the transition time."""
        return (self.type, self.status, self.reason, self.message) == (
            other.type,
            other.status,
            other.reason,
            other.message,
        )


def available() -> Condition:
    """The condition of a resource that is ready for use."""
    return Condition(
        type=CONDITION_READY,
        status=STATUS_TRUE,
        reason=REASON_AVAILABLE,
        last_transition_time=datetime.datetime.now(datetime.timezone.utc),
    )


@dataclass
class ResourceStatus:
    """Conditions observed on a managed resource."""

    conditions: list[Condition] = field(default_factory=list)

    def set_conditions(self, *args: Condition) -> None:
        """Set each condition, replacing any existing one of the same type.

        An existing condition that only differs in transition time is kept.
        """
        for new in args:
            for position, existing in enumerate(self.conditions):
                if existing.type == new.type:
                    if not existing.equivalent(new):
                        self.conditions[position] = new
                    break
            else:
                self.conditions.append(new)

    def get_condition(self, condition_type: str) -> Condition:
        """The condition of the given type, or an Unknown one if none is set."""
        return next(
            (c for c in self.conditions if c.type == condition_type),
            Condition(type=condition_type, status=STATUS_UNKNOWN),
        )


@dataclass
class ExternalObservation:
    """What was learned about the external resource during observation."""

    resource_exists: bool = False
    resource_up_to_date: bool = False
    resource_late_initialized: bool = False


def _require_choice(value: str, choices: tuple[str, ...], what: str) -> None:
    if value not in choices:
        raise ValueError(f"{what} must be one of {', '.join(choices)}, got {value!r}")


@dataclass
class AccessControlListParameters:
    """Configurable fields of an access control list."""

    resource_name: str
    resource_type: str
    resource_principal: str
    resource_host: str
    resource_operation: str
    resource_permission_type: str
    resource_pattern_type_filter: str

    def __post_init__(self) -> None:
        _require_choice(self.resource_type, RESOURCE_TYPES, "resourceType")
        _require_choice(self.resource_operation, RESOURCE_OPERATIONS, "resourceOperation")
        _require_choice(self.resource_permission_type, PERMISSION_TYPES, "resourcePermissionType")
        _require_choice(
            self.resource_pattern_type_filter, PATTERN_TYPE_FILTERS, "resourcePatternTypeFilter"
        )


@dataclass
class AccessControlListObservation:
    """Observable fields of an access control list."""

    id: str = ""


@dataclass
class AccessControlListSpec:
    """Desired state of an access control list."""

    for_provider: AccessControlListParameters
    provider_config_ref: str = DEFAULT_PROVIDER_CONFIG


@dataclass
class AccessControlListStatus(ResourceStatus):
    """Observed state of an access control list."""

    at_provider: AccessControlListObservation = field(default_factory=AccessControlListObservation)


@dataclass
class AccessControlList:
    """A managed Kafka access control list."""

    spec: AccessControlListSpec
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    status: AccessControlListStatus = field(default_factory=AccessControlListStatus)


@dataclass
class TopicParameters:
    """Configurable fields of a topic."""

    replication_factor: int
    partitions: int
    config: Optional[dict[str, Optional[str]]] = None

    def __post_init__(self) -> None:
        if self.replication_factor < 1:
            raise ValueError(f"replicationFactor must be at least 1, got {self.replication_factor}")
        if self.partitions < 1:
            raise ValueError(f"partitions must be at least 1, got {self.partitions}")


@dataclass
class TopicObservation:
    """Observable fields of a topic."""

    id: str = ""


@dataclass
class TopicSpec:
    """Desired state of a topic."""

    for_provider: TopicParameters
    provider_config_ref: str = DEFAULT_PROVIDER_CONFIG


@dataclass
class TopicStatus(ResourceStatus):
    """Observed state of a topic."""

    at_provider: TopicObservation = field(default_factory=TopicObservation)


@dataclass
class Topic:
    """A managed Kafka topic."""

    spec: TopicSpec
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    status: TopicStatus = field(default_factory=TopicStatus)


_Managed = Union[AccessControlList, Topic]


def get_external_name(obj: _Managed) -> str:
    """The external name annotation of a resource, or an empty string."""
    return obj.metadata.annotations.get(EXTERNAL_NAME_ANNOTATION, "")


def set_external_name(obj: _Managed, name: str) -> None:
    """Set the external name annotation of a resource."""
    obj.metadata.annotations[EXTERNAL_NAME_ANNOTATION] = name