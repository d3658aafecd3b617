"""Kafka access control lists: building requests, comparing and serialising."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from enum import IntEnum
from typing import Any, Optional, Protocol, Sequence

from .resources import AccessControlListParameters

logger = logging.getLogger(__name__)

_CLUSTER_RESOURCE_NAME = "kafka-cluster"
_NAMED_RESOURCE_TYPES = ("Topic", "Group", "TransactionalID", "Any")


class ACLError(Exception):
    """Raised when an ACL cannot be parsed, described or created."""


class ACLOperation(IntEnum):
    """Operations an ACL can allow or deny."""

    UNKNOWN = 0
    ANY = 1
    ALL = 2
    READ = 3
    WRITE = 4
    CREATE = 5
    DELETE = 6
    ALTER = 7
    DESCRIBE = 8
    CLUSTER_ACTION = 9
    DESCRIBE_CONFIGS = 10
    ALTER_CONFIGS = 11
    IDEMPOTENT_WRITE = 12
    CREATE_TOKENS = 13
    DESCRIBE_TOKENS = 14


class PatternType(IntEnum):
    """How an ACL's resource name is matched."""

    UNKNOWN = 0
    ANY = 1
    MATCH = 2
    LITERAL = 3
    PREFIXED = 4


def _normalise(text: str) -> str:
    return "".join(ch for ch in text.lower() if ch not in "._-")


def _parse_enum(enum: type, label: str, text: str):
    key = _normalise(text)
    for member in enum:
        if member.name.replace("_", "").lower() == key:
            return member
    raise ACLError(f"{label}: unable to parse {text!r}")


def parse_acl_operation(text: str) -> ACLOperation:
    """Parse an operation name, ignoring case, dots, dashes and underscores."""
    return _parse_enum(ACLOperation, "ACLOperation", text)


def parse_pattern_type(text: str) -> PatternType:
    """Parse a resource pattern type name, ignoring case and separators."""
    return _parse_enum(PatternType, "ACLResourcePatternType", text)


@dataclass(frozen=True)
class AccessControlList:
    """A Kafka ACL with all of its configurable fields."""

    resource_name: str = ""
    resource_type: str = ""
    resource_principal: str = ""
    resource_host: str = ""
    resource_operation: str = ""
    resource_permission_type: str = ""
    resource_pattern_type_filter: str = ""


_JSON_KEYS = {
    "resource_name": "ResourceName",
    "resource_type": "ResourceType",
    "resource_principal": "ResourcePrincipal",
    "resource_host": "ResourceHost",
    "resource_operation": "ResourceOperation",
    "resource_permission_type": "ResourcePermissionType",
    "resource_pattern_type_filter": "ResourcePatternTypeFilter",
}
_FIELD_BY_KEY = {key: attr for attr, key in _JSON_KEYS.items()}
_FIELD_BY_FOLDED_KEY = {key.lower(): attr for attr, key in _JSON_KEYS.items()}


@dataclass(frozen=True)
class ACLRequest:
    """What an admin client needs to describe, create or delete one ACL."""

    principal: str
    host: str
    operation: ACLOperation
    pattern_type: PatternType
    resource_type: Optional[str] = None
    resource_name: Optional[str] = None
    permission: str = "Allow"


class ACLAdminClient(Protocol):
    """The admin operations on ACLs that this module relies on."""

    def describe_acls(self, request: ACLRequest) -> Sequence[Any]:
        """ACLs on the cluster matching the request."""

    def create_acls(self, request: ACLRequest) -> Optional[Sequence[str]]:
        """Create the ACL; returns the principal of each created result."""

    def delete_acls(self, request: ACLRequest) -> Any:
        """Delete ACLs matching the request; returns the broker's response."""


def _request(acl: AccessControlList, operation: ACLOperation, pattern: PatternType) -> ACLRequest:
    if acl.resource_type == "Cluster":
        resource_type, resource_name = "Cluster", _CLUSTER_RESOURCE_NAME
    elif acl.resource_type in _NAMED_RESOURCE_TYPES:
        resource_type, resource_name = acl.resource_type, acl.resource_name
    else:
        resource_type, resource_name = None, None
    return ACLRequest(
        principal=acl.resource_principal,
        host=acl.resource_host,
        operation=operation,
        pattern_type=pattern,
        resource_type=resource_type,
        resource_name=resource_name,
    )


def build_request(acl: AccessControlList) -> ACLRequest:
    """Build the admin request for an ACL; raises ACLError on unknown names."""
    try:
        operation = parse_acl_operation(acl.resource_operation)
    except ACLError as exc:
        raise ACLError(f"did not return ACL Operation: {exc}") from exc
    try:
        pattern = parse_pattern_type(acl.resource_pattern_type_filter)
    except ACLError as exc:
        raise ACLError(f"did not return parsing of ACL pattern: {exc}") from exc
    return _request(acl, operation, pattern)


def _lenient_request(acl: AccessControlList) -> ACLRequest:
    try:
        operation = parse_acl_operation(acl.resource_operation)
    except ACLError:
        operation = ACLOperation.UNKNOWN
    try:
        pattern = parse_pattern_type(acl.resource_pattern_type_filter)
    except ACLError:
        pattern = PatternType.UNKNOWN
    return _request(acl, operation, pattern)


def list_acls(client: ACLAdminClient, acl: AccessControlList) -> Optional[AccessControlList]:
    """Look the ACL up on the cluster; None if no matching ACL exists."""
    request = build_request(acl)
    try:
        described = client.describe_acls(request)
    except Exception as exc:
        raise ACLError(f"describe ACLs response is empty: {exc}") from exc
    if not described:
        return None
    return replace(acl, resource_name="")


def create(client: ACLAdminClient, acl: AccessControlList) -> None:
    """Create the ACL on the cluster."""
    principals = client.create_acls(_lenient_request(acl))
    if principals and not principals[0]:
        raise ACLError("no create response for acl")


def delete(client: ACLAdminClient, acl: AccessControlList) -> None:
    """Delete the ACL from the cluster."""
    response = client.delete_acls(_lenient_request(acl))
    logger.info("Delete Response: %s", response)


_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def convert_to_json(acl: AccessControlList) -> str:
    """Serialise the ACL to compact JSON, used as the external name."""
    document = {key: getattr(acl, attr) for attr, key in _JSON_KEYS.items()}
    text = json.dumps(document, separators=(",", ":"), ensure_ascii=False)
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def convert_from_json(extname: str) -> AccessControlList:
    """Parse an external name back into an ACL; raises ACLError if malformed."""
    try:
        pairs = json.loads(extname, object_pairs_hook=lambda items: items)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ACLError(f"describe ACLs response is empty: {exc}") from exc
    if pairs is None:
        return AccessControlList()
    if not isinstance(pairs, list):
        raise ACLError("describe ACLs response is empty: expected a JSON object")
    values: dict[str, str] = {}
    for key, value in pairs:
        attr = _FIELD_BY_KEY.get(key) or _FIELD_BY_FOLDED_KEY.get(key.lower())
        if attr is None or value is None:
            continue
        if not isinstance(value, str):
            raise ACLError(
                f"describe ACLs response is empty: {key} must be a string, "
                f"got {type(value).__name__}"
            )
        values[attr] = value
    return AccessControlList(**values)


_DIFF_MESSAGES = (
    ("resource_type", "Resource Type has been updated, which is not allowed."),
    ("resource_principal", "Resource Principal has been updated, which is not allowed."),
    ("resource_host", "Resource Host has been updated, which is not allowed."),
    ("resource_operation", "Resource Operation has been updated, which is not allowed."),
    ("resource_permission_type", "Resource Permission Type has been updated, which is not allowed."),
    (
        "resource_pattern_type_filter",
        "Resource Pattern Type Filter has been updated, which is not allowed.",
    ),
)


def diff(existing: AccessControlList, observed: AccessControlList) -> list[str]:
    """One message for each immutable field that differs between the two ACLs."""
    return [
        message
        for attr, message in _DIFF_MESSAGES
        if getattr(existing, attr) != getattr(observed, attr)
    ]


def compare_acls(extname: AccessControlList, observed: AccessControlList) -> bool:
    """True if every field of the two ACLs is equal."""
    return extname == observed


def generate(params: AccessControlListParameters) -> AccessControlList:
    """Turn resource parameters into a Kafka ACL."""
    return AccessControlList(**{f.name: getattr(params, f.name) for f in fields(AccessControlList)})


def is_up_to_date(params: AccessControlListParameters, observed: AccessControlList) -> bool:
    """True if the parameters match the observed ACL in every compared field."""
    return all(getattr(params, attr) == getattr(observed, attr) for attr, _ in _DIFF_MESSAGES)