"""Reconciliation of AccessControlList resources against a Kafka cluster."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from . import acl as kafka_acl
from .providerconfig import ProviderConfig, ProviderCredentials
from .resources import (
    AccessControlList,
    ExternalObservation,
    available,
    get_external_name,
    set_external_name,
)

ERR_NOT_ACCESS_CONTROL_LIST = "managed resource is not a AccessControlList custom resource"
ERR_TRACK_PC_USAGE = "cannot track ProviderConfig usage"
ERR_GET_PC = "cannot get ProviderConfig"
ERR_GET_CREDS = "cannot get credentials"
ERR_LIST_ACL = "cannot List ACLs"
ERR_NEW_CLIENT = "cannot create new Service"
ERR_UPDATE_NOT_SUPPORTED = "updates are not supported"
ERR_CONVERT_EXTERNAL_NAME = "could not convert external name to JSON"
ERR_PARSE_EXTERNAL_NAME = "cannot parse external name"


class ControllerError(Exception):
    """Raised when an AccessControlList resource cannot be reconciled."""


def _as_acl(mg: Any) -> AccessControlList:
    if not isinstance(mg, AccessControlList):
        raise ControllerError(ERR_NOT_ACCESS_CONTROL_LIST)
    return mg


@dataclass
class External:
    """Observes, creates and deletes an ACL on the cluster."""

    kafka_client: Optional[kafka_acl.ACLAdminClient]

    def disconnect(self) -> None:
        """Close the admin client, if one is open."""
        if self.kafka_client is not None:
            self.kafka_client.close()
        self.kafka_client = None

    def observe(self, mg: Any) -> ExternalObservation:
        """Compare the ACL on the cluster with the resource's desired state.

        The external name holds the ACL as it was created; any change to the
        desired ACL since then is reported as an error, since ACLs cannot be
        updated in place.
        """
        cr = _as_acl(mg)
        ext = get_external_name(cr)
        if not ext:
            return ExternalObservation(resource_exists=False)

        try:
            recorded = kafka_acl.convert_from_json(ext)
        except kafka_acl.ACLError as exc:
            raise ControllerError(f"{ERR_PARSE_EXTERNAL_NAME}: {exc}") from exc
        desired = kafka_acl.generate(cr.spec.for_provider)
        if not kafka_acl.compare_acls(recorded, desired):
            raise ControllerError(" ".join(kafka_acl.diff(recorded, desired)))

        try:
            found = kafka_acl.list_acls(self.kafka_client, recorded)
        except kafka_acl.ACLError as exc:
            raise ControllerError(f"{ERR_LIST_ACL}: {exc}") from exc
        if found is None:
            return ExternalObservation(resource_exists=False)

        cr.status.set_conditions(available())
        return ExternalObservation(
            resource_exists=True,
            resource_up_to_date=True,
            resource_late_initialized=False,
        )

    def create(self, mg: Any) -> None:
        """Create the ACL, recording it as the external name if none is set."""
        cr = _as_acl(mg)
        generated = kafka_acl.generate(cr.spec.for_provider)
        try:
            extname = kafka_acl.convert_to_json(generated)
        except (TypeError, ValueError) as exc:
            raise ControllerError(f"{ERR_CONVERT_EXTERNAL_NAME}: {exc}") from exc
        if not get_external_name(cr):
            set_external_name(cr, extname)
        kafka_acl.create(self.kafka_client, generated)

    def update(self, mg: Any) -> None:
        """Always raises: ACLs cannot be updated in place."""
        raise ControllerError(ERR_UPDATE_NOT_SUPPORTED)

    def delete(self, mg: Any) -> None:
        """Delete the ACL described by the resource's parameters."""
        cr = _as_acl(mg)
        kafka_acl.delete(self.kafka_client, kafka_acl.generate(cr.spec.for_provider))


@dataclass
class Connector:
    """Builds an External client for an ACL from its provider configuration.

    ``get_provider_config`` looks a ProviderConfig up by name,
    ``extract_credentials`` reads the credentials it points to, and
    ``new_service_fn`` opens an admin client from those credentials.
    ``track_usage``, when given, records that the resource uses its config.
    """

    get_provider_config: Callable[[str], ProviderConfig]
    extract_credentials: Callable[[ProviderCredentials], bytes]
    new_service_fn: Callable[[bytes], kafka_acl.ACLAdminClient]
    track_usage: Optional[Callable[[Any], None]] = None
    cached_client: Optional[kafka_acl.ACLAdminClient] = field(default=None, init=False)

    def connect(self, mg: Any) -> External:
        """Open an admin client for the resource's provider configuration."""
        cr = _as_acl(mg)
        if self.track_usage is not None:
            try:
                self.track_usage(cr)
            except Exception as exc:
                raise ControllerError(f"{ERR_TRACK_PC_USAGE}: {exc}") from exc
        try:
            pc = self.get_provider_config(cr.spec.provider_config_ref)
        except Exception as exc:
            raise ControllerError(f"{ERR_GET_PC}: {exc}") from exc
        try:
            data = self.extract_credentials(pc.spec.credentials)
        except Exception as exc:
            raise ControllerError(f"{ERR_GET_CREDS}: {exc}") from exc
        try:
            service = self.new_service_fn(data)
        except Exception as exc:
            raise ControllerError(f"{ERR_NEW_CLIENT}: {exc}") from exc
        self.cached_client = service
        return External(kafka_client=service)