"""Reconciliation of Topic resources against a Kafka cluster."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from . import topic as kafka_topic
from .providerconfig import ProviderConfig, ProviderCredentials
from .resources import ExternalObservation, Topic, available, get_external_name

ERR_NOT_TOPIC = "managed resource is not a Topic custom resource"
ERR_TRACK_PC_USAGE = "cannot track ProviderConfig usage"
ERR_GET_PC = "cannot get ProviderConfig"
ERR_GET_CREDS = "cannot get credentials"
ERR_GET_TOPIC = "cannot get topic spec from topic client"
ERR_NEW_CLIENT = "cannot create new Kafka client"


class ControllerError(Exception):
    """Raised when a Topic resource cannot be reconciled."""


def _as_topic(mg: Any) -> Topic:
    if not isinstance(mg, Topic):
        raise ControllerError(ERR_NOT_TOPIC)
    return mg


def _no_usage_tracking(mg: Any) -> None:
    return None


@dataclass
class External:
    """Observes, creates, updates and deletes a topic on the cluster."""

    kafka_client: Optional[kafka_topic.TopicAdminClient]

    def disconnect(self) -> None:
        """Close the admin client, if one is open."""
        if self.kafka_client is not None:
            self.kafka_client.close()
        self.kafka_client = None

    def observe(self, mg: Any) -> ExternalObservation:
        """Compare the topic on the cluster with the resource's desired state."""
        cr = _as_topic(mg)
        try:
            observed = kafka_topic.get(self.kafka_client, get_external_name(cr))
        except kafka_topic.TopicDoesNotExistError:
            return ExternalObservation(resource_exists=False)
        except kafka_topic.TopicError as exc:
            raise ControllerError(f"{ERR_GET_TOPIC}: {exc}") from exc

        cr.status.at_provider.id = observed.id
        cr.status.set_conditions(available())
        late_initialized = kafka_topic.late_initialize_spec(cr.spec.for_provider, observed)
        return ExternalObservation(
            resource_exists=True,
            resource_up_to_date=kafka_topic.is_up_to_date(cr.spec.for_provider, observed),
            resource_late_initialized=late_initialized,
        )

    def create(self, mg: Any) -> None:
        """Create the topic named by the resource's external name."""
        cr = _as_topic(mg)
        kafka_topic.create(
            self.kafka_client, kafka_topic.generate(get_external_name(cr), cr.spec.for_provider)
        )

    def update(self, mg: Any) -> None:
        """Bring the topic on the cluster in line with the resource."""
        cr = _as_topic(mg)
        kafka_topic.update(
            self.kafka_client, kafka_topic.generate(get_external_name(cr), cr.spec.for_provider)
        )

    def delete(self, mg: Any) -> None:
        """Delete the topic named by the resource's external name."""
        cr = _as_topic(mg)
        kafka_topic.delete(self.kafka_client, get_external_name(cr))


@dataclass
class Connector:
    """Builds an External client for a Topic from its provider configuration.

    ``get_provider_config`` looks a ProviderConfig up by name,
    ``extract_credentials`` reads the credentials it points to, and
    ``new_service_fn`` opens an admin client from those credentials.
    """

    get_provider_config: Callable[[str], ProviderConfig]
    extract_credentials: Callable[[ProviderCredentials], bytes]
    new_service_fn: Callable[[bytes], kafka_topic.TopicAdminClient]
    track_usage: Callable[[Any], None] = _no_usage_tracking
    cached_client: Optional[kafka_topic.TopicAdminClient] = field(default=None, init=False)

    def connect(self, mg: Any) -> External:
        """Open an admin client for the resource's provider configuration."""
        cr = _as_topic(mg)
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