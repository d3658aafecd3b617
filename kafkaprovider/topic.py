"""Kafka topics: reading, creating, updating and deleting them through an admin client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, Sequence, Union

from .resources import TopicParameters

ERR_TOPIC_DOES_NOT_EXIST = "topic does not exist"
ERR_REPLICATION_FACTOR_UNSUPPORTED = "updating replication factor is not supported"


class TopicError(Exception):
    """Raised when a topic cannot be read, created, updated or deleted."""


class TopicDoesNotExistError(TopicError):
    """Raised when the named topic does not exist on the cluster."""


@dataclass(frozen=True)
class TopicDetail:
    """One topic as listed by the cluster.

    ``partitions`` holds, for each partition, the ids of its replica brokers.
    ``error`` is set when the cluster reported a problem with the topic.
    """

    id: str = ""
    partitions: Sequence[Sequence[int]] = ()
    error: Optional[BaseException] = None


ConfigResult = Union[Mapping[str, Optional[str]], BaseException]


class TopicAdminClient(Protocol):
    """The admin operations on topics that this module relies on."""

    def list_topics(self, name: str) -> Mapping[str, TopicDetail]:
        """Details of the named topic, keyed by topic name."""

    def describe_topic_configs(self, name: str) -> Mapping[str, ConfigResult]:
        """The configuration of the named topic, or the error describing it."""

    def create_topics(
        self,
        partitions: int,
        replication_factor: int,
        config: Optional[Mapping[str, Optional[str]]],
        name: str,
    ) -> Mapping[str, Optional[BaseException]]:
        """Create the topic; maps its name to the error reported, if any."""

    def delete_topics(self, name: str) -> Mapping[str, Optional[BaseException]]:
        """Delete the topic; maps its name to the error reported, if any."""

    def update_partitions(self, count: int, name: str) -> Mapping[str, Optional[BaseException]]:
        """Set the partition count; maps the topic name to the error reported, if any."""

    def alter_topic_configs(
        self, configs: Mapping[str, Optional[str]], name: str
    ) -> Sequence[Optional[BaseException]]:
        """Set configuration values; one result for each altered topic."""

    def close(self) -> None:
        """Release the connection to the cluster."""


@dataclass
class KafkaTopic:
    """A Kafka topic with all of its configurable fields."""

    name: str
    replication_factor: int
    partitions: int
    id: str = ""
    config: Optional[dict[str, Optional[str]]] = None


def _text(value: Optional[str]) -> str:
    return "" if value is None else value


def get(client: TopicAdminClient, name: str) -> KafkaTopic:
    """Read the named topic from the cluster."""
    try:
        listed = client.list_topics(name)
    except Exception as exc:
        raise TopicError(f"cannot list topics: {exc}") from exc
    detail = listed.get(name)
    if detail is None:
        raise TopicError("no create response for topic")
    if detail.error is not None:
        raise TopicDoesNotExistError(
            f"{ERR_TOPIC_DOES_NOT_EXIST}: {detail.error}"
        ) from detail.error

    try:
        described = client.describe_topic_configs(name)
    except Exception as exc:
        raise TopicError(f"cannot describe topics: {exc}") from exc
    if name not in described:
        raise TopicError(f"cannot find topic in describe result: {name}")
    result = described[name]
    if isinstance(result, BaseException):
        raise TopicError(f"error in topic describe result: {result}") from result

    partitions = list(detail.partitions)
    return KafkaTopic(
        name=name,
        replication_factor=len(partitions[0]) if partitions else 0,
        partitions=len(partitions),
        id=detail.id,
        config=dict(result),
    )


def create(client: TopicAdminClient, topic: KafkaTopic) -> None:
    """Create the topic on the cluster."""
    response = client.create_topics(
        topic.partitions, topic.replication_factor, topic.config, topic.name
    )
    if topic.name not in response:
        raise TopicError("no create response for topic")
    error = response[topic.name]
    if error is not None:
        raise TopicError(f"cannot create topic: {error}") from error


def delete(client: TopicAdminClient, name: str) -> None:
    """Delete the named topic from the cluster."""
    response = client.delete_topics(name)
    if name not in response:
        raise TopicError("no delete response for topic")
    error = response[name]
    if error is not None:
        raise TopicError(f"cannot delete topic: {error}") from error


def _existing(client: TopicAdminClient, name: str) -> KafkaTopic:
    try:
        return get(client, name)
    except TopicError as exc:
        raise TopicError(f"cannot get topic: {exc}") from exc


def update(client: TopicAdminClient, desired: KafkaTopic) -> None:
    """Bring the topic on the cluster in line with the desired one.

    Partitions are handled first, then the replication factor, then the
    configuration; only the first kind of change found is applied.
    """
    existing = _existing(client, desired.name)
    if desired.partitions != existing.partitions:
        update_partitions(client, desired)
        return
    if desired.replication_factor != existing.replication_factor:
        update_replication_factor()
    if desired.config is not None:
        update_configs(client, desired)


def update_partitions(client: TopicAdminClient, desired: KafkaTopic) -> None:
    """Change the partition count of the topic if it differs."""
    existing = _existing(client, desired.name)
    if desired.partitions == existing.partitions:
        return
    try:
        response = client.update_partitions(desired.partitions, desired.name)
    except Exception as exc:
        raise TopicError(f"cannot update topic partitions: {exc}") from exc
    if desired.name not in response:
        raise TopicError(f"cannot find topic in update partitions result: {desired.name}")
    error = response[desired.name]
    if error is not None:
        raise TopicError(f"error in update partitions result: {error}") from error


def update_replication_factor() -> None:
    """Refuse the change: Kafka cannot alter a topic's replication factor."""
    error = TopicError(ERR_REPLICATION_FACTOR_UNSUPPORTED)
    raise error


def update_configs(client: TopicAdminClient, desired: KafkaTopic) -> None:
    """Set every desired configuration value that differs from the cluster's."""
    existing = _existing(client, desired.name)
    if desired.config is None:
        return
    current = existing.config or {}
    for key, value in desired.config.items():
        if _text(value) == _text(current.get(key)):
            continue
        try:
            results = client.alter_topic_configs({key: value}, desired.name)
        except Exception as exc:
            raise TopicError(f"cannot update topic configs: {exc}") from exc
        if results and results[0] is not None:
            raise TopicError(f"cannot update topic configs: {results[0]}") from results[0]


def generate(name: str, params: TopicParameters) -> KafkaTopic:
    """Turn resource parameters into a Kafka topic."""
    return KafkaTopic(
        name=name,
        replication_factor=params.replication_factor,
        partitions=params.partitions,
        config=dict(params.config) if params.config else None,
    )


def late_initialize_spec(params: TopicParameters, observed: KafkaTopic) -> bool:
    """Fill in configuration keys the spec lacks; True if any were added."""
    if params.config is None:
        params.config = {}
    late_initialized = False
    for key, value in (observed.config or {}).items():
        if key not in params.config:
            params.config[key] = value
            late_initialized = True
    return late_initialized


def is_up_to_date(params: TopicParameters, observed: KafkaTopic) -> bool:
    """True if the parameters match the observed topic."""
    if params.partitions != observed.partitions:
        return False
    if params.replication_factor != observed.replication_factor:
        return False
    wanted = params.config or {}
    seen = observed.config or {}
    if len(wanted) != len(seen):
        return False
    return all(key in wanted and _text(wanted[key]) == _text(value) for key, value in seen.items())