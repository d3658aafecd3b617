import pytest

from kafkaprovider import acl as kafka_acl
from kafkaprovider.controller_acl import Connector, ControllerError, External
from kafkaprovider.providerconfig import (
    CredentialsSource,
    ProviderConfig,
    ProviderConfigSpec,
    ProviderCredentials,
)
from kafkaprovider.resources import (
    EXTERNAL_NAME_ANNOTATION,
    AccessControlList,
    AccessControlListParameters,
    AccessControlListSpec,
    ExternalObservation,
    Topic,
    TopicParameters,
    TopicSpec,
    get_external_name,
    set_external_name,
)

BASE_EXTNAME = (
    '{"ResourceName":"acl1","ResourceType":"Topic","ResourcePrincipal":"User:Ken",'
    '"ResourceHost":"*","ResourceOperation":"AlterConfigs",'
    '"ResourcePermissionType":"Allow","ResourcePatternTypeFilter":"Literal"}'
)


class FakeClient:
    def __init__(self, described=(), created=None, describe_error=None):
        self.described = list(described)
        self.created = created
        self.describe_error = describe_error
        self.requests = []
        self.closed = 0

    def describe_acls(self, request):
        self.requests.append(("describe", request))
        if self.describe_error is not None:
            raise self.describe_error
        return self.described

    def create_acls(self, request):
        self.requests.append(("create", request))
        return self.created

    def delete_acls(self, request):
        self.requests.append(("delete", request))
        return ["deleted"]

    def close(self):
        self.closed += 1


def make_acl(host="*", extname=None):
    cr = AccessControlList(
        spec=AccessControlListSpec(
            for_provider=AccessControlListParameters(
                resource_name="acl1",
                resource_type="Topic",
                resource_principal="User:Ken",
                resource_host=host,
                resource_operation="AlterConfigs",
                resource_permission_type="Allow",
                resource_pattern_type_filter="Literal",
            )
        )
    )
    if extname is not None:
        set_external_name(cr, extname)
    return cr


def make_topic():
    return Topic(spec=TopicSpec(for_provider=TopicParameters(replication_factor=1, partitions=1)))


def test_observe_rejects_other_resources():
    with pytest.raises(ControllerError, match="not a AccessControlList"):
        External(kafka_client=FakeClient()).observe(make_topic())


def test_observe_without_external_name_reports_missing():
    client = FakeClient(described=["x"])
    got = External(kafka_client=client).observe(make_acl())
    assert got == ExternalObservation(resource_exists=False)
    assert client.requests == []


def test_observe_existing_acl_is_up_to_date():
    client = FakeClient(described=["found"])
    cr = make_acl(extname=BASE_EXTNAME)
    got = External(kafka_client=client).observe(cr)
    assert got == ExternalObservation(
        resource_exists=True, resource_up_to_date=True, resource_late_initialized=False
    )
    assert cr.status.get_condition("Ready").status == "True"
    kind, request = client.requests[0]
    assert kind == "describe"
    assert request.principal == "User:Ken"
    assert request.resource_name == "acl1"


def test_observe_missing_on_cluster():
    client = FakeClient(described=[])
    cr = make_acl(extname=BASE_EXTNAME)
    got = External(kafka_client=client).observe(cr)
    assert got == ExternalObservation(resource_exists=False)
    assert cr.status.get_condition("Ready").status == "Unknown"


def test_observe_changed_spec_is_an_error():
    cr = make_acl(host="acme.com", extname=BASE_EXTNAME)
    with pytest.raises(ControllerError) as info:
        External(kafka_client=FakeClient(described=["x"])).observe(cr)
    assert str(info.value) == "Resource Host has been updated, which is not allowed."


def test_observe_describe_failure_is_wrapped():
    client = FakeClient(describe_error=RuntimeError("broker down"))
    with pytest.raises(ControllerError, match="^cannot List ACLs"):
        External(kafka_client=client).observe(make_acl(extname=BASE_EXTNAME))


def test_observe_bad_external_name():
    with pytest.raises(ControllerError, match="cannot parse external name"):
        External(kafka_client=FakeClient()).observe(make_acl(extname="acl1"))


def test_create_sets_external_name():
    client = FakeClient(created=["User:Ken"])
    cr = make_acl()
    External(kafka_client=client).create(cr)
    assert get_external_name(cr) == BASE_EXTNAME
    kind, request = client.requests[0]
    assert kind == "create"
    assert request.operation == kafka_acl.ACLOperation.ALTER_CONFIGS
    assert request.pattern_type == kafka_acl.PatternType.LITERAL


def test_create_keeps_existing_external_name():
    client = FakeClient(created=None)
    cr = make_acl(extname="already-set")
    External(kafka_client=client).create(cr)
    assert cr.metadata.annotations[EXTERNAL_NAME_ANNOTATION] == "already-set"
    assert [kind for kind, _ in client.requests] == ["create"]


def test_create_without_response_fails():
    client = FakeClient(created=[""])
    with pytest.raises(kafka_acl.ACLError, match="no create response for acl"):
        External(kafka_client=client).create(make_acl())


def test_create_rejects_other_resources():
    with pytest.raises(ControllerError, match="not a AccessControlList"):
        External(kafka_client=FakeClient()).create(make_topic())


def test_update_not_supported():
    with pytest.raises(ControllerError, match="updates are not supported"):
        External(kafka_client=FakeClient()).update(make_acl())


def test_delete_sends_request():
    client = FakeClient()
    External(kafka_client=client).delete(make_acl())
    kind, request = client.requests[0]
    assert kind == "delete"
    assert request.resource_type == "Topic"
    assert request.host == "*"


def test_disconnect_closes_once():
    client = FakeClient()
    ext = External(kafka_client=client)
    ext.disconnect()
    ext.disconnect()
    assert client.closed == 1
    assert ext.kafka_client is None


def _provider_config():
    return ProviderConfig(
        spec=ProviderConfigSpec(credentials=ProviderCredentials(source=CredentialsSource.SECRET))
    )


def test_connect_builds_external():
    seen = {}
    client = FakeClient()

    def get_pc(name):
        seen["name"] = name
        return _provider_config()

    def new_service(data):
        seen["data"] = data
        return client

    connector = Connector(
        get_provider_config=get_pc,
        extract_credentials=lambda creds: b'{"brokers": []}',
        new_service_fn=new_service,
    )
    ext = connector.connect(make_acl())
    assert ext.kafka_client is client
    assert connector.cached_client is client
    assert seen == {"name": "default", "data": b'{"brokers": []}'}


def _failing(exc):
    def fn(*args):
        raise exc

    return fn


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"track_usage": _failing(RuntimeError("boom"))}, "cannot track ProviderConfig usage"),
        ({"get_provider_config": _failing(KeyError("default"))}, "cannot get ProviderConfig"),
        ({"extract_credentials": _failing(ValueError("bad"))}, "cannot get credentials"),
        ({"new_service_fn": _failing(OSError("refused"))}, "cannot create new Service"),
    ],
)
def test_connect_failures_are_wrapped(overrides, message):
    kwargs = {
        "get_provider_config": lambda name: _provider_config(),
        "extract_credentials": lambda creds: b"{}",
        "new_service_fn": lambda data: FakeClient(),
    }
    kwargs.update(overrides)
    connector = Connector(**kwargs)
    with pytest.raises(ControllerError, match=f"^{message}"):
        connector.connect(make_acl())
    assert connector.cached_client is None


def test_connect_rejects_other_resources():
    connector = Connector(
        get_provider_config=lambda name: _provider_config(),
        extract_credentials=lambda creds: b"{}",
        new_service_fn=lambda data: FakeClient(),
    )
    with pytest.raises(ControllerError, match="not a AccessControlList"):
        connector.connect(make_topic())