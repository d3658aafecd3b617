# kafkaprovider

Describe Kafka topics and access control lists as resources, then reconcile
them against a cluster: observe what exists, create what is missing, update
what drifted and delete what is no longer wanted.

The package has no dependencies outside the standard library. It drives an
admin client object that you supply, one that implements the protocols
`TopicAdminClient` (in `kafkaprovider.topic`) or `ACLAdminClient` (in
`kafkaprovider.acl`).

## Install

```
pip install kafkaprovider
```

For running the tests:

```
pip install "kafkaprovider[test]"
pytest
```

## Resources

`kafkaprovider.resources` defines the managed resources:

- `Topic`, with `TopicSpec`, `TopicParameters` (`replication_factor`,
  `partitions`, optional `config` mapping; both counts must be at least 1)
  and `TopicStatus`.
- `AccessControlList`, with `AccessControlListSpec`,
  `AccessControlListParameters` (resource name, type, principal, host,
  operation, permission type and pattern type filter, each of the enumerated
  fields checked against its allowed values) and `AccessControlListStatus`.

Each spec names its provider configuration in `provider_config_ref`
(default `"default"`). The external name of a resource lives in its metadata
annotations; read and write it with `get_external_name` and
`set_external_name`. Status conditions are set with
`status.set_conditions(available())` and read back with
`status.get_condition("Ready")`, which returns an `Unknown` condition when
none of that type is set.

## Provider configuration

`kafkaprovider.providerconfig` holds `ProviderConfig`, `ProviderConfigSpec`,
`ProviderCredentials` (with a `CredentialsSource`: `None`, `Secret`,
`InjectedIdentity`, `Environment` or `Filesystem`), `SecretKeySelector` and
`ProviderConfigUsage`, plus the helpers `group_kind` and `kind_api_version`.

## Connection settings

`kafkaprovider.config.parse_config` reads the JSON credentials document
(brokers, optional SASL mechanism, username and password, and TLS options)
into a `Config`, raising `ValueError` when it is malformed; `Config.to_dict`
writes it back out, leaving unset sections out.

```python
from kafkaprovider.config import parse_config

cfg = parse_config(b'{"brokers": ["localhost:9092"], '
                   b'"sasl": {"mechanism": "PLAIN", "username": "user", "password": "password"}}')
print(cfg.brokers, cfg.sasl.mechanism)
```

## Topics

```python
from kafkaprovider import topic
from kafkaprovider.resources import TopicParameters

params = TopicParameters(replication_factor=1, partitions=3)
desired = topic.generate("orders", params)
topic.create(admin, desired)          # admin implements TopicAdminClient
observed = topic.get(admin, "orders")
print(topic.is_up_to_date(params, observed))
```

`get` raises `TopicDoesNotExistError` when the cluster reports an error for
the listed topic, and `TopicError` for other failures. `update` applies the
first kind of change it finds: a new partition count, otherwise a changed
replication factor (which raises `TopicError`, since it cannot be changed),
otherwise any differing configuration values. `late_initialize_spec` copies
configuration keys the spec lacks from the observed topic.

## Access control lists

```python
from kafkaprovider import acl
from kafkaprovider.resources import AccessControlListParameters

params = AccessControlListParameters(
    resource_name="orders",
    resource_type="Topic",
    resource_principal="User:alice",
    resource_host="*",
    resource_operation="Read",
    resource_permission_type="Allow",
    resource_pattern_type_filter="Literal",
)
entry = acl.generate(params)
name = acl.convert_to_json(entry)     # stored as the external name
acl.create(admin, entry)              # admin implements ACLAdminClient
print(acl.diff(acl.convert_from_json(name), entry))
```

`build_request` turns an ACL into an `ACLRequest`, parsing the operation and
pattern type with `parse_acl_operation` and `parse_pattern_type` (case and
separators are ignored); unknown names raise `ACLError`. `list_acls` returns
`None` when the cluster describes no matching ACL. `diff` returns one message
for each immutable field that changed; `compare_acls` and `is_up_to_date`
check for equality.

## Reconciling

`kafkaprovider.controller_topic` and `kafkaprovider.controller_acl` each hold
a `Connector` and an `External`.

`Connector` is built from three callables: `get_provider_config` (name to
`ProviderConfig`), `extract_credentials` (`ProviderCredentials` to bytes) and
`new_service_fn` (bytes to admin client), plus an optional `track_usage`.
`connect(resource)` runs them in turn and returns an `External`.

`External` offers `observe`, `create`, `update`, `delete` and `disconnect`
(which calls the client's `close`). `observe` returns an
`ExternalObservation` and marks the resource available when it exists.
Failures raise the module's `ControllerError`. For ACLs, `observe` raises when
the desired ACL differs from the one recorded in the external name, and
`update` always raises, since ACLs cannot be changed in place.

## What this package does not do

- It does not speak the Kafka protocol: every cluster operation goes through
  the admin client you supply.
- It does not read credentials from secrets, the environment or files, nor
  look up provider configurations: `Connector` calls the functions you give it.
- It has no command, no long-running process and no scheduling of
  reconciliation; you call `connect`, `observe`, `create`, `update` and
  `delete` yourself.