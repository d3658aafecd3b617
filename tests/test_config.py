import json

import pytest

from kafkaprovider.config import (
    SASL,
    TLS,
    ClientCertificateSecretRef,
    Config,
    parse_config,
)

BROKERS = [
    "kafka-dev-controller-0.kafka-dev-controller-headless.kafka-cluster.svc.cluster.local:9092",
    "kafka-dev-controller-1.kafka-dev-controller-headless.kafka-cluster.svc.cluster.local:9092",
]

SAMPLE = json.dumps(
    {
        "brokers": BROKERS,
        "sasl": {"mechanism": "PLAIN", "username": "user1", "password": "password"},
    }
)


def test_parse_sample_with_sasl():
    cfg = parse_config(SAMPLE.encode())
    assert cfg.brokers == BROKERS
    assert cfg.sasl.mechanism == "PLAIN"
    assert cfg.sasl.username == "user1"
    assert cfg.sasl.password == "password"
    assert cfg.tls is None


def test_parse_accepts_str_and_bytes_equally():
    assert parse_config(SAMPLE) == parse_config(SAMPLE.encode())


def test_round_trip_full():
    password = "password"
    cfg = Config(
        brokers=BROKERS,
        sasl=SASL(mechanism="SCRAM-SHA-512", username="user1", password=password),
        tls=TLS(
            client_certificate_secret_ref=ClientCertificateSecretRef(
                name="client-cert", namespace="kafka", key_field="tls.key", cert_field="tls.crt"
            ),
            insecure_skip_verify=True,
        ),
    )
    assert parse_config(json.dumps(cfg.to_dict())) == cfg


def test_to_dict_omits_unset_sections():
    cfg = Config(brokers=BROKERS)
    out = cfg.to_dict()
    assert set(out) == {"brokers"}
    assert out["brokers"] == BROKERS


def test_to_dict_omits_empty_secret_fields():
    cfg = Config(
        brokers=BROKERS,
        tls=TLS(client_certificate_secret_ref=ClientCertificateSecretRef(name="n", namespace="ns")),
    )
    tls = cfg.to_dict()["tls"]
    assert set(tls["clientCertificateSecretRef"]) == {"name", "namespace"}
    assert tls["insecureSkipVerify"] is False


def test_missing_fields_take_zero_values():
    cfg = parse_config('{"tls": {}}')
    assert cfg.brokers == []
    assert cfg.sasl is None
    assert cfg.tls == TLS()


def test_null_sections_and_unknown_keys():
    cfg = parse_config('{"brokers": ["b:9092"], "sasl": null, "extra": 1}')
    assert cfg.brokers == ["b:9092"]
    assert cfg.sasl is None


def test_null_document_is_empty_config():
    assert parse_config("null") == Config()


@pytest.mark.parametrize(
    "document",
    [
        "acl1",
        "[1, 2]",
        '{"brokers": "b:9092"}',
        '{"brokers": [1]}',
        '{"sasl": "PLAIN"}',
        '{"sasl": {"username": 5}}',
        '{"tls": {"insecureSkipVerify": "yes"}}',
        b"\xff\xfe\x00",
    ],
)
def test_invalid_documents_raise(document):
    with pytest.raises(ValueError):
        parse_config(document)


def test_sasl_password_hidden_from_repr():
    password = "password"
    sasl = SASL(mechanism="PLAIN", username="user1", password=password)
    assert "password=" not in repr(sasl)
    assert sasl.password == password