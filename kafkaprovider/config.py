"""Connection settings for a Kafka admin client."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union


def _object(value: Any, where: str) -> Optional[dict]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _string(obj: dict, key: str, where: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{where}.{key}: expected a string, got {type(value).__name__}")
    return value


def _boolean(obj: dict, key: str, where: str) -> bool:
    value = obj.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{where}.{key}: expected a boolean, got {type(value).__name__}")
    return value


@dataclass
class ClientCertificateSecretRef:
    """Reference to a secret holding a client certificate for mutual TLS."""

    name: str = ""
    namespace: str = ""
    key_field: str = ""
    cert_field: str = ""

    @classmethod
    def _from_json(cls, obj: dict, where: str) -> ClientCertificateSecretRef:
        return cls(
            name=_string(obj, "name", where),
            namespace=_string(obj, "namespace", where),
            key_field=_string(obj, "keyField", where),
            cert_field=_string(obj, "certField", where),
        )

    def _as_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "namespace": self.namespace}
        if self.key_field:
            out["keyField"] = self.key_field
        if self.cert_field:
            out["certField"] = self.cert_field
        return out


@dataclass
class SASL:
    """SASL authentication settings."""

    mechanism: str = ""
    username: str = ""
    password: str = field(default="", repr=False)

    @classmethod
    def _from_json(cls, obj: dict, where: str) -> SASL:
        return cls(
            mechanism=_string(obj, "mechanism", where),
            username=_string(obj, "username", where),
            password=_string(obj, "password", where),
        )

    def _as_json(self) -> dict[str, Any]:
        return {"mechanism": self.mechanism, "username": self.username, "password": self.password}


@dataclass
class TLS:
    """Settings for encryption in transit."""

    client_certificate_secret_ref: Optional[ClientCertificateSecretRef] = None
    insecure_skip_verify: bool = False

    @classmethod
    def _from_json(cls, obj: dict, where: str) -> TLS:
        ref_where = f"{where}.clientCertificateSecretRef"
        ref = _object(obj.get("clientCertificateSecretRef"), ref_where)
        return cls(
            client_certificate_secret_ref=(
                None if ref is None else ClientCertificateSecretRef._from_json(ref, ref_where)
            ),
            insecure_skip_verify=_boolean(obj, "insecureSkipVerify", where),
        )

    def _as_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.client_certificate_secret_ref is not None:
            out["clientCertificateSecretRef"] = self.client_certificate_secret_ref._as_json()
        out["insecureSkipVerify"] = self.insecure_skip_verify
        return out


@dataclass
class Config:
    """Kafka client configuration: brokers and optional SASL and TLS."""

    brokers: list[str] = field(default_factory=list)
    sasl: Optional[SASL] = None
    tls: Optional[TLS] = None

    @classmethod
    def _from_json(cls, obj: dict) -> Config:
        where = "config"
        raw_brokers = obj.get("brokers")
        if raw_brokers is None:
            brokers: list[str] = []
        elif isinstance(raw_brokers, list) and all(isinstance(b, str) for b in raw_brokers):
            brokers = list(raw_brokers)
        else:
            raise ValueError(f"{where}.brokers: expected a list of strings")
        sasl = _object(obj.get("sasl"), f"{where}.sasl")
        tls = _object(obj.get("tls"), f"{where}.tls")
        return cls(
            brokers=brokers,
            sasl=None if sasl is None else SASL._from_json(sasl, f"{where}.sasl"),
            tls=None if tls is None else TLS._from_json(tls, f"{where}.tls"),
        )

    def to_dict(self) -> dict[str, Any]:
        """The configuration as a JSON-ready dictionary, omitting unset sections."""
        out: dict[str, Any] = {"brokers": list(self.brokers)}
        if self.sasl is not None:
            out["sasl"] = self.sasl._as_json()
        if self.tls is not None:
            out["tls"] = self.tls._as_json()
        return out


def parse_config(data: Union[bytes, str]) -> Config:
    """Parse a JSON document into a Config; raises ValueError if it is malformed."""
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValueError(f"cannot parse Kafka client configuration: {exc}") from exc
    if raw is None:
        return Config()
    obj = _object(raw, "config")
    return Config._from_json(obj)