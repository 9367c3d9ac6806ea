"""Secret store access: a Kubernetes-backed store and an in-memory one.

Both implement the SecretStore protocol: fetch a record by name, and
replace a record's contents by name. Kubernetes carries secret values
base64-encoded; records always hold raw bytes.
"""

import logging
from typing import Dict, List, Optional, Protocol, Tuple

import urllib3
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from ..common.errors import ConfigurationError, SecretFetchError, SecretUpdateError
from ..common.models import SecretRecord
from ..common.utils import b64d, b64e

logger = logging.getLogger(__name__)


class SecretStore(Protocol):
    def fetch(self, name: str) -> SecretRecord:
        ...

    def update(self, name: str, record: SecretRecord) -> None:
        ...


def load_kube_config(kubeconfig: Optional[str] = None) -> None:
    """Use in-cluster service account credentials, else fall back to a kubeconfig file."""
    try:
        config.load_incluster_config()
        logger.debug("using in-cluster kubernetes config")
        return
    except config.ConfigException:
        pass
    try:
        config.load_kube_config(config_file=kubeconfig)
    except (config.ConfigException, OSError) as e:
        raise ConfigurationError("unable to make config for kubernetes client") from e
    logger.debug("using kubeconfig %s", kubeconfig or "from default location")


def record_from_secret(secret: client.V1Secret) -> SecretRecord:
    meta = secret.metadata or client.V1ObjectMeta()
    data = None
    if secret.data is not None:
        data = {k: b64d(v) for k, v in secret.data.items()}
    return SecretRecord(
        name=meta.name,
        namespace=meta.namespace,
        type=secret.type,
        labels=meta.labels,
        annotations=meta.annotations,
        resource_version=meta.resource_version,
        data=data,
    )


def secret_from_record(record: SecretRecord, base: Optional[client.V1Secret] = None) -> client.V1Secret:
    """Render `record` as a V1Secret, reusing `base` (the fetched object) when given."""
    data = None
    if record.data is not None:
        data = {k: b64e(v) for k, v in record.data.items()}
    if base is None:
        base = client.V1Secret(api_version="v1", kind="Secret", metadata=client.V1ObjectMeta())
    meta = base.metadata
    meta.name = record.name
    meta.namespace = record.namespace
    meta.labels = record.labels
    meta.annotations = record.annotations
    meta.resource_version = record.resource_version
    base.type = record.type
    base.data = data
    return base


class KubernetesSecretStore:
    """Secrets in a single namespace, read and replaced through CoreV1Api."""

    def __init__(self, namespace: str = "default", api: Optional[client.CoreV1Api] = None):
        self.namespace = namespace
        self.api = api if api is not None else client.CoreV1Api()
        self._fetched: Dict[str, client.V1Secret] = {}

    @classmethod
    def from_kube_config(cls, namespace: str, kubeconfig: Optional[str] = None) -> "KubernetesSecretStore":
        load_kube_config(kubeconfig)
        return cls(namespace)

    def fetch(self, name: str) -> SecretRecord:
        try:
            secret = self.api.read_namespaced_secret(name, self.namespace)
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            raise SecretFetchError(f"error grabbing secret {self.namespace}/{name}") from e
        try:
            record = record_from_secret(secret)
        except ValueError as e:
            raise SecretFetchError(f"secret {self.namespace}/{name} holds undecodable data") from e
        self._fetched[name] = secret
        logger.debug("fetched secret %s/%s (resourceVersion %s)", self.namespace, name, record.resource_version)
        return record

    def update(self, name: str, record: SecretRecord) -> None:
        body = secret_from_record(record, self._fetched.get(name))
        try:
            self.api.replace_namespaced_secret(name, self.namespace, body)
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            raise SecretUpdateError(f"kubernetes secret update of {self.namespace}/{name} failed") from e
        logger.debug("replaced secret %s/%s", self.namespace, name)


class InMemorySecretStore:
    """Dict-backed store. Records every update call in `updates`."""

    def __init__(self, records: Optional[Dict[str, SecretRecord]] = None):
        self.records: Dict[str, SecretRecord] = dict(records or {})
        self.updates: List[Tuple[str, SecretRecord]] = []

    def fetch(self, name: str) -> SecretRecord:
        try:
            record = self.records[name]
        except KeyError:
            raise SecretFetchError(f"secret {name!r} not found") from None
        return record.model_copy(deep=True)

    def update(self, name: str, record: SecretRecord) -> None:
        if name not in self.records:
            raise SecretUpdateError(f"secret {name!r} not found")
        stored = record.model_copy(deep=True)
        self.updates.append((name, stored))
        self.records[name] = stored
