from datetime import datetime, timezone

import pytest

from tlsrotate.common.models import SecretRecord
from tlsrotate.crypto.identity import generate_identity
from tlsrotate.crypto.issuer import issue_certificate
from tlsrotate.storage.secrets import InMemorySecretStore


class ScriptedRandom:
    """Random source that replays the given byte strings / exceptions in order."""

    def __init__(self, *items):
        self.items = list(items)
        self.calls = []

    def __call__(self, n):
        self.calls.append(n)
        item = self.items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 1, 12, 30, 15, tzinfo=timezone.utc)


@pytest.fixture
def identity():
    return generate_identity()


@pytest.fixture
def issued(identity, fixed_now):
    return issue_certificate(identity.subject_name, identity.private_key, now=fixed_now)


@pytest.fixture
def store():
    return InMemorySecretStore({"foobar-tls": SecretRecord(name="foobar-tls", namespace="default")})
