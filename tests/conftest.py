"""
Shared fixtures for the resource picker tests.
"""

import pytest

from resource_picker.models.resource import ResourceKind
from resource_picker.services.mru import MRULedger
from resource_picker.services.storage import MemoryStorage
from tests.fakes import FakePickUI, FakeSettings, make_resource


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials for moto."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')
    monkeypatch.delenv('AWS_PROFILE', raising=False)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def mru(storage):
    return MRULedger(storage)


@pytest.fixture
def ui():
    return FakePickUI()


@pytest.fixture
def settings():
    return FakeSettings(profile='dev', region='us-east-1', profiles=['dev', 'prod'])


@pytest.fixture
def kind():
    return ResourceKind.BUCKET


@pytest.fixture
def abcd():
    """Four resources, deliberately not in alphabetical order."""
    return [make_resource(name) for name in ('D', 'B', 'A', 'C')]
