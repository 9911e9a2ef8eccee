"""
Shared test fixtures for azteardown tests.

- fake_api: in-memory provider recording every call
- resource_deleted: scripted confirmation predicate
- cleanup: CleanupResources wired to both
"""

import pytest

from azteardown.cleanup_resources import CleanupResources
from azteardown.config import TeardownConfig
from azteardown.naming import GroupNamingConvention
from tests.mocks.azure_mock import FakeAzureApi, FakeResourceDeleted


@pytest.fixture
def fake_api():
    """Empty in-memory provider."""
    return FakeAzureApi()


@pytest.fixture
def resource_deleted(fake_api):
    """Confirmation predicate that confirms every job unless told otherwise."""
    return FakeResourceDeleted(fake_api)


@pytest.fixture
def teardown_config():
    return TeardownConfig(subscription_id="00000000-0000-0000-0000-000000000000")


@pytest.fixture
def cleanup(fake_api, resource_deleted, teardown_config):
    """CleanupResources against the fake provider."""
    return CleanupResources(
        fake_api,
        resource_deleted,
        GroupNamingConvention(teardown_config.naming_prefix, teardown_config.naming_delimiter),
        teardown_config,
    )
