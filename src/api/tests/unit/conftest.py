"""Unit test fixtures shared across bounded contexts."""

import pytest


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Drop cached settings so environment overrides apply per test."""
    from infrastructure.settings import (
        get_aws_settings,
        get_database_settings,
        get_provisioning_settings,
        get_settings,
    )
    from provisioning.dependencies import get_client_factory

    cached = (
        get_settings,
        get_database_settings,
        get_aws_settings,
        get_provisioning_settings,
        get_client_factory,
    )
    for getter in cached:
        getter.cache_clear()
    yield
    for getter in cached:
        getter.cache_clear()
