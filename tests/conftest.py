"""Shared fixtures for consul_events tests."""

from __future__ import annotations

import pytest

from consul_events.models.config import ClientConfig, RetryConfig

from tests.mocks import MockFetcher


def make_test_config(**overrides) -> ClientConfig:
    """Build a ClientConfig suitable for testing."""
    defaults = dict(
        address="127.0.0.1:8500",
        scheme="http",
        wait="1m",
        request_timeout=59.0,
        retry=RetryConfig(initial_backoff=0.01, max_backoff=0.05),
    )
    defaults.update(overrides)
    return ClientConfig(**defaults)


@pytest.fixture
def test_config():
    """Default ClientConfig for tests."""
    return make_test_config()


@pytest.fixture
def fast_retry():
    return RetryConfig(initial_backoff=0.01, max_backoff=0.05)


@pytest.fixture
def mock_fetcher():
    return MockFetcher()
