"""
Shared pytest fixtures for the UI automation suite.

This module contains fixtures that are shared across all test modules.
The run configuration is resolved once per session and handed to every
fixture that needs it, so tests never read environment variables
directly.

Key Concepts Demonstrated:
- Fixture scopes (function, session)
- Explicit configuration objects instead of global state
- Test data factories
"""

from __future__ import annotations

from collections.abc import Callable

import pytest
from faker import Faker

from config import EnvironmentConfig, load_config
from shared.test_data import Credentials

# Initialize Faker for generating test data
fake = Faker()


@pytest.fixture(scope="session")
def app_config() -> EnvironmentConfig:
    """
    Resolve the configuration for this test run.

    The ``ENV`` environment variable selects the profile (dev, staging,
    production, ci); individual settings can be overridden with their
    own variables such as ``BASE_URL`` or ``TIMEOUT``.

    Returns:
        Frozen configuration shared by the whole session.
    """
    return load_config()


@pytest.fixture
def credential_factory() -> Callable[[str], Credentials]:
    """Factory for random credentials that no demo site will accept."""

    def _make(prefix: str = "user") -> Credentials:
        return Credentials(
            identifier=f"{prefix}_{fake.user_name()}",
            secret=fake.password(length=12),
            description=f"Generated {prefix} credentials",
        )

    return _make
