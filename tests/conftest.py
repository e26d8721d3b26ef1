"""Shared test fixtures for py-insight test suite."""

from __future__ import annotations

import pytest

from insight_api.dash.address import AddressResolver


@pytest.fixture
def app_config():
    """Provide a test AppConfig with safe defaults."""
    from insight_api.config.settings import AppConfig, ChainConfig

    return AppConfig(debug=True, chain=ChainConfig(url="http://chain.test"))


@pytest.fixture
def resolver() -> AddressResolver:
    return AddressResolver()
