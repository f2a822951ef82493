"""pytest configuration for shelly_updater tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from shelly_updater.config import UpdaterConfig
from shelly_updater.models import DeviceEntry


# Configure asyncio mode for pytest-asyncio
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
def config() -> UpdaterConfig:
    """Stable-channel config that never sleeps."""
    return UpdaterConfig(check_delay=0.0, poll_interval=0.0, scan_timeout=0.0)


@pytest.fixture
def beta_config() -> UpdaterConfig:
    return UpdaterConfig(stage="beta", check_delay=0.0, poll_interval=0.0, scan_timeout=0.0)


@pytest.fixture
def gen1_entry() -> DeviceEntry:
    return DeviceEntry(
        name="shelly1-A4CF12F45A81",
        address="192.168.1.50",
        txt=("arch=esp8266",),
    )


@pytest.fixture
def gen2_entry() -> DeviceEntry:
    return DeviceEntry(
        name="ShellyPlus1PM-441793A1B2C3",
        address="192.168.1.51",
        txt=("gen=2", "app=Plus1PM", "ver=1.0.0"),
    )


@pytest.fixture
def mock_client() -> MagicMock:
    """A ShellyClient stand-in with every endpoint as an AsyncMock."""
    client = MagicMock()
    client.trigger_update_check = AsyncMock()
    client.get_update_status = AsyncMock()
    client.trigger_update = AsyncMock()
    client.check_for_update = AsyncMock()
    client.update = AsyncMock()
    client.aclose = AsyncMock()
    return client
