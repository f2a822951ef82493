"""shelly_updater — discover Shelly devices via mDNS and update their firmware.

Exports:
    UpdaterConfig   — immutable run configuration
    ShellyClient    — async client for the device OTA endpoints
    ShellyDiscovery — zeroconf browser emitting DeviceEntry objects
    ShellyUpdater   — per-device gen1/gen2 update sequences
    ScanRunner      — discovery → per-device tasks → summary
"""

from __future__ import annotations

from shelly_updater.client import ShellyClient, ShellyClientError
from shelly_updater.config import UpdaterConfig
from shelly_updater.discovery import DiscoveryError, ShellyDiscovery
from shelly_updater.models import DeviceEntry, UpdateOutcome
from shelly_updater.runner import ScanRunner
from shelly_updater.updater import ShellyUpdater

__all__ = [
    "DeviceEntry",
    "DiscoveryError",
    "ScanRunner",
    "ShellyClient",
    "ShellyClientError",
    "ShellyDiscovery",
    "ShellyUpdater",
    "UpdateOutcome",
    "UpdaterConfig",
]
