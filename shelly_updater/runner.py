"""Scan the network and update every Shelly device found.

Discovery runs until the scan deadline; each discovered device gets its own
task.  The deadline only stops discovery: tasks already spawned run to
completion before :meth:`ScanRunner.run` returns.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Callable

from shelly_updater.client import ShellyClient
from shelly_updater.config import UpdaterConfig
from shelly_updater.discovery import ShellyDiscovery
from shelly_updater.models import DeviceEntry, UpdateOutcome
from shelly_updater.updater import ShellyUpdater

logger = logging.getLogger(__name__)

DiscoveryFactory = Callable[[UpdaterConfig, Callable[[DeviceEntry], None]], ShellyDiscovery]


class ScanRunner:
    """Wires discovery to the updater and waits for all device tasks."""

    def __init__(
        self,
        config: UpdaterConfig,
        client: ShellyClient | None = None,
        discovery_factory: DiscoveryFactory = ShellyDiscovery,
    ) -> None:
        self.config = config
        self.client = client or ShellyClient(config)
        self.updater = ShellyUpdater(config, self.client)
        self._discovery_factory = discovery_factory
        self._tasks: set[asyncio.Task[UpdateOutcome]] = set()

    async def run(self) -> Counter[UpdateOutcome]:
        """Scan, update, and return a count of outcomes per device."""
        discovery = self._discovery_factory(self.config, self.spawn)
        logger.info(
            "[scanner] looking for Shelly devices using mDNS (%ds timeout)...",
            int(self.config.scan_timeout),
        )
        try:
            await discovery.run(self.config.scan_timeout)
            logger.info("[scanner] scanning process finished")
            outcomes = await self.wait()
        finally:
            await self.client.aclose()

        logger.info(
            "[scanner] %d updated, %d up to date, %d failed, %d skipped",
            outcomes[UpdateOutcome.UPDATED],
            outcomes[UpdateOutcome.UP_TO_DATE],
            outcomes[UpdateOutcome.FAILED],
            outcomes[UpdateOutcome.SKIPPED],
        )
        return outcomes

    def spawn(self, entry: DeviceEntry) -> asyncio.Task[UpdateOutcome]:
        """Start the update task for *entry*."""
        task = asyncio.create_task(self._update(entry), name=f"update-{entry.name}")
        self._tasks.add(task)
        return task

    async def wait(self) -> Counter[UpdateOutcome]:
        """Wait for every spawned task, including ones spawned while waiting."""
        outcomes: Counter[UpdateOutcome] = Counter()
        done: set[asyncio.Task[UpdateOutcome]] = set()
        while self._tasks - done:
            pending = self._tasks - done
            await asyncio.gather(*pending)
            for task in pending:
                outcomes[task.result()] += 1
            done |= pending
        return outcomes

    async def _update(self, entry: DeviceEntry) -> UpdateOutcome:
        try:
            return await self.updater.update_device(entry)
        except Exception:
            logger.exception("[%s/%s] unexpected error during update", entry.name, entry.address)
            return UpdateOutcome.FAILED
