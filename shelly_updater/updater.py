"""Per-device firmware update sequences.

Gen1 devices expose the ``/ota`` endpoints: trigger a check, wait for it to
finish, read the status, then start the update and poll while the device
reports ``updating``.

Gen2 devices expose ``Shelly.CheckForUpdate``/``Shelly.Update``: the update
is complete once the channel no longer offers a version.
"""

from __future__ import annotations

import asyncio
import logging

from shelly_updater.client import ShellyClient, ShellyClientError
from shelly_updater.config import UpdaterConfig
from shelly_updater.models import DeviceEntry, UpdateOutcome

logger = logging.getLogger(__name__)


class ShellyUpdater:
    """Runs the update sequence matching a device's generation.

    Device errors abort only that device and are reported through the
    returned :class:`UpdateOutcome`.
    """

    def __init__(self, config: UpdaterConfig, client: ShellyClient) -> None:
        self.config = config
        self.client = client

    async def update_device(self, entry: DeviceEntry) -> UpdateOutcome:
        generation = entry.generation
        if not self.config.wants_generation(generation):
            logger.debug(
                "[%s/%s/gen%d] skipped (--gen=%d)",
                entry.name, entry.address, generation, self.config.generation,
            )
            return UpdateOutcome.SKIPPED
        if generation == 2:
            return await self._update_gen2(entry)
        return await self._update_gen1(entry)

    async def _update_gen1(self, entry: DeviceEntry) -> UpdateOutcome:
        prefix = f"[{entry.name}/{entry.address}/gen1]"
        stage = self.config.stage
        address = entry.address

        logger.info("%s checking for updates...", prefix)
        try:
            await self.client.trigger_update_check(address)
        except ShellyClientError as exc:
            logger.error("%s failed to check for updates: %s, aborting...", prefix, exc)
            return UpdateOutcome.FAILED

        await asyncio.sleep(self.config.check_delay)

        try:
            status = await self.client.get_update_status(address)
        except ShellyClientError as exc:
            logger.error("%s failed to query update status: %s, aborting...", prefix, exc)
            return UpdateOutcome.FAILED

        if not status.update_available(stage):
            logger.info("%s already up to date (%s)", prefix, status.old_version)
            return UpdateOutcome.UP_TO_DATE

        logger.info(
            "%s update available! (%s -> %s), updating...",
            prefix, status.old_version, status.target_version(stage),
        )
        try:
            status = await self.client.trigger_update(address, stage)
        except ShellyClientError as exc:
            logger.error("%s failed to start update: %s, aborting...", prefix, exc)
            return UpdateOutcome.FAILED

        attempts = 0
        while status.is_updating:
            attempts += 1
            if attempts > self.config.gen1_max_attempts:
                logger.error(
                    "%s still updating after %d status checks, giving up",
                    prefix, self.config.gen1_max_attempts,
                )
                return UpdateOutcome.FAILED
            await asyncio.sleep(self.config.poll_interval)
            try:
                status = await self.client.get_update_status(address)
            except ShellyClientError as exc:
                logger.warning("%s failed to query update status: %s, retrying...", prefix, exc)
                continue

        logger.info("%s device updated to %s!", prefix, status.old_version)
        return UpdateOutcome.UPDATED

    async def _update_gen2(self, entry: DeviceEntry) -> UpdateOutcome:
        prefix = f"[{entry.name}/{entry.address}/gen2]"
        stage = self.config.stage
        address = entry.address

        logger.info("%s checking for updates...", prefix)
        try:
            updates = await self.client.check_for_update(address)
        except ShellyClientError as exc:
            logger.error("%s failed to check for updates: %s, aborting...", prefix, exc)
            return UpdateOutcome.FAILED

        new_version = updates.version_for(stage)
        if not new_version:
            logger.info("%s already up to date", prefix)
            return UpdateOutcome.UP_TO_DATE

        logger.info("%s updating to version %s...", prefix, new_version)
        try:
            await self.client.update(address, stage)
        except ShellyClientError as exc:
            logger.error("%s failed to update: %s, aborting...", prefix, exc)
            return UpdateOutcome.FAILED

        pending = new_version
        attempts = 0
        while pending:
            attempts += 1
            if attempts > self.config.gen2_max_attempts:
                logger.error("%s failed to check if update completed successfully", prefix)
                return UpdateOutcome.FAILED
            await asyncio.sleep(self.config.poll_interval)
            try:
                updates = await self.client.check_for_update(address)
            except ShellyClientError as exc:
                logger.warning("%s failed to query update status: %s, retrying...", prefix, exc)
                continue
            pending = updates.version_for(stage)

        logger.info("%s device updated to %s!", prefix, new_version)
        return UpdateOutcome.UPDATED
