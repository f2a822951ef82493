"""Shelly device HTTP API client.

Covers the handful of OTA endpoints the updater needs:

  - Gen1: https://shelly-api-docs.shelly.cloud/gen1/#ota
  - Gen2: https://shelly-api-docs.shelly.cloud/gen2/ComponentsAndServices/Shelly

No retries here; the updater owns the retry policy.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from shelly_updater.config import UpdaterConfig
from shelly_updater.models import UpdateCheckResult, UpdateCheckStatus, UpdateStatus

logger = logging.getLogger(__name__)

OTA_PATH = "/ota"
OTA_CHECK_PATH = "/ota/check"
CHECK_FOR_UPDATE_PATH = "/rpc/Shelly.CheckForUpdate"
UPDATE_PATH = "/rpc/Shelly.Update"


class ShellyClientError(Exception):
    """Base error for device API failures."""


class ShellyConnectionError(ShellyClientError):
    """Raised when the device is network-unreachable or times out."""


class ShellyHTTPError(ShellyClientError):
    """Raised on any non-200 response."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"unexpected status code: {status_code} ({url})")
        self.url = url
        self.status_code = status_code


class ShellyAuthError(ShellyHTTPError):
    """Raised when the device returns 401 or 403."""


class ShellyDecodeError(ShellyClientError):
    """Raised when a response body is not a JSON object."""


class ShellyClient:
    """Async client for the Shelly OTA endpoints.

    One :class:`httpx.AsyncClient` is shared by every device task.  Pass
    *client* to supply a preconfigured one (tests use a mock transport).
    """

    def __init__(
        self,
        config: UpdaterConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(
            timeout=config.http_timeout,
        )
        self._auth: httpx.BasicAuth | None = (
            httpx.BasicAuth(config.username, config.password) if config.use_auth else None
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ShellyClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # Gen1
    # ------------------------------------------------------------------ #

    async def trigger_update_check(self, address: str) -> UpdateCheckStatus:
        """Ask a gen1 device to look for new firmware (GET /ota/check).

        The check completes asynchronously on the device.
        """
        data = await self._get(address, OTA_CHECK_PATH)
        return UpdateCheckStatus.from_json(data)

    async def get_update_status(self, address: str) -> UpdateStatus:
        """Return the gen1 OTA status (GET /ota)."""
        data = await self._get(address, OTA_PATH)
        return UpdateStatus.from_json(data)

    async def trigger_update(self, address: str, stage: str) -> UpdateStatus:
        """Start a gen1 update (GET /ota?update=1 or /ota?beta=1)."""
        params = {"beta": "1"} if stage == "beta" else {"update": "1"}
        data = await self._get(address, OTA_PATH, params)
        return UpdateStatus.from_json(data)

    # ------------------------------------------------------------------ #
    # Gen2
    # ------------------------------------------------------------------ #

    async def check_for_update(self, address: str) -> UpdateCheckResult:
        """Return versions offered per channel (GET /rpc/Shelly.CheckForUpdate)."""
        data = await self._get(address, CHECK_FOR_UPDATE_PATH)
        return UpdateCheckResult.from_json(data)

    async def update(self, address: str, stage: str) -> None:
        """Start a gen2 update on *stage* (GET /rpc/Shelly.Update)."""
        await self._request(address, UPDATE_PATH, {"stage": stage})

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _get(
        self,
        address: str,
        path: str,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        response = await self._request(address, path, params)
        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ShellyDecodeError(f"invalid JSON from {response.url}: {exc}") from exc
        if not isinstance(data, dict):
            raise ShellyDecodeError(f"expected a JSON object from {response.url}")
        return data

    async def _request(
        self,
        address: str,
        path: str,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = f"http://{address}{path}"
        logger.debug("GET %s %s", url, params or "")
        try:
            if self._auth is not None:
                response = await self._client.get(url, params=params, auth=self._auth)
            else:
                response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise ShellyConnectionError(f"cannot reach {url}: {exc}") from exc
        if response.status_code in (401, 403):
            raise ShellyAuthError(url, response.status_code)
        if response.status_code != 200:
            raise ShellyHTTPError(url, response.status_code)
        return response
