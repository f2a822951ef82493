"""mDNS discovery of Shelly devices.

Shelly devices advertise ``_http._tcp.local.`` with an instance name that
starts with ``shelly`` (any case).  Gen2+ devices add a ``gen=2`` TXT record.

zeroconf invokes browse handlers on its own thread; matching entries are
handed back to the event loop with ``call_soon_threadsafe``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable

from zeroconf import Error as ZeroconfError
from zeroconf import IPVersion, ServiceBrowser, ServiceInfo, ServiceStateChange, Zeroconf

from shelly_updater.config import UpdaterConfig
from shelly_updater.models import DeviceEntry

logger = logging.getLogger(__name__)


class DiscoveryError(Exception):
    """Raised when the mDNS resolver or browser cannot be started."""


def entry_from_service_info(name: str, service_type: str, info: ServiceInfo) -> DeviceEntry:
    """Build a :class:`DeviceEntry` from resolved service info.

    The first IPv4 address is preferred; the advertised hostname is used when
    none has been resolved.
    """
    instance = name[: -len(service_type) - 1] if name.endswith(f".{service_type}") else name
    addresses = info.parsed_addresses(IPVersion.V4Only)
    address = addresses[0] if addresses else (info.server or "").rstrip(".")
    txt: list[str] = []
    for key, value in (info.properties or {}).items():
        k = key.decode("utf-8", "replace") if isinstance(key, bytes) else str(key)
        if value is None:
            txt.append(k)
            continue
        v = value.decode("utf-8", "replace") if isinstance(value, bytes) else str(value)
        txt.append(f"{k}={v}")
    return DeviceEntry(name=instance, address=address, txt=tuple(txt))


class ShellyDiscovery:
    """Browses for Shelly devices and reports each one exactly once.

    *on_found* is called on the event loop thread for every entry whose
    instance name starts with ``config.name_prefix`` (case-insensitive).
    """

    def __init__(
        self,
        config: UpdaterConfig,
        on_found: Callable[[DeviceEntry], None],
    ) -> None:
        self.config = config
        self.on_found = on_found
        self._zeroconf: Zeroconf | None = None
        self._browser: ServiceBrowser | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._seen: set[str] = set()
        self._lock = threading.Lock()

    # ── Lifecycle ──────────────────────────────────────────────────

    async def run(self, timeout: float | None = None) -> None:
        """Browse until *timeout* (default ``config.scan_timeout``) elapses."""
        timeout = self.config.scan_timeout if timeout is None else timeout
        self.start()
        try:
            await asyncio.sleep(timeout)
        finally:
            self.stop()

    def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        # IPv4 only: with IPv6 enabled an entry can resolve before its A record
        # arrives and never gets an IPv4 address.
        try:
            self._zeroconf = Zeroconf(ip_version=IPVersion.V4Only)
            self._browser = ServiceBrowser(
                self._zeroconf,
                self.config.service_type,
                handlers=[self._on_state_change],
            )
        except (OSError, ZeroconfError) as exc:
            self.stop()
            raise DiscoveryError(f"failed to start mDNS browser: {exc}") from exc
        logger.debug("mDNS: browsing for %s", self.config.service_type)

    def stop(self) -> None:
        if self._browser:
            self._browser.cancel()
            self._browser = None
        if self._zeroconf:
            self._zeroconf.close()
            self._zeroconf = None

    # ── Internal ───────────────────────────────────────────────────

    def matches(self, name: str) -> bool:
        return name.lower().startswith(self.config.name_prefix.lower())

    def _on_state_change(
        self,
        zeroconf: Zeroconf,
        service_type: str,
        name: str,
        state_change: ServiceStateChange,
    ) -> None:
        if state_change is not ServiceStateChange.Added:
            return
        if not self.matches(name):
            return
        with self._lock:
            if name in self._seen:
                return
            self._seen.add(name)

        info = zeroconf.get_service_info(service_type, name)
        if info is None:
            logger.warning("mDNS: could not resolve %s", name)
            with self._lock:
                self._seen.discard(name)
            return

        entry = entry_from_service_info(name, service_type, info)
        logger.debug("mDNS: found %s at %s (%s)", entry.name, entry.address, ", ".join(entry.txt))
        self._emit(entry)

    def _emit(self, entry: DeviceEntry) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self.on_found, entry)
