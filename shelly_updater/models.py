"""Data shapes shared by discovery, the device client and the updater.

The device API returns loosely structured JSON; every ``from_json`` here
tolerates missing fields and falls back to empty values so that a partial
response still decodes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

GEN2_MARKER = "gen=2"


class UpdateOutcome(str, Enum):
    """Result of one device's update sequence."""

    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DeviceEntry:
    """A device found via mDNS.

    ``txt`` holds the advertised TXT records as ``key=value`` strings.
    """

    name: str
    address: str
    txt: tuple[str, ...] = field(default_factory=tuple)

    @property
    def generation(self) -> int:
        return 2 if GEN2_MARKER in self.txt else 1


@dataclass
class UpdateStatus:
    """Generation 1 ``/ota`` response."""

    status: str = "unknown"
    has_update: bool = False
    new_version: str = ""
    old_version: str = ""
    beta_version: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> UpdateStatus:
        return cls(
            status=str(data.get("status") or "unknown"),
            has_update=bool(data.get("has_update", False)),
            new_version=str(data.get("new_version") or ""),
            old_version=str(data.get("old_version") or ""),
            beta_version=str(data.get("beta_version") or ""),
        )

    @property
    def is_updating(self) -> bool:
        return self.status == "updating"

    def update_available(self, stage: str) -> bool:
        if stage == "beta":
            return self.old_version != self.beta_version
        return self.has_update

    def target_version(self, stage: str) -> str:
        return self.beta_version if stage == "beta" else self.new_version


@dataclass
class UpdateCheckStatus:
    """Generation 1 ``/ota/check`` response."""

    status: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> UpdateCheckStatus:
        return cls(status=str(data.get("status") or ""))


@dataclass
class VersionInfo:
    version: str = ""
    build_id: str = ""

    @classmethod
    def from_json(cls, data: Any) -> VersionInfo:
        if not isinstance(data, dict):
            return cls()
        return cls(
            version=str(data.get("version") or ""),
            build_id=str(data.get("build_id") or ""),
        )


@dataclass
class UpdateCheckResult:
    """Generation 2 ``Shelly.CheckForUpdate`` response.

    A channel with no pending update is omitted by the device, which decodes
    to an empty :class:`VersionInfo`.
    """

    stable: VersionInfo = field(default_factory=VersionInfo)
    beta: VersionInfo = field(default_factory=VersionInfo)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> UpdateCheckResult:
        return cls(
            stable=VersionInfo.from_json(data.get("stable")),
            beta=VersionInfo.from_json(data.get("beta")),
        )

    def version_for(self, stage: str) -> str:
        """Version offered on *stage*, or ``""`` when that channel is current."""
        return self.beta.version if stage == "beta" else self.stable.version
