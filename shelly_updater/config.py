"""Configuration for the Shelly updater."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

STAGES = ("stable", "beta")
GENERATIONS = (0, 1, 2)

DEFAULT_SERVICE_TYPE = "_http._tcp.local."


@dataclass(frozen=True)
class UpdaterConfig:
    """Settings shared by discovery, the device client and the updater.

    ``generation`` of 0 updates every device; 1 or 2 restricts the run to
    that generation.
    """

    username: str = "admin"
    password: str = ""
    stage: str = "stable"
    generation: int = 0

    # Discovery
    scan_timeout: float = 60.0
    name_prefix: str = "shelly"
    service_type: str = DEFAULT_SERVICE_TYPE

    # Polling
    check_delay: float = 5.0  # gen1 update check runs asynchronously on the device
    poll_interval: float = 5.0
    gen1_max_attempts: int = 60
    gen2_max_attempts: int = 12

    # HTTP
    http_timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.stage not in STAGES:
            raise ValueError(f"stage must be one of {STAGES}, got {self.stage!r}")
        if self.generation not in GENERATIONS:
            raise ValueError(
                f"generation must be one of {GENERATIONS}, got {self.generation!r}"
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> UpdaterConfig:
        """Build a config from ``SHELLY_USERNAME``/``SHELLY_PASSWORD``.

        Keyword overrides that are ``None`` are ignored so CLI arguments can be
        passed straight through.
        """
        values: dict[str, Any] = {
            "username": os.environ.get("SHELLY_USERNAME", "admin"),
            "password": os.environ.get("SHELLY_PASSWORD", ""),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def use_auth(self) -> bool:
        return self.password != ""

    def wants_generation(self, generation: int) -> bool:
        return self.generation in (0, generation)
