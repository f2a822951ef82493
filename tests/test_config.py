"""Tests for UpdaterConfig."""

from __future__ import annotations

import dataclasses

import pytest

from shelly_updater.config import UpdaterConfig


def test_defaults():
    config = UpdaterConfig()
    assert config.username == "admin"
    assert config.password == ""
    assert config.stage == "stable"
    assert config.generation == 0
    assert config.scan_timeout == 60.0
    assert config.poll_interval == 5.0
    assert config.gen2_max_attempts == 12
    assert config.service_type == "_http._tcp.local."
    assert config.use_auth is False


def test_is_immutable():
    config = UpdaterConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.stage = "beta"  # type: ignore[misc]


@pytest.mark.parametrize("stage", ["", "nightly", "Stable"])
def test_invalid_stage_rejected(stage):
    with pytest.raises(ValueError):
        UpdaterConfig(stage=stage)


@pytest.mark.parametrize("generation", [-1, 3])
def test_invalid_generation_rejected(generation):
    with pytest.raises(ValueError):
        UpdaterConfig(generation=generation)


def test_wants_generation():
    assert UpdaterConfig(generation=0).wants_generation(1)
    assert UpdaterConfig(generation=0).wants_generation(2)
    assert UpdaterConfig(generation=1).wants_generation(1)
    assert not UpdaterConfig(generation=1).wants_generation(2)
    assert not UpdaterConfig(generation=2).wants_generation(1)


class TestFromEnv:
    def test_reads_credentials(self, monkeypatch):
        monkeypatch.setenv("SHELLY_USERNAME", "ops")
        monkeypatch.setenv("SHELLY_PASSWORD", "hunter2")
        config = UpdaterConfig.from_env()
        assert config.username == "ops"
        assert config.password == "hunter2"
        assert config.use_auth

    def test_overrides_win_and_none_is_ignored(self, monkeypatch):
        monkeypatch.setenv("SHELLY_USERNAME", "ops")
        monkeypatch.delenv("SHELLY_PASSWORD", raising=False)
        config = UpdaterConfig.from_env(username=None, password="pw", stage="beta")
        assert config.username == "ops"
        assert config.password == "pw"
        assert config.stage == "beta"

    def test_defaults_without_env(self, monkeypatch):
        monkeypatch.delenv("SHELLY_USERNAME", raising=False)
        monkeypatch.delenv("SHELLY_PASSWORD", raising=False)
        config = UpdaterConfig.from_env()
        assert config.username == "admin"
        assert config.use_auth is False
