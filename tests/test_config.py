from __future__ import annotations

import logging
import math
from pathlib import Path

import pytest

from sysutils_wifi.config import (
    DEFAULT_CARDS_PATH,
    DEFAULT_CONTROL_TIMEOUT,
    DEFAULT_NET_ROOT,
    SysUtilsConfig,
)


def test_defaults() -> None:
    config = SysUtilsConfig.from_env({})
    assert config.overrides_path == Path("/usr/local/share/OpenHD/SysUtils/wifi_overrides.conf")
    assert config.tx_power_overrides_path == Path("/usr/local/share/OpenHD/SysUtils/wifi_txpower.conf")
    assert config.cards_path == DEFAULT_CARDS_PATH
    assert config.net_root == DEFAULT_NET_ROOT
    assert config.control_socket_path == Path("/run/openhd/openhd_ctrl.sock")
    assert config.control_timeout == DEFAULT_CONTROL_TIMEOUT
    assert config.event_log_path is None


def test_environment_overrides(tmp_path: Path) -> None:
    config = SysUtilsConfig.from_env(
        {
            "SYSUTILS_WIFI_OVERRIDES": str(tmp_path / "types.conf"),
            "SYSUTILS_WIFI_TXPOWER": str(tmp_path / "tx.conf"),
            "SYSUTILS_WIFI_CARDS": str(tmp_path / "cards.json"),
            "SYSUTILS_SYSFS_NET": str(tmp_path / "net"),
            "SYSUTILS_OPENHD_CTRL_SOCKET": str(tmp_path / "ctrl.sock"),
            "SYSUTILS_OPENHD_CTRL_TIMEOUT": "2.5",
            "SYSUTILS_EVENT_LOG": str(tmp_path / "events.jsonl"),
        }
    )
    assert config.overrides_path == tmp_path / "types.conf"
    assert config.tx_power_overrides_path == tmp_path / "tx.conf"
    assert config.cards_path == tmp_path / "cards.json"
    assert config.net_root == tmp_path / "net"
    assert config.control_socket_path == tmp_path / "ctrl.sock"
    assert config.control_timeout == 2.5
    assert config.event_log_path == tmp_path / "events.jsonl"


def test_blank_environment_values_use_defaults() -> None:
    config = SysUtilsConfig.from_env({"SYSUTILS_WIFI_CARDS": "   ", "SYSUTILS_EVENT_LOG": ""})
    assert config.cards_path == DEFAULT_CARDS_PATH
    assert config.event_log_path is None


@pytest.mark.parametrize("raw", ["soon", "0", "-1", "nan", "inf"])
def test_invalid_environment_timeout(raw: str, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        config = SysUtilsConfig.from_env({"SYSUTILS_OPENHD_CTRL_TIMEOUT": raw})
    assert config.control_timeout == DEFAULT_CONTROL_TIMEOUT
    assert "SYSUTILS_OPENHD_CTRL_TIMEOUT" in caplog.text


@pytest.mark.parametrize("timeout", [0, -0.5, math.inf, "fast"])
def test_invalid_timeout_rejected(timeout) -> None:
    with pytest.raises(ValueError):
        SysUtilsConfig(control_timeout=timeout)


def test_paths_are_coerced() -> None:
    config = SysUtilsConfig(cards_path="/tmp/cards.json", event_log_path="/tmp/log.jsonl")
    assert isinstance(config.cards_path, Path)
    assert config.event_log_path == Path("/tmp/log.jsonl")


def test_with_root(tmp_path: Path) -> None:
    config = SysUtilsConfig(event_log_path=Path("/var/log/sysutils.jsonl")).with_root(tmp_path)
    assert config.net_root == tmp_path / "sys" / "class" / "net"
    assert config.cards_path == tmp_path / "usr/local/share/OpenHD/SysUtils/wifi_cards.json"
    assert config.control_socket_path == tmp_path / "run/openhd/openhd_ctrl.sock"
    assert config.event_log_path == tmp_path / "var/log/sysutils.jsonl"
    assert config.control_timeout == DEFAULT_CONTROL_TIMEOUT
