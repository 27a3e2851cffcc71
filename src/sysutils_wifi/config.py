"""Filesystem locations and endpoint settings for the Wi-Fi inventory."""
from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

SYSUTILS_DATA_DIR = Path("/usr/local/share/OpenHD/SysUtils")

DEFAULT_OVERRIDES_PATH = SYSUTILS_DATA_DIR / "wifi_overrides.conf"
DEFAULT_TX_POWER_OVERRIDES_PATH = SYSUTILS_DATA_DIR / "wifi_txpower.conf"
DEFAULT_CARDS_PATH = SYSUTILS_DATA_DIR / "wifi_cards.json"
DEFAULT_NET_ROOT = Path("/sys/class/net")
DEFAULT_CONTROL_SOCKET_PATH = Path("/run/openhd/openhd_ctrl.sock")
DEFAULT_CONTROL_TIMEOUT = 0.9

ENV_OVERRIDES = "SYSUTILS_WIFI_OVERRIDES"
ENV_TX_POWER = "SYSUTILS_WIFI_TXPOWER"
ENV_CARDS = "SYSUTILS_WIFI_CARDS"
ENV_NET_ROOT = "SYSUTILS_SYSFS_NET"
ENV_CONTROL_SOCKET = "SYSUTILS_OPENHD_CTRL_SOCKET"
ENV_CONTROL_TIMEOUT = "SYSUTILS_OPENHD_CTRL_TIMEOUT"
ENV_EVENT_LOG = "SYSUTILS_EVENT_LOG"


@dataclass(frozen=True, slots=True)
class SysUtilsConfig:
    """Where the inventory reads and writes its documents."""

    overrides_path: Path = DEFAULT_OVERRIDES_PATH
    tx_power_overrides_path: Path = DEFAULT_TX_POWER_OVERRIDES_PATH
    cards_path: Path = DEFAULT_CARDS_PATH
    net_root: Path = DEFAULT_NET_ROOT
    control_socket_path: Path = DEFAULT_CONTROL_SOCKET_PATH
    control_timeout: float = DEFAULT_CONTROL_TIMEOUT
    event_log_path: Path | None = None

    def __post_init__(self) -> None:
        for name in (
            "overrides_path",
            "tx_power_overrides_path",
            "cards_path",
            "net_root",
            "control_socket_path",
        ):
            object.__setattr__(self, name, Path(getattr(self, name)))
        if self.event_log_path is not None:
            object.__setattr__(self, "event_log_path", Path(self.event_log_path))
        try:
            timeout = float(self.control_timeout)
        except (TypeError, ValueError) as exc:
            raise ValueError("Control timeout must be numeric") from exc
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError("Control timeout must be a positive finite value")
        object.__setattr__(self, "control_timeout", timeout)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SysUtilsConfig":
        """Build a configuration, letting ``SYSUTILS_*`` variables override defaults."""

        env = os.environ if environ is None else environ

        def path_value(name: str, default: Path) -> Path:
            raw = env.get(name, "").strip()
            return Path(raw) if raw else default

        timeout = DEFAULT_CONTROL_TIMEOUT
        raw_timeout = env.get(ENV_CONTROL_TIMEOUT, "").strip()
        if raw_timeout:
            try:
                candidate = float(raw_timeout)
            except ValueError:
                candidate = math.nan
            if math.isfinite(candidate) and candidate > 0:
                timeout = candidate
            else:
                logging.getLogger(__name__).warning(
                    "Ignoring invalid %s value: %r", ENV_CONTROL_TIMEOUT, raw_timeout
                )
        raw_log = env.get(ENV_EVENT_LOG, "").strip()
        return cls(
            overrides_path=path_value(ENV_OVERRIDES, DEFAULT_OVERRIDES_PATH),
            tx_power_overrides_path=path_value(ENV_TX_POWER, DEFAULT_TX_POWER_OVERRIDES_PATH),
            cards_path=path_value(ENV_CARDS, DEFAULT_CARDS_PATH),
            net_root=path_value(ENV_NET_ROOT, DEFAULT_NET_ROOT),
            control_socket_path=path_value(ENV_CONTROL_SOCKET, DEFAULT_CONTROL_SOCKET_PATH),
            control_timeout=timeout,
            event_log_path=Path(raw_log) if raw_log else None,
        )

    def with_root(self, root: Path | str) -> "SysUtilsConfig":
        """Return a copy with every absolute path re-anchored below ``root``."""

        base = Path(root)

        def rebase(path: Path) -> Path:
            return base / path.relative_to(path.anchor) if path.is_absolute() else base / path

        return replace(
            self,
            overrides_path=rebase(self.overrides_path),
            tx_power_overrides_path=rebase(self.tx_power_overrides_path),
            cards_path=rebase(self.cards_path),
            net_root=rebase(self.net_root),
            control_socket_path=rebase(self.control_socket_path),
            event_log_path=rebase(self.event_log_path) if self.event_log_path is not None else None,
        )


__all__ = [
    "DEFAULT_CARDS_PATH",
    "DEFAULT_CONTROL_SOCKET_PATH",
    "DEFAULT_CONTROL_TIMEOUT",
    "DEFAULT_NET_ROOT",
    "DEFAULT_OVERRIDES_PATH",
    "DEFAULT_TX_POWER_OVERRIDES_PATH",
    "ENV_CARDS",
    "ENV_CONTROL_SOCKET",
    "ENV_CONTROL_TIMEOUT",
    "ENV_EVENT_LOG",
    "ENV_NET_ROOT",
    "ENV_OVERRIDES",
    "ENV_TX_POWER",
    "SysUtilsConfig",
]
