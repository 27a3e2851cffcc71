"""Resolve every wireless interface into one effective card record."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Mapping, Sequence

from .config import SysUtilsConfig
from .overrides import TxPowerOverride, TxPowerOverrideStore, TypeOverrideStore
from .profiles import CardProfile, POWER_MODE_FIXED, find_profile, load_profiles
from .sysfs import (
    UNKNOWN_TYPE,
    HardwareIdentity,
    driver_to_type,
    is_openhd_wifibroadcast_type,
    list_wireless_interfaces,
    resolve_identity,
)
from .system_log import SystemLog

DISABLED_OVERRIDE = "DISABLED"
AUTO_SELECTOR = "AUTO"

_logger = logging.getLogger(__name__)


def _mw_text(value: int) -> str:
    return str(value) if value > 0 else ""


@dataclass(slots=True)
class CardRecord:
    """Effective view of one wireless adapter after overrides are applied."""

    interface_name: str
    driver_name: str = ""
    phy_index: int = -1
    mac: str = ""
    vendor_id: str = ""
    device_id: str = ""
    detected_type: str = UNKNOWN_TYPE
    override_type: str = ""
    effective_type: str = UNKNOWN_TYPE
    disabled: bool = False
    power_mode: str = ""
    power_level: str = ""
    tx_power: str = ""
    tx_power_high: str = ""
    tx_power_low: str = ""
    card_name: str = ""
    power_lowest: str = ""
    power_low: str = ""
    power_mid: str = ""
    power_high: str = ""
    power_min: str = ""
    power_max: str = ""

    def to_dict(self) -> dict[str, object]:
        """Return the wire representation used by inventory responses."""

        return {
            "interface": self.interface_name,
            "driver": self.driver_name,
            "phy_index": int(self.phy_index),
            "mac": self.mac,
            "vendor_id": self.vendor_id,
            "device_id": self.device_id,
            "detected_type": self.detected_type,
            "override_type": self.override_type,
            "type": self.effective_type,
            "tx_power": self.tx_power,
            "tx_power_high": self.tx_power_high,
            "tx_power_low": self.tx_power_low,
            "card_name": self.card_name,
            "power_mode": self.power_mode,
            "power_level": self.power_level,
            "power_lowest": self.power_lowest,
            "power_low": self.power_low,
            "power_mid": self.power_mid,
            "power_high": self.power_high,
            "power_min": self.power_min,
            "power_max": self.power_max,
            "disabled": bool(self.disabled),
        }


def _apply_type_override(card: CardRecord, override: str | None) -> None:
    if override is None:
        card.effective_type = card.detected_type
        return
    card.override_type = override
    if override.upper() == DISABLED_OVERRIDE:
        # Disabled cards still report their detected type.
        card.disabled = True
        card.effective_type = card.detected_type
    else:
        card.effective_type = override


def select_profile(
    profiles: Sequence[CardProfile],
    card: CardRecord,
    tx_override: TxPowerOverride | None,
) -> CardProfile | None:
    """Return the catalog profile for ``card``, honouring a forced identity.

    The chipset hint is always the driver-derived type, never the override.
    """

    profile = find_profile(profiles, card.vendor_id, card.device_id, card.detected_type)
    if tx_override is None or not tx_override.has_forced_profile():
        return profile
    hint = tx_override.profile_chipset or card.detected_type
    forced = find_profile(
        profiles, tx_override.profile_vendor_id, tx_override.profile_device_id, hint
    )
    if forced is None:
        forced = find_profile(
            profiles, tx_override.profile_vendor_id, tx_override.profile_device_id, ""
        )
    return forced if forced is not None else profile


def _apply_power(card: CardRecord, profile: CardProfile | None, tx_override: TxPowerOverride | None) -> None:
    if profile is not None:
        card.card_name = profile.name
        card.power_mode = profile.power_mode
        card.power_lowest = _mw_text(profile.lowest_mw)
        card.power_low = _mw_text(profile.low_mw)
        card.power_mid = _mw_text(profile.mid_mw)
        card.power_high = _mw_text(profile.high_mw)
        card.power_min = _mw_text(profile.min_mw)
        card.power_max = _mw_text(profile.max_mw)

    if tx_override is not None:
        card.tx_power = tx_override.tx_power
        card.tx_power_high = tx_override.tx_power_high
        card.tx_power_low = tx_override.tx_power_low
        if tx_override.card_name:
            card.card_name = tx_override.card_name
        level = tx_override.power_level.strip().upper()
        card.power_level = "" if level == AUTO_SELECTOR else level

    if profile is None:
        return
    if profile.power_mode == POWER_MODE_FIXED:
        card.power_level = POWER_MODE_FIXED
        card.tx_power = ""
        card.tx_power_high = ""
        card.tx_power_low = ""
        return
    if card.power_level:
        selected = profile.level_mw(card.power_level)
        if selected > 0:
            card.tx_power = str(selected)
    if not card.tx_power_high and profile.high_mw > 0:
        card.tx_power_high = str(profile.high_mw)
    if not card.tx_power_low and profile.lowest_mw > 0:
        card.tx_power_low = str(profile.lowest_mw)


def build_card(
    identity: HardwareIdentity,
    type_overrides: Mapping[str, str],
    tx_overrides: Mapping[str, TxPowerOverride],
    profiles: Sequence[CardProfile],
) -> CardRecord:
    """Merge hardware identity, overrides and the catalog into a record."""

    card = CardRecord(
        interface_name=identity.interface_name,
        driver_name=identity.driver_name,
        phy_index=identity.phy_index,
        mac=identity.mac,
        vendor_id=identity.vendor_id,
        device_id=identity.device_id,
        detected_type=driver_to_type(identity.driver_name),
    )
    _apply_type_override(card, type_overrides.get(card.interface_name))
    tx_override = tx_overrides.get(card.interface_name)
    profile = select_profile(profiles, card, tx_override)
    _apply_power(card, profile, tx_override)
    return card


class WifiInventory:
    """Owns the current snapshot of card records and rebuilds it on demand."""

    def __init__(
        self,
        config: SysUtilsConfig | None = None,
        *,
        system_log: SystemLog | None = None,
    ) -> None:
        self._config = config or SysUtilsConfig.from_env()
        self._type_store = TypeOverrideStore(self._config.overrides_path)
        self._tx_store = TxPowerOverrideStore(self._config.tx_power_overrides_path)
        self._system_log = system_log or SystemLog(self._config.event_log_path)
        self._lock = threading.Lock()
        self._snapshot: tuple[CardRecord, ...] | None = None

    @property
    def config(self) -> SysUtilsConfig:
        return self._config

    @property
    def type_store(self) -> TypeOverrideStore:
        return self._type_store

    @property
    def tx_store(self) -> TxPowerOverrideStore:
        return self._tx_store

    @property
    def system_log(self) -> SystemLog:
        return self._system_log

    # ------------------------------ operations -----------------------------
    def refresh(self) -> tuple[CardRecord, ...]:
        """Rebuild every record and install the result as the new snapshot.

        When the interface list itself cannot be read the previous snapshot
        is kept.
        """

        type_overrides = self._type_store.load()
        tx_overrides = self._tx_store.load()
        profiles = load_profiles(self._config.cards_path)
        try:
            interfaces = list_wireless_interfaces(self._config.net_root)
        except OSError as exc:
            _logger.warning("Unable to enumerate wireless interfaces: %s", exc)
            with self._lock:
                if self._snapshot is None:
                    self._snapshot = ()
                return self._snapshot
        cards = tuple(
            self._build_one(interface, type_overrides, tx_overrides, profiles)
            for interface in interfaces
        )
        with self._lock:
            self._snapshot = cards
        _logger.info("Wi-Fi inventory refreshed: %d card(s)", len(cards))
        return cards

    def cards(self) -> tuple[CardRecord, ...]:
        with self._lock:
            snapshot = self._snapshot
        if snapshot is None:
            snapshot = self.refresh()
        return snapshot

    def card(self, interface: str) -> CardRecord | None:
        for card in self.cards():
            if card.interface_name == interface:
                return card
        return None

    def has_openhd_wifibroadcast_cards(self) -> bool:
        return any(
            not card.disabled and is_openhd_wifibroadcast_type(card.effective_type)
            for card in self.cards()
        )

    # ----------------------------- implementation --------------------------
    def _build_one(
        self,
        interface: str,
        type_overrides: Mapping[str, str],
        tx_overrides: Mapping[str, TxPowerOverride],
        profiles: Sequence[CardProfile],
    ) -> CardRecord:
        try:
            identity = resolve_identity(interface, self._config.net_root)
        except OSError as exc:
            _logger.warning("Unable to resolve hardware identity for %s: %s", interface, exc)
            identity = HardwareIdentity(interface_name=interface)
        return build_card(identity, type_overrides, tx_overrides, profiles)


__all__ = [
    "CardRecord",
    "DISABLED_OVERRIDE",
    "WifiInventory",
    "build_card",
    "select_profile",
]
