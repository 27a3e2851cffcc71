"""Apply override create/update/delete requests and refresh the inventory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields

from .cards import AUTO_SELECTOR, CardRecord, WifiInventory
from .overrides import TxPowerOverride
from .profiles import normalize_chipset, normalize_id

ACTION_SET = "set"
ACTION_CLEAR = "clear"
ACTION_REFRESH = "refresh"
ACTION_DETECT = "detect"

_TX_LITERAL_FIELDS = ("tx_power", "tx_power_high", "tx_power_low", "card_name")
_PROFILE_FIELDS = ("profile_vendor_id", "profile_device_id", "profile_chipset")

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OverrideUpdate:
    """A requested change. ``None`` means the field was not supplied."""

    action: str = ACTION_REFRESH
    interface: str | None = None
    override_type: str | None = None
    tx_power: str | None = None
    tx_power_high: str | None = None
    tx_power_low: str | None = None
    card_name: str | None = None
    power_level: str | None = None
    profile_vendor_id: str | None = None
    profile_device_id: str | None = None
    profile_chipset: str | None = None

    def touches_tx_power(self) -> bool:
        return any(
            getattr(self, item.name) is not None
            for item in fields(self)
            if item.name not in {"action", "interface", "override_type"}
        )

    def touches_profile(self) -> bool:
        return any(getattr(self, name) is not None for name in _PROFILE_FIELDS)


@dataclass(slots=True)
class UpdateResult:
    action: str
    ok: bool
    cards: tuple[CardRecord, ...] | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"ok": self.ok, "action": self.action}
        if self.ok and self.cards is not None:
            payload["cards"] = [card.to_dict() for card in self.cards]
        return payload


def _is_auto(value: str) -> bool:
    return not value or value.strip().upper() == AUTO_SELECTOR


def _has_control_characters(value: str) -> bool:
    return any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in value)


def _is_storable(update: OverrideUpdate) -> bool:
    """Return whether every supplied value fits on one override-file line."""

    interface = update.interface or ""
    if "=" in interface or interface.strip().startswith("#") or _has_control_characters(interface):
        return False
    return not any(
        _has_control_characters(getattr(update, item.name) or "")
        for item in fields(update)
        if item.name not in {"action", "interface"}
    )


def _merge_tx_override(entry: TxPowerOverride, update: OverrideUpdate) -> None:
    for name in _TX_LITERAL_FIELDS:
        value = getattr(update, name)
        if value is not None:
            setattr(entry, name, value)
    if update.power_level is not None:
        entry.power_level = "" if _is_auto(update.power_level) else update.power_level.strip().upper()
        # A level selector supersedes any literal power values.
        entry.clear_tx_values()
    if update.touches_profile():
        vendor = update.profile_vendor_id or ""
        device = update.profile_device_id or ""
        if vendor and device:
            entry.profile_vendor_id = normalize_id(vendor)
            entry.profile_device_id = normalize_id(device)
            entry.profile_chipset = normalize_chipset(update.profile_chipset)
        else:
            entry.clear_forced_profile()


def _apply_set(inventory: WifiInventory, update: OverrideUpdate) -> bool:
    interface = update.interface
    if not interface:
        return False
    if not _is_storable(update):
        _logger.warning("Rejecting Wi-Fi override for %r: line breaks or bad interface name", interface)
        return False
    ok = True
    if update.override_type is not None:
        overrides = inventory.type_store.load()
        if _is_auto(update.override_type):
            overrides.pop(interface, None)
        else:
            overrides[interface] = update.override_type
        ok = inventory.type_store.save(overrides) and ok
    if update.touches_tx_power():
        tx_overrides = inventory.tx_store.load()
        entry = tx_overrides.setdefault(interface, TxPowerOverride())
        _merge_tx_override(entry, update)
        if not entry.has_values():
            tx_overrides.pop(interface, None)
        ok = inventory.tx_store.save(tx_overrides) and ok
    return ok


def _apply_clear(inventory: WifiInventory, interface: str | None) -> bool:
    type_overrides = inventory.type_store.load()
    tx_overrides = inventory.tx_store.load()
    if interface:
        type_overrides.pop(interface, None)
        tx_overrides.pop(interface, None)
    else:
        type_overrides.clear()
        tx_overrides.clear()
    return inventory.type_store.save(type_overrides) and inventory.tx_store.save(tx_overrides)


def apply_update(inventory: WifiInventory, update: OverrideUpdate) -> UpdateResult:
    """Persist ``update`` and, when it succeeds, rebuild the inventory."""

    action = update.action
    if action == ACTION_SET:
        ok = _apply_set(inventory, update)
    elif action == ACTION_CLEAR:
        ok = _apply_clear(inventory, update.interface)
    elif action in {ACTION_REFRESH, ACTION_DETECT}:
        ok = True
    else:
        _logger.warning("Rejecting unknown Wi-Fi override action %r", action)
        ok = False

    inventory.system_log.record(
        "wifi",
        f"override.{action or 'unknown'}",
        f"Wi-Fi override {action!r} {'applied' if ok else 'failed'}",
        metadata={"interface": update.interface or None, "ok": ok},
    )
    if not ok:
        return UpdateResult(action=action, ok=False)
    return UpdateResult(action=action, ok=True, cards=inventory.refresh())


__all__ = [
    "ACTION_CLEAR",
    "ACTION_DETECT",
    "ACTION_REFRESH",
    "ACTION_SET",
    "OverrideUpdate",
    "UpdateResult",
    "apply_update",
]
