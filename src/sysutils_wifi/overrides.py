"""Persisted per-interface overrides for card type and transmit power."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Iterator, Mapping

from .profiles import normalize_chipset, normalize_id

TYPE_OVERRIDES_HEADER = "# OpenHD SysUtils Wi-Fi overrides"
TX_POWER_OVERRIDES_HEADER = "# OpenHD SysUtils Wi-Fi TX power overrides"

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TxPowerOverride:
    """User supplied transmit power settings for a single interface."""

    tx_power: str = ""
    tx_power_high: str = ""
    tx_power_low: str = ""
    card_name: str = ""
    power_level: str = ""
    profile_vendor_id: str = ""
    profile_device_id: str = ""
    profile_chipset: str = ""

    def has_values(self) -> bool:
        return any(getattr(self, item.name) for item in fields(self))

    def has_forced_profile(self) -> bool:
        return bool(self.profile_vendor_id and self.profile_device_id)

    def clear_tx_values(self) -> None:
        self.tx_power = ""
        self.tx_power_high = ""
        self.tx_power_low = ""

    def clear_forced_profile(self) -> None:
        self.profile_vendor_id = ""
        self.profile_device_id = ""
        self.profile_chipset = ""

    def to_dict(self) -> dict[str, str]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


def _keep(value: str) -> str:
    return value


# Field name (upper case) -> (attribute, normaliser). Order is also the write order.
TX_POWER_FIELDS: tuple[tuple[str, str, Callable[[str], str]], ...] = (
    ("CARD_NAME", "card_name", _keep),
    ("POWER_LEVEL", "power_level", _keep),
    ("PROFILE_VENDOR_ID", "profile_vendor_id", normalize_id),
    ("PROFILE_DEVICE_ID", "profile_device_id", normalize_id),
    ("PROFILE_CHIPSET", "profile_chipset", normalize_chipset),
    ("TX_POWER", "tx_power", _keep),
    ("TX_POWER_HIGH", "tx_power_high", _keep),
    ("TX_POWER_LOW", "tx_power_low", _keep),
)
_TX_POWER_SLOTS = {key: (attribute, normaliser) for key, attribute, normaliser in TX_POWER_FIELDS}


def iter_assignments(path: Path) -> Iterator[tuple[str, str]]:
    """Yield trimmed ``(key, value)`` pairs from a ``key=value`` document.

    A missing or unreadable document yields nothing. Comments, blank lines,
    lines without ``=`` and lines with an empty key are skipped.
    """

    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, separator, value = line.partition("=")
        if not separator:
            continue
        key = key.strip()
        if not key:
            continue
        yield key, value.strip()


def _write_document(path: Path, header: str, lines: list[str]) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        _logger.warning("Unable to create override directory %s: %s", path.parent, exc)
        return False
    body = "\n".join([header, *lines]) + "\n"
    try:
        path.write_text(body, encoding="utf-8")
    except OSError as exc:
        _logger.warning("Unable to persist overrides to %s: %s", path, exc)
        return False
    return True


class TypeOverrideStore:
    """Interface -> card type overrides kept in a flat ``iface=value`` file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, str]:
        overrides: dict[str, str] = {}
        for interface, value in iter_assignments(self._path):
            if not value:
                continue
            overrides[interface] = value
        return overrides

    def save(self, overrides: Mapping[str, str]) -> bool:
        lines = [
            f"{interface}={value}"
            for interface, value in sorted(overrides.items())
            if interface and value
        ]
        return _write_document(self._path, TYPE_OVERRIDES_HEADER, lines)


class TxPowerOverrideStore:
    """Interface -> :class:`TxPowerOverride` kept as ``iface.field=value`` lines."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, TxPowerOverride]:
        overrides: dict[str, TxPowerOverride] = {}
        for key, value in iter_assignments(self._path):
            interface, dot, field_name = key.rpartition(".")
            if not dot:
                continue
            interface = interface.strip()
            field_name = field_name.strip()
            if not interface or not field_name:
                continue
            slot = _TX_POWER_SLOTS.get(field_name.upper())
            if slot is None:
                continue
            attribute, normaliser = slot
            entry = overrides.setdefault(interface, TxPowerOverride())
            setattr(entry, attribute, normaliser(value))
        return overrides

    def save(self, overrides: Mapping[str, TxPowerOverride]) -> bool:
        lines: list[str] = []
        for interface, entry in sorted(overrides.items()):
            if not interface or not entry.has_values():
                continue
            for _, attribute, _ in TX_POWER_FIELDS:
                value = getattr(entry, attribute)
                if value:
                    lines.append(f"{interface}.{attribute}={value}")
        return _write_document(self._path, TX_POWER_OVERRIDES_HEADER, lines)


__all__ = [
    "TX_POWER_FIELDS",
    "TxPowerOverride",
    "TxPowerOverrideStore",
    "TypeOverrideStore",
    "iter_assignments",
]
