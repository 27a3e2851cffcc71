"""Recover wireless adapter identity from the kernel's sysfs attribute files."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from .config import DEFAULT_NET_ROOT
from .profiles import normalize_id

# Interfaces whose device link lives under a different name on older kernels.
LEGACY_DEVICE_ALIASES: dict[str, str] = {"ath0": "wifi0"}

MAX_ANCESTOR_DEPTH = 6

UNKNOWN_TYPE = "UNKNOWN"
OPENHD_TYPE_PREFIX = "OPENHD_"

# Exact (case-insensitive) driver names first, then substring families.
EXACT_DRIVER_TYPES: tuple[tuple[str, str], ...] = (
    ("rtl88xxau_ohd", "OPENHD_RTL_88X2AU"),
    ("rtl88x2au_ohd", "OPENHD_RTL_88X2CU"),
    ("rtl88x2bu_ohd", "OPENHD_RTL_88X2BU"),
    ("rtl88x2eu_ohd", "OPENHD_RTL_88X2EU"),
    ("cnss_pci", "QUALCOMM"),
    ("rtl8852bu_ohd", "OPENHD_RTL_8852BU"),
    ("rtl88x2cu_ohd", "OPENHD_RTL_88X2CU"),
)
DRIVER_FAMILY_TYPES: tuple[tuple[str, str], ...] = (
    ("ath9k", "ATHEROS"),
    ("rt2800usb", "RALINK"),
    ("iwlwifi", "INTEL"),
    ("brcmfmac", "BROADCOM"),
    ("bcmsdh_sdmmc", "BROADCOM"),
    ("aicwf_sdio", "AIC"),
    ("88xxau", "RTL_88X2AU"),
    ("rtw_8822bu", "RTL_88X2BU"),
    ("mt7921u", "MT_7921u"),
)

_DRIVER_RE = re.compile(r"DRIVER=(\w+)")
_UEVENT_ID_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"PCI_ID=([0-9A-Fa-f]{4}):([0-9A-Fa-f]{4})"),
    re.compile(r"PRODUCT=([0-9A-Fa-f]{4})/([0-9A-Fa-f]{4})/"),
)
_MODALIAS_ID_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"usb:v([0-9A-Fa-f]{4})p([0-9A-Fa-f]{4})"),
    re.compile(r"pci:v([0-9A-Fa-f]{4})d([0-9A-Fa-f]{4})"),
)

_logger = logging.getLogger(__name__)


def driver_to_type(driver_name: str) -> str:
    """Classify an adapter from its kernel driver name."""

    lowered = driver_name.lower()
    for name, card_type in EXACT_DRIVER_TYPES:
        if lowered == name:
            return card_type
    for fragment, card_type in DRIVER_FAMILY_TYPES:
        if fragment in lowered:
            return card_type
    return UNKNOWN_TYPE


def is_openhd_wifibroadcast_type(card_type: str) -> bool:
    return card_type.strip().upper().startswith(OPENHD_TYPE_PREFIX)


def read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except (OSError, ValueError):
        return None


def read_int(path: Path) -> int | None:
    content = read_text(path)
    if content is None:
        return None
    try:
        return int(content.strip())
    except ValueError:
        return None


def extract_driver_name(uevent: str) -> str | None:
    match = _DRIVER_RE.search(uevent)
    return match.group(1) if match else None


@dataclass(slots=True)
class VendorDevice:
    """Vendor/device pair filled in incrementally from several sources."""

    vendor_id: str = ""
    device_id: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.vendor_id and self.device_id)

    def offer(self, vendor: str | None, device: str | None) -> None:
        if not self.vendor_id and vendor:
            self.vendor_id = normalize_id(vendor)
        if not self.device_id and device:
            self.device_id = normalize_id(device)

    def offer_patterns(self, text: str, patterns: Sequence[re.Pattern[str]]) -> None:
        """Fill missing ids from the first pattern that matches ``text``."""

        if self.complete:
            return
        for pattern in patterns:
            match = pattern.search(text)
            if match:
                self.offer(match.group(1), match.group(2))
                return


def _probe_pci_attributes(directory: Path, ids: VendorDevice) -> None:
    if not ids.vendor_id:
        ids.offer(read_text(directory / "vendor"), None)
    if not ids.device_id:
        ids.offer(None, read_text(directory / "device"))


def _probe_usb_attributes(directory: Path, ids: VendorDevice) -> None:
    if not ids.vendor_id:
        ids.offer(read_text(directory / "idVendor"), None)
    if not ids.device_id:
        ids.offer(None, read_text(directory / "idProduct"))


def _probe_uevent(directory: Path, ids: VendorDevice) -> None:
    content = read_text(directory / "uevent")
    if content is not None:
        ids.offer_patterns(content, _UEVENT_ID_PATTERNS)


def _probe_modalias(directory: Path, ids: VendorDevice) -> None:
    content = read_text(directory / "modalias")
    if content is not None:
        ids.offer_patterns(content, _MODALIAS_ID_PATTERNS)


ANCESTOR_PROBES: tuple[Callable[[Path, VendorDevice], None], ...] = (
    _probe_pci_attributes,
    _probe_usb_attributes,
    _probe_uevent,
    _probe_modalias,
)


def _resolve_path(path: Path) -> Path:
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError):
        pass
    try:
        return path.resolve()
    except (OSError, RuntimeError):
        return path


def walk_vendor_device(device_path: Path, ids: VendorDevice | None = None) -> VendorDevice:
    """Search ``device_path`` and up to five of its parents for vendor/device ids."""

    result = ids if ids is not None else VendorDevice()
    current = _resolve_path(device_path)
    for _ in range(MAX_ANCESTOR_DEPTH):
        for probe in ANCESTOR_PROBES:
            probe(current, result)
        if result.complete:
            break
        parent = current.parent
        if parent == current:
            break
        current = parent
    return result


@dataclass(slots=True)
class HardwareIdentity:
    """Facts about one network interface recovered from sysfs."""

    interface_name: str
    driver_name: str = ""
    phy_index: int = -1
    mac: str = ""
    vendor_id: str = ""
    device_id: str = ""


def device_directory(interface: str, net_root: Path) -> Path:
    """Return the sysfs device directory, honouring legacy interface aliases."""

    device_path = net_root / interface / "device"
    alias = LEGACY_DEVICE_ALIASES.get(interface)
    if alias is not None and not (device_path / "uevent").exists():
        device_path = net_root / alias / "device"
    return device_path


def resolve_identity(interface: str, net_root: Path | str = DEFAULT_NET_ROOT) -> HardwareIdentity:
    """Collect driver, PHY, MAC and vendor/device ids for ``interface``."""

    root = Path(net_root)
    identity = HardwareIdentity(interface_name=interface)
    device_path = device_directory(interface, root)
    uevent = read_text(device_path / "uevent") or ""
    if uevent:
        identity.driver_name = extract_driver_name(uevent) or ""

    phy_index = read_int(root / interface / "phy80211" / "index")
    if phy_index is not None:
        identity.phy_index = phy_index

    identity.mac = (read_text(root / interface / "address") or "").strip()

    ids = walk_vendor_device(device_path)
    if uevent:
        ids.offer_patterns(uevent, _UEVENT_ID_PATTERNS)
    identity.vendor_id = ids.vendor_id
    identity.device_id = ids.device_id
    _logger.debug(
        "Resolved %s: driver=%s phy=%s vendor=%s device=%s",
        interface,
        identity.driver_name or "?",
        identity.phy_index,
        identity.vendor_id or "?",
        identity.device_id or "?",
    )
    return identity


def list_wireless_interfaces(net_root: Path | str = DEFAULT_NET_ROOT) -> list[str]:
    """Return the interfaces below ``net_root`` that expose a ``phy80211`` entry.

    Raises :class:`OSError` when ``net_root`` itself cannot be listed.
    """

    root = Path(net_root)
    interfaces: list[str] = []
    for entry in root.iterdir():
        try:
            if (entry / "phy80211").exists():
                interfaces.append(entry.name)
        except OSError:
            continue
    return sorted(interfaces)


__all__ = [
    "DEFAULT_NET_ROOT",
    "DRIVER_FAMILY_TYPES",
    "EXACT_DRIVER_TYPES",
    "HardwareIdentity",
    "UNKNOWN_TYPE",
    "VendorDevice",
    "device_directory",
    "driver_to_type",
    "extract_driver_name",
    "is_openhd_wifibroadcast_type",
    "list_wireless_interfaces",
    "resolve_identity",
    "walk_vendor_device",
]
