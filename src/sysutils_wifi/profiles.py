"""Wi-Fi card capability profiles and transmit power level synthesis."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable

from .document import extract_array_objects, extract_int_field, extract_object_field, extract_string_field

POWER_MODE_MW = "MW"
POWER_MODE_FIXED = "FIXED"

CATALOG_KEY = "cards"

LEVEL_KEYS: tuple[str, ...] = ("lowest", "low", "mid", "high")

# Evaluated top to bottom; each entry sees the values filled in before it.
LEVEL_FALLBACKS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("min_mw", ("lowest_mw", "low_mw", "mid_mw", "high_mw")),
    ("max_mw", ("high_mw", "mid_mw", "low_mw", "lowest_mw")),
    ("lowest_mw", ("low_mw", "mid_mw", "high_mw", "min_mw")),
    ("low_mw", ("lowest_mw", "mid_mw", "high_mw", "min_mw")),
    ("mid_mw", ("low_mw", "high_mw", "max_mw")),
    ("high_mw", ("max_mw", "mid_mw", "low_mw", "lowest_mw")),
)

_logger = logging.getLogger(__name__)


def normalize_id(value: str | None) -> str:
    """Return ``value`` as ``0x`` followed by upper-case hex, or ``""``."""

    text = (value or "").strip()
    if not text:
        return ""
    if text[:2] in {"0x", "0X"}:
        text = text[2:]
    return "0x" + text.upper()


def normalize_chipset(value: str | None) -> str:
    return (value or "").strip().upper()


@dataclass(frozen=True, slots=True)
class CardProfile:
    """Catalog entry describing the RF capabilities of one adapter model."""

    vendor_id: str
    device_id: str
    chipset: str = ""
    name: str = ""
    power_mode: str = POWER_MODE_MW
    min_mw: int = 0
    max_mw: int = 0
    lowest_mw: int = 0
    low_mw: int = 0
    mid_mw: int = 0
    high_mw: int = 0

    @property
    def is_fixed(self) -> bool:
        return self.power_mode == POWER_MODE_FIXED

    def level_mw(self, level: str) -> int:
        """Return the milliwatt value for a ``LOWEST``/``LOW``/``MID``/``HIGH`` selector."""

        key = level.strip().lower()
        if key not in LEVEL_KEYS:
            return 0
        return int(getattr(self, f"{key}_mw"))

    def matches(self, vendor_id: str, device_id: str) -> bool:
        return (
            self.vendor_id.upper() == vendor_id.upper()
            and self.device_id.upper() == device_id.upper()
        )


def synthesize_levels(profile: CardProfile) -> CardProfile:
    """Fill missing milliwatt levels from the ones that were supplied."""

    if profile.is_fixed:
        return replace(profile, min_mw=0, max_mw=0, lowest_mw=0, low_mw=0, mid_mw=0, high_mw=0)
    levels = {
        name: max(0, int(getattr(profile, name)))
        for name, _ in LEVEL_FALLBACKS
    }
    for name, candidates in LEVEL_FALLBACKS:
        if levels[name] > 0:
            continue
        for candidate in candidates:
            if levels[candidate] > 0:
                levels[name] = levels[candidate]
                break
    return replace(profile, **levels)


def default_profiles() -> list[CardProfile]:
    """Return the built-in catalog used when no catalog document is usable."""

    return [
        CardProfile(
            vendor_id=normalize_id("0x02D0"),
            device_id=normalize_id("0xA9A6"),
            chipset=normalize_chipset("BROADCOM"),
            name="Raspberry Internal",
            power_mode=POWER_MODE_FIXED,
        ),
        CardProfile(
            vendor_id=normalize_id("0x0BDA"),
            device_id=normalize_id("0xA81A"),
            chipset=normalize_chipset("OPENHD_RTL_88X2EU"),
            name="LB-Link 8812eu",
            power_mode=POWER_MODE_MW,
            min_mw=25,
            max_mw=1000,
            lowest_mw=25,
            low_mw=100,
            mid_mw=500,
            high_mw=1000,
        ),
    ]


def parse_profile(document: str) -> CardProfile | None:
    """Build a profile from one catalog object, or ``None`` when it is unusable."""

    vendor_id = normalize_id(extract_string_field(document, "vendor_id"))
    device_id = normalize_id(extract_string_field(document, "device_id"))
    if not vendor_id or not device_id:
        return None
    mode_raw = extract_string_field(document, "power_mode") or "mw"
    power_mode = POWER_MODE_FIXED if mode_raw.strip().upper() == POWER_MODE_FIXED else POWER_MODE_MW
    profile = CardProfile(
        vendor_id=vendor_id,
        device_id=device_id,
        chipset=normalize_chipset(extract_string_field(document, "chipset")),
        name=extract_string_field(document, "name") or "",
        power_mode=power_mode,
    )
    if profile.is_fixed:
        return profile

    def read(text: str, key: str) -> int:
        value = extract_int_field(text, key)
        return value if value is not None and value > 0 else 0

    levels = {
        "min_mw": read(document, "min_mw"),
        "max_mw": read(document, "max_mw"),
    }
    for key in LEVEL_KEYS:
        levels[f"{key}_mw"] = read(document, key)
    nested = extract_object_field(document, "levels_mw")
    if nested is not None:
        for key in LEVEL_KEYS:
            if levels[f"{key}_mw"] <= 0:
                levels[f"{key}_mw"] = read(nested, key)
    return synthesize_levels(replace(profile, **levels))


def load_profiles(path: Path | str | None) -> list[CardProfile]:
    """Load the catalog document, falling back to :func:`default_profiles`."""

    if path is None:
        return default_profiles()
    catalog_path = Path(path)
    try:
        content = catalog_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        _logger.debug("Wi-Fi card catalog %s unavailable, using defaults", catalog_path)
        return default_profiles()
    profiles = [
        profile
        for profile in (parse_profile(entry) for entry in extract_array_objects(content, CATALOG_KEY))
        if profile is not None
    ]
    if not profiles:
        _logger.warning("Wi-Fi card catalog %s has no usable entries, using defaults", catalog_path)
        return default_profiles()
    return profiles


def find_profile(
    profiles: Iterable[CardProfile],
    vendor_id: str,
    device_id: str,
    chipset: str,
) -> CardProfile | None:
    """Pick the best catalog entry for a vendor/device pair.

    An entry whose chipset equals ``chipset`` wins outright. Otherwise the first
    chipset-agnostic entry is used, then the first vendor/device match of any
    chipset.
    """

    wanted_chipset = chipset.upper()
    vendor_device_match: CardProfile | None = None
    generic_match: CardProfile | None = None
    for profile in profiles:
        if not profile.matches(vendor_id, device_id):
            continue
        if not profile.chipset:
            if generic_match is None:
                generic_match = profile
        elif profile.chipset.upper() == wanted_chipset:
            return profile
        if vendor_device_match is None:
            vendor_device_match = profile
    if generic_match is not None:
        return generic_match
    return vendor_device_match


__all__ = [
    "CATALOG_KEY",
    "CardProfile",
    "LEVEL_FALLBACKS",
    "POWER_MODE_FIXED",
    "POWER_MODE_MW",
    "default_profiles",
    "find_profile",
    "load_profiles",
    "normalize_chipset",
    "normalize_id",
    "parse_profile",
    "synthesize_levels",
]
