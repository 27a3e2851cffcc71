"""Command-line report of the detected Wi-Fi cards."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from .cards import CardRecord, WifiInventory
from .config import SysUtilsConfig
from .version import APP_VERSION


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the inventory CLI."""

    parser = argparse.ArgumentParser(
        prog="python -m sysutils_wifi.diagnostics",
        description="OpenHD SysUtils Wi-Fi card inventory",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit results as JSON for scripting.",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Resolve every configured path below this directory (for captured sysfs trees).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log identity resolution details to stderr.",
    )
    return parser


def collect_inventory(inventory: WifiInventory) -> dict[str, object]:
    cards = inventory.refresh()
    return {
        "version": APP_VERSION,
        "cards": [card.to_dict() for card in cards],
        "openhd_wifibroadcast": inventory.has_openhd_wifibroadcast_cards(),
    }


def _describe_power(card: CardRecord) -> str:
    if not card.power_mode:
        return "no profile"
    if card.power_mode == "FIXED":
        return "fixed power"
    parts = [f"mode {card.power_mode}"]
    if card.power_level:
        parts.append(f"level {card.power_level}")
    if card.tx_power:
        parts.append(f"tx {card.tx_power} mW")
    if card.tx_power_low or card.tx_power_high:
        parts.append(f"range {card.tx_power_low or '?'}-{card.tx_power_high or '?'} mW")
    return ", ".join(parts)


def run(argv: Sequence[str] | None = None, *, inventory: WifiInventory | None = None) -> int:
    """Execute the inventory CLI with *argv* arguments."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if inventory is None:
        config = SysUtilsConfig.from_env()
        if args.root:
            config = config.with_root(args.root)
        inventory = WifiInventory(config)

    payload = collect_inventory(inventory)
    if args.json:
        json.dump(payload, sys.stdout)
        sys.stdout.write("\n")
        return 0

    cards = inventory.cards()
    print(f"OpenHD SysUtils Wi-Fi inventory (version {APP_VERSION})")
    if not cards:
        print("No wireless interfaces were detected.")
        return 0
    for card in cards:
        label = card.card_name or "unknown card"
        state = " [disabled]" if card.disabled else ""
        print(f"{card.interface_name}: {label}{state}")
        print(f" - driver {card.driver_name or '?'} (phy {card.phy_index}), mac {card.mac or '?'}")
        print(f" - ids {card.vendor_id or '?'}:{card.device_id or '?'}")
        type_line = f" - type {card.effective_type} (detected {card.detected_type})"
        if card.override_type:
            type_line += f", override {card.override_type}"
        print(type_line)
        print(f" - power: {_describe_power(card)}")
    if payload["openhd_wifibroadcast"]:
        print("OpenHD wifibroadcast capable card present.")
    else:
        print("No enabled OpenHD wifibroadcast card found.")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by `python -m sysutils_wifi.diagnostics`."""

    return run(argv)


__all__ = ["build_parser", "collect_inventory", "main", "run"]


if __name__ == "__main__":  # pragma: no cover - module behaviour
    sys.exit(main())
