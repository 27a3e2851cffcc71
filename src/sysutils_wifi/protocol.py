"""Request/response messages for the line-oriented SysUtils socket."""

from __future__ import annotations

import json
from typing import Iterable

from .cards import CardRecord, WifiInventory
from .document import extract_int_field, extract_string_field
from .link_control import ControlClient, LinkControlRequest, relay_link_control
from .updates import ACTION_REFRESH, OverrideUpdate, apply_update

WIFI_REQUEST = "sysutil.wifi.request"
WIFI_RESPONSE = "sysutil.wifi.response"
WIFI_UPDATE = "sysutil.wifi.update"
WIFI_UPDATE_RESPONSE = "sysutil.wifi.update.response"
LINK_CONTROL = "sysutil.link.control"
LINK_CONTROL_RESPONSE = "sysutil.link.control.response"

_UPDATE_FIELDS = (
    "override_type",
    "tx_power",
    "tx_power_high",
    "tx_power_low",
    "card_name",
    "power_level",
    "profile_vendor_id",
    "profile_device_id",
    "profile_chipset",
)
_LINK_INT_FIELDS = (
    "frequency_mhz",
    "channel_width_mhz",
    "mcs_index",
    "tx_power_mw",
    "tx_power_index",
)


def _encode(payload: dict[str, object]) -> str:
    return json.dumps(payload, separators=(",", ":")) + "\n"


def message_type(line: str) -> str | None:
    return extract_string_field(line, "type")


def serialise_cards(cards: Iterable[CardRecord]) -> list[dict[str, object]]:
    return [card.to_dict() for card in cards]


def build_wifi_response(inventory: WifiInventory) -> str:
    return _encode({"type": WIFI_RESPONSE, "ok": True, "cards": serialise_cards(inventory.cards())})


def parse_update(line: str) -> OverrideUpdate:
    values = {name: extract_string_field(line, name) for name in _UPDATE_FIELDS}
    action = extract_string_field(line, "action")
    return OverrideUpdate(
        action=ACTION_REFRESH if action is None else action,
        interface=extract_string_field(line, "interface"),
        **values,
    )


def handle_wifi_update(inventory: WifiInventory, line: str) -> str:
    result = apply_update(inventory, parse_update(line))
    return _encode({"type": WIFI_UPDATE_RESPONSE, **result.to_dict()})


def parse_link_control(line: str) -> LinkControlRequest:
    values = {name: extract_int_field(line, name) for name in _LINK_INT_FIELDS}
    return LinkControlRequest(
        interface=extract_string_field(line, "interface"),
        power_level=extract_string_field(line, "power_level"),
        **values,
    )


def handle_link_control(inventory: WifiInventory, line: str, client: ControlClient) -> str:
    result = relay_link_control(parse_link_control(line), client, system_log=inventory.system_log)
    return _encode({"type": LINK_CONTROL_RESPONSE, **result.to_dict()})


def handle_line(inventory: WifiInventory, line: str, client: ControlClient) -> str | None:
    """Dispatch one request line; ``None`` when the type is not ours."""

    kind = message_type(line)
    if kind == WIFI_REQUEST:
        return build_wifi_response(inventory)
    if kind == WIFI_UPDATE:
        return handle_wifi_update(inventory, line)
    if kind == LINK_CONTROL:
        return handle_link_control(inventory, line, client)
    return None


__all__ = [
    "LINK_CONTROL",
    "LINK_CONTROL_RESPONSE",
    "WIFI_REQUEST",
    "WIFI_RESPONSE",
    "WIFI_UPDATE",
    "WIFI_UPDATE_RESPONSE",
    "build_wifi_response",
    "handle_line",
    "handle_link_control",
    "handle_wifi_update",
    "parse_link_control",
    "parse_update",
]
