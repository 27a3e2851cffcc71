from __future__ import annotations

import json

from sysutils_wifi.link_control import ControlClient
from sysutils_wifi.protocol import (
    LINK_CONTROL_RESPONSE,
    WIFI_RESPONSE,
    WIFI_UPDATE_RESPONSE,
    handle_line,
    parse_link_control,
    parse_update,
)


class RecordingClient(ControlClient):
    def __init__(self, reply: str | None = '{"ok":true}') -> None:
        self.reply = reply
        self.sent: list[str] = []

    def send(self, payload: str) -> str | None:
        self.sent.append(payload)
        return self.reply


def test_wifi_request_lists_cards(sysfs, make_inventory) -> None:
    sysfs.add_usb_card("wlan0")
    reply = handle_line(make_inventory(), '{"type":"sysutil.wifi.request"}', RecordingClient())
    assert reply is not None and reply.endswith("\n")
    payload = json.loads(reply)
    assert payload["type"] == WIFI_RESPONSE
    assert payload["ok"] is True
    assert payload["cards"][0]["interface"] == "wlan0"
    assert payload["cards"][0]["type"] == "OPENHD_RTL_88X2EU"
    assert payload["cards"][0]["tx_power_high"] == "1000"


def test_wifi_update_round_trip(sysfs, make_inventory) -> None:
    sysfs.add_usb_card("wlan0")
    inventory = make_inventory()
    line = json.dumps(
        {
            "type": "sysutil.wifi.update",
            "action": "set",
            "interface": "wlan0",
            "power_level": "HIGH",
        }
    )
    payload = json.loads(handle_line(inventory, line, RecordingClient()))
    assert payload["type"] == WIFI_UPDATE_RESPONSE
    assert payload["ok"] is True
    assert payload["action"] == "set"
    assert payload["cards"][0]["tx_power"] == "1000"


def test_wifi_update_failure_omits_cards(make_inventory) -> None:
    line = '{"type":"sysutil.wifi.update","action":"bogus"}'
    payload = json.loads(handle_line(make_inventory(), line, RecordingClient()))
    assert payload == {"type": WIFI_UPDATE_RESPONSE, "ok": False, "action": "bogus"}

    line = '{"type":"sysutil.wifi.update","action":""}'
    payload = json.loads(handle_line(make_inventory(), line, RecordingClient()))
    assert payload == {"type": WIFI_UPDATE_RESPONSE, "ok": False, "action": ""}


def test_parse_update_defaults_to_refresh() -> None:
    update = parse_update('{"type":"sysutil.wifi.update"}')
    assert update.action == "refresh"
    assert update.interface is None
    assert update.tx_power is None

    update = parse_update('{"type":"sysutil.wifi.update","action":"set","tx_power":""}')
    assert update.tx_power == ""

    assert parse_update('{"type":"sysutil.wifi.update","action":""}').action == ""


def test_parse_link_control() -> None:
    request = parse_link_control(
        '{"type":"sysutil.link.control","interface":"wlan0","frequency_mhz":5745,"mcs_index":"3"}'
    )
    assert request.interface == "wlan0"
    assert request.frequency_mhz == 5745
    assert request.mcs_index == 3
    assert request.channel_width_mhz is None


def test_link_control_dispatch(make_inventory) -> None:
    client = RecordingClient('{"ok":false,"message":"busy"}')
    line = '{"type":"sysutil.link.control","channel_width_mhz":20}'
    payload = json.loads(handle_line(make_inventory(), line, client))
    assert payload == {"type": LINK_CONTROL_RESPONSE, "ok": False, "message": "busy"}
    assert len(client.sent) == 1


def test_unrelated_messages_are_ignored(make_inventory) -> None:
    client = RecordingClient()
    assert handle_line(make_inventory(), '{"type":"sysutil.video.request"}', client) is None
    assert handle_line(make_inventory(), "not json", client) is None
    assert client.sent == []
