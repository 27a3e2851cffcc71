from __future__ import annotations

import pytest

from sysutils_wifi.sysfs import (
    HardwareIdentity,
    VendorDevice,
    driver_to_type,
    extract_driver_name,
    is_openhd_wifibroadcast_type,
    list_wireless_interfaces,
    resolve_identity,
    walk_vendor_device,
)


@pytest.mark.parametrize(
    ("driver", "expected"),
    [
        ("rtl88x2eu_ohd", "OPENHD_RTL_88X2EU"),
        ("RTL88XXAU_OHD", "OPENHD_RTL_88X2AU"),
        ("rtl88x2au_ohd", "OPENHD_RTL_88X2CU"),
        ("rtl8852bu_ohd", "OPENHD_RTL_8852BU"),
        ("cnss_pci", "QUALCOMM"),
        ("ath9k_htc", "ATHEROS"),
        ("brcmfmac", "BROADCOM"),
        ("rtl88xxau", "RTL_88X2AU"),
        ("mt7921u", "MT_7921u"),
        ("", "UNKNOWN"),
        ("e1000e", "UNKNOWN"),
    ],
)
def test_driver_to_type(driver: str, expected: str) -> None:
    assert driver_to_type(driver) == expected


def test_openhd_type_prefix() -> None:
    assert is_openhd_wifibroadcast_type("OPENHD_RTL_88X2BU")
    assert is_openhd_wifibroadcast_type(" openhd_custom ")
    assert not is_openhd_wifibroadcast_type("RTL_88X2AU")


def test_extract_driver_name() -> None:
    assert extract_driver_name("DEVTYPE=usb_interface\nDRIVER=rtl88x2bu_ohd\n") == "rtl88x2bu_ohd"
    assert extract_driver_name("DEVTYPE=wlan\n") is None


def test_vendor_device_keeps_first_values() -> None:
    ids = VendorDevice()
    ids.offer("0bda", None)
    ids.offer("148f", "a81a")
    assert (ids.vendor_id, ids.device_id) == ("0x0BDA", "0xA81A")
    assert ids.complete


def test_resolve_usb_identity(sysfs) -> None:
    sysfs.add_usb_card("wlan0", phy_index=3, mac="00:c0:ca:00:00:01")
    identity = resolve_identity("wlan0", sysfs.net_root)
    assert identity == HardwareIdentity(
        interface_name="wlan0",
        driver_name="rtl88x2eu_ohd",
        phy_index=3,
        mac="00:c0:ca:00:00:01",
        vendor_id="0x0BDA",
        device_id="0xA81A",
    )


def test_resolve_identity_from_modalias(sysfs) -> None:
    sysfs.add_usb_card(
        "wlan0",
        vendor=None,
        product=None,
        modalias="usb:v0BDAp8812d0000dc00dsc00dp00icFFiscFFipFFin00",
    )
    identity = resolve_identity("wlan0", sysfs.net_root)
    assert (identity.vendor_id, identity.device_id) == ("0x0BDA", "0x8812")


def test_resolve_pci_identity_from_attributes(sysfs) -> None:
    sysfs.add_pci_card("wlan1", vendor="0x168c", device="0x002e")
    identity = resolve_identity("wlan1", sysfs.net_root)
    assert identity.driver_name == "ath9k"
    assert (identity.vendor_id, identity.device_id) == ("0x168C", "0x002E")
    assert identity.phy_index == 1


def test_resolve_pci_identity_from_uevent(sysfs) -> None:
    sysfs.add_pci_card("wlan1", driver="iwlwifi", uevent_extra="PCI_ID=8086:2723\n")
    identity = resolve_identity("wlan1", sysfs.net_root)
    assert (identity.vendor_id, identity.device_id) == ("0x8086", "0x2723")


def test_resolve_identity_without_sources(sysfs) -> None:
    sysfs.add_usb_card("wlan0", vendor=None, product=None, phy_index="garbage")
    identity = resolve_identity("wlan0", sysfs.net_root)
    assert identity.vendor_id == ""
    assert identity.device_id == ""
    assert identity.phy_index == -1
    assert identity.driver_name == "rtl88x2eu_ohd"


def test_legacy_alias_device_directory(sysfs) -> None:
    sysfs.add_pci_card("wifi0", vendor="0x168c", device="0x0013")
    ath0 = sysfs.net_root / "ath0"
    ath0.mkdir()
    (ath0 / "phy80211").mkdir()
    identity = resolve_identity("ath0", sysfs.net_root)
    assert identity.driver_name == "ath9k"
    assert (identity.vendor_id, identity.device_id) == ("0x168C", "0x0013")
    assert identity.mac == ""


def test_walk_vendor_device_climbs_parents(sysfs) -> None:
    function = sysfs.add_usb_card("wlan0")
    ids = walk_vendor_device(function)
    assert (ids.vendor_id, ids.device_id) == ("0x0BDA", "0xA81A")


def test_list_wireless_interfaces(sysfs) -> None:
    sysfs.add_usb_card("wlan1")
    sysfs.add_usb_card("wlan0")
    sysfs.add_plain_interface("eth0")
    sysfs.add_plain_interface("lo")
    assert list_wireless_interfaces(sysfs.net_root) == ["wlan0", "wlan1"]


def test_list_wireless_interfaces_missing_root(tmp_path) -> None:
    with pytest.raises(OSError):
        list_wireless_interfaces(tmp_path / "nope")
