from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from sysutils_wifi.cards import WifiInventory
from sysutils_wifi.config import SysUtilsConfig
from sysutils_wifi.system_log import SystemLog


class FakeSysfs:
    """Builds a miniature ``/sys`` tree below a temporary directory."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.net_root = root / "class" / "net"
        self.devices = root / "devices"
        self.net_root.mkdir(parents=True)
        self.devices.mkdir(parents=True)

    def add_usb_card(
        self,
        interface: str,
        *,
        driver: str = "rtl88x2eu_ohd",
        vendor: str | None = "0bda",
        product: str | None = "a81a",
        phy_index: int | str | None = 0,
        mac: str = "00:11:22:33:44:55",
        modalias: str | None = None,
        bus: str = "usb1",
    ) -> Path:
        port = self.devices / bus / f"1-{len(list(self.net_root.iterdir())) + 1}"
        function = port / f"{port.name}:1.0"
        function.mkdir(parents=True)
        if vendor is not None:
            (port / "idVendor").write_text(f"{vendor}\n")
        if product is not None:
            (port / "idProduct").write_text(f"{product}\n")
        (function / "uevent").write_text(f"DEVTYPE=usb_interface\nDRIVER={driver}\nINTERFACE=255/255/255\n")
        if modalias is not None:
            (function / "modalias").write_text(f"{modalias}\n")
        self._link_interface(interface, function, phy_index=phy_index, mac=mac)
        return function

    def add_pci_card(
        self,
        interface: str,
        *,
        driver: str = "ath9k",
        uevent_extra: str = "",
        vendor: str | None = None,
        device: str | None = None,
        phy_index: int | str | None = 1,
        mac: str = "aa:bb:cc:dd:ee:ff",
    ) -> Path:
        function = self.devices / "pci0000:00" / f"0000:00:0{len(list(self.net_root.iterdir()))}.0"
        function.mkdir(parents=True)
        (function / "uevent").write_text(f"DRIVER={driver}\n{uevent_extra}")
        if vendor is not None:
            (function / "vendor").write_text(f"{vendor}\n")
        if device is not None:
            (function / "device").write_text(f"{device}\n")
        self._link_interface(interface, function, phy_index=phy_index, mac=mac)
        return function

    def add_plain_interface(self, interface: str) -> Path:
        path = self.net_root / interface
        path.mkdir(parents=True)
        (path / "address").write_text("de:ad:be:ef:00:01\n")
        return path

    def _link_interface(
        self,
        interface: str,
        function: Path,
        *,
        phy_index: int | str | None,
        mac: str,
    ) -> None:
        iface_dir = self.net_root / interface
        iface_dir.mkdir(parents=True)
        (iface_dir / "device").symlink_to(function, target_is_directory=True)
        phy_dir = iface_dir / "phy80211"
        phy_dir.mkdir()
        if phy_index is not None:
            (phy_dir / "index").write_text(f"{phy_index}\n")
        (iface_dir / "address").write_text(f"{mac}\n")


@pytest.fixture()
def sysfs(tmp_path: Path) -> FakeSysfs:
    return FakeSysfs(tmp_path / "sys")


@pytest.fixture()
def config(tmp_path: Path, sysfs: FakeSysfs) -> SysUtilsConfig:
    data_dir = tmp_path / "share"
    return SysUtilsConfig(
        overrides_path=data_dir / "wifi_overrides.conf",
        tx_power_overrides_path=data_dir / "wifi_txpower.conf",
        cards_path=data_dir / "wifi_cards.json",
        net_root=sysfs.net_root,
        control_socket_path=tmp_path / "openhd_ctrl.sock",
    )


@pytest.fixture()
def make_inventory(config: SysUtilsConfig) -> Callable[..., WifiInventory]:
    def factory() -> WifiInventory:
        return WifiInventory(config, system_log=SystemLog(None))

    return factory
