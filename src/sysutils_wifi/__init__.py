"""OpenHD SysUtils Wi-Fi card inventory and power-profile resolution."""

from typing import Any

from .cards import CardRecord, WifiInventory
from .config import SysUtilsConfig
from .version import APP_VERSION


def create_app(*args: Any, **kwargs: Any):
    from .app import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = ["APP_VERSION", "CardRecord", "SysUtilsConfig", "WifiInventory", "create_app"]
