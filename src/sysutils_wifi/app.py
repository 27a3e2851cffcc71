"""FastAPI application exposing the Wi-Fi inventory and RF relay."""
from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from .cards import WifiInventory
from .link_control import ControlClient, LinkControlRequest, OpenHDControlClient, relay_link_control
from .protocol import LINK_CONTROL_RESPONSE, WIFI_RESPONSE, WIFI_UPDATE_RESPONSE, serialise_cards
from .updates import ACTION_REFRESH, OverrideUpdate, apply_update
from .version import APP_VERSION


class WifiUpdatePayload(BaseModel):
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


class LinkControlPayload(BaseModel):
    interface: str | None = None
    frequency_mhz: int | None = None
    channel_width_mhz: int | None = None
    mcs_index: int | None = None
    tx_power_mw: int | None = None
    tx_power_index: int | None = None
    power_level: str | None = None


def create_app(
    inventory: WifiInventory | None = None,
    control_client: ControlClient | None = None,
) -> FastAPI:
    inventory = inventory or WifiInventory()
    if control_client is None:
        control_client = OpenHDControlClient(
            inventory.config.control_socket_path,
            timeout=inventory.config.control_timeout,
        )

    app = FastAPI(title="OpenHD SysUtils Wi-Fi", version=APP_VERSION)
    app.state.inventory = inventory
    app.state.control_client = control_client

    @app.get("/api/wifi/cards")
    async def get_wifi_cards() -> dict[str, object]:
        cards = await run_in_threadpool(inventory.cards)
        return {"type": WIFI_RESPONSE, "ok": True, "cards": serialise_cards(cards)}

    @app.get("/api/wifi/cards/{interface}")
    async def get_wifi_card(interface: str) -> dict[str, object]:
        card = await run_in_threadpool(inventory.card, interface)
        if card is None:
            raise HTTPException(status_code=404, detail="Wi-Fi interface not found")
        return card.to_dict()

    @app.get("/api/wifi/openhd")
    async def get_openhd_status() -> dict[str, bool]:
        present = await run_in_threadpool(inventory.has_openhd_wifibroadcast_cards)
        return {"openhd_wifibroadcast": present}

    @app.post("/api/wifi/update")
    async def update_wifi_overrides(payload: WifiUpdatePayload) -> dict[str, object]:
        update = OverrideUpdate(**payload.model_dump())
        result = await run_in_threadpool(apply_update, inventory, update)
        return {"type": WIFI_UPDATE_RESPONSE, **result.to_dict()}

    @app.post("/api/link/control")
    async def relay_link(payload: LinkControlPayload) -> dict[str, object]:
        request = LinkControlRequest(**payload.model_dump())
        result = await run_in_threadpool(
            relay_link_control,
            request,
            control_client,
            system_log=inventory.system_log,
        )
        return {"type": LINK_CONTROL_RESPONSE, **result.to_dict()}

    @app.get("/api/wifi/log")
    async def get_wifi_log(limit: int = 50, category: str | None = None) -> dict[str, object]:
        if limit <= 0:
            raise HTTPException(status_code=400, detail="limit must be positive")
        entries = inventory.system_log.tail(limit, category=category)
        return {"entries": [entry.to_dict() for entry in reversed(entries)]}

    return app


__all__ = ["LinkControlPayload", "WifiUpdatePayload", "create_app"]
