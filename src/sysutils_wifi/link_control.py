"""Relay RF link settings to the OpenHD control socket."""

from __future__ import annotations

import json
import logging
import socket
import time
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_CONTROL_SOCKET_PATH, DEFAULT_CONTROL_TIMEOUT
from .document import extract_bool_field, extract_string_field
from .system_log import SystemLog

MAX_REPLY_LENGTH = 4096
DISABLED_CHANNEL_WIDTH_MHZ = 40

NO_VALUES_MESSAGE = "No RF values provided."
CHANNEL_WIDTH_DISABLED_MESSAGE = "40 MHz channel width is disabled."
SOCKET_UNAVAILABLE_MESSAGE = "OpenHD control socket not available."
REJECTED_MESSAGE = "OpenHD rejected the RF update."

_logger = logging.getLogger(__name__)


class ControlClient:
    """Abstract transport to the RF control service."""

    def send(self, payload: str) -> str | None:  # pragma: no cover - interface only
        """Send one request line and return the reply line, or ``None``."""

        raise NotImplementedError


class OpenHDControlClient(ControlClient):
    """Talk to OpenHD over its Unix stream socket, one JSON line each way."""

    def __init__(
        self,
        socket_path: Path | str = DEFAULT_CONTROL_SOCKET_PATH,
        *,
        timeout: float = DEFAULT_CONTROL_TIMEOUT,
    ) -> None:
        self._socket_path = Path(socket_path)
        self._timeout = timeout

    @property
    def socket_path(self) -> Path:
        return self._socket_path

    def send(self, payload: str) -> str | None:
        if not self._socket_path.exists():
            return None
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as conn:
                conn.settimeout(self._timeout)
                conn.connect(str(self._socket_path))
                conn.sendall(payload.encode("utf-8"))
                return self._read_line(conn)
        except OSError as exc:
            _logger.debug("OpenHD control socket error: %s", exc)
            return None

    def _read_line(self, conn: socket.socket) -> str | None:
        deadline = time.monotonic() + self._timeout
        buffer = b""
        while len(buffer) < MAX_REPLY_LENGTH:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            conn.settimeout(remaining)
            try:
                chunk = conn.recv(256)
            except socket.timeout:
                return None
            if not chunk:
                return None
            buffer += chunk
            newline = buffer.find(b"\n")
            if newline >= 0:
                return buffer[:newline].decode("utf-8", errors="replace")
        return None


@dataclass(slots=True)
class LinkControlRequest:
    """RF parameters to apply. ``None`` means the value was not supplied."""

    interface: str | None = None
    frequency_mhz: int | None = None
    channel_width_mhz: int | None = None
    mcs_index: int | None = None
    tx_power_mw: int | None = None
    tx_power_index: int | None = None
    power_level: str | None = None

    def has_values(self) -> bool:
        if self.interface or (self.power_level and self.power_level.strip()):
            return True
        return any(
            value is not None
            for value in (
                self.frequency_mhz,
                self.channel_width_mhz,
                self.mcs_index,
                self.tx_power_mw,
                self.tx_power_index,
            )
        )

    def to_payload(self) -> str:
        """Return the newline-terminated intent sent to OpenHD."""

        intent: dict[str, object] = {"type": "openhd.link.control"}
        if self.interface:
            intent["interface"] = self.interface
        for name in ("frequency_mhz", "channel_width_mhz", "mcs_index", "tx_power_mw", "tx_power_index"):
            value = getattr(self, name)
            if value is not None:
                intent[name] = int(value)
        level = (self.power_level or "").strip()
        if level:
            intent["power_level"] = level
        return json.dumps(intent, separators=(",", ":")) + "\n"


@dataclass(slots=True)
class LinkControlResult:
    ok: bool
    message: str = ""

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"ok": self.ok}
        if self.message:
            payload["message"] = self.message
        return payload


def relay_link_control(
    request: LinkControlRequest,
    client: ControlClient,
    *,
    system_log: SystemLog | None = None,
) -> LinkControlResult:
    """Validate ``request`` and forward it to the control service."""

    _logger.info(
        "link.control request iface=%s freq=%s width=%s mcs=%s tx_mw=%s tx_idx=%s level=%s",
        request.interface or "",
        request.frequency_mhz,
        request.channel_width_mhz,
        request.mcs_index,
        request.tx_power_mw,
        request.tx_power_index,
        request.power_level or "",
    )
    if not request.has_values():
        result = LinkControlResult(ok=False, message=NO_VALUES_MESSAGE)
    elif request.channel_width_mhz == DISABLED_CHANNEL_WIDTH_MHZ:
        result = LinkControlResult(ok=False, message=CHANNEL_WIDTH_DISABLED_MESSAGE)
    else:
        reply = client.send(request.to_payload())
        if reply is None:
            _logger.warning("link.control: no response from OpenHD")
            result = LinkControlResult(ok=False, message=SOCKET_UNAVAILABLE_MESSAGE)
        else:
            _logger.info("link.control OpenHD response: %s", reply)
            ok = extract_bool_field(reply, "ok") or False
            message = extract_string_field(reply, "message") or ""
            if not ok and not message:
                message = REJECTED_MESSAGE
            result = LinkControlResult(ok=ok, message=message)
    if system_log is not None:
        system_log.record(
            "link",
            "link.control",
            result.message or ("RF update applied" if result.ok else "RF update failed"),
            metadata={"interface": request.interface or None, "ok": result.ok},
        )
    return result


__all__ = [
    "ControlClient",
    "LinkControlRequest",
    "LinkControlResult",
    "OpenHDControlClient",
    "relay_link_control",
]
