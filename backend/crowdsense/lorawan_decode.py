# lorawan_decode.py
# Unpack the 10-byte crowd-sensor uplink (BLE/WiFi counts, crowd level, beacon, environment).

from __future__ import annotations
import base64
import binascii
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Sequence

CROWD_LEVELS = ("CALM", "MODERATE", "CROWDED")
ENVIRONMENTS = ("STATIC", "MOBILE", "UNKNOWN")

FULL_LENGTH = 10
MIN_LENGTH = 7

WARN_TOO_SHORT = "Payload too short: fewer than 7 bytes - unexpected payload"
WARN_SHORT = "Short payload detected (7 bytes) - extended fields defaulted"

RSSI_DEFAULT = -128
ENVIRONMENT_DEFAULT = 2


@dataclass(frozen=True)
class DecodedReading:
    ble_count: int
    wifi_count: int
    total_count: int
    crowd_level: int
    crowd_level_text: str
    beacon_detected: bool
    beacon_rssi: int
    environment_type: int
    environment_text: str

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DecodeResult:
    data: DecodedReading
    warnings: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {"data": self.data.as_dict(), "warnings": list(self.warnings)}


def _coerce(value: Any) -> int:
    try:
        return int(value) & 0xFF
    except (TypeError, ValueError, OverflowError):
        return 0


def _byte_at(payload: Sequence[Any], idx: int, default: int = 0) -> int:
    return _coerce(payload[idx]) if len(payload) > idx else default


def _u16_at(payload: Sequence[Any], idx: int) -> int:
    # Both bytes must be present; a lone high byte is not a partial value.
    if len(payload) > idx + 1:
        return (_coerce(payload[idx]) << 8) | _coerce(payload[idx + 1])
    return 0


def _to_int8(value: int) -> int:
    return value - 256 if value > 127 else value


def _lookup(table: Sequence[str], code: int) -> str:
    return table[code] if 0 <= code < len(table) else "UNKNOWN"


def _length_warnings(length: int) -> tuple[str, ...]:
    if length < MIN_LENGTH:
        return (WARN_TOO_SHORT,)
    if length < FULL_LENGTH:
        return (WARN_SHORT,)
    return ()


def decode(payload: Sequence[Any] | bytes | None) -> DecodeResult:
    """
    Payload order (10 bytes, big endian):
      [ble u16][wifi u16][total u16][crowd u8][beacon u8][rssi i8][env u8]
    Missing trailing bytes fall back to defaults; one length warning at most.
    """
    raw = payload if payload is not None else b""

    crowd_level = _byte_at(raw, 6, 0)
    environment_type = _byte_at(raw, 9, ENVIRONMENT_DEFAULT)
    rssi = _to_int8(_byte_at(raw, 8)) if len(raw) > 8 else RSSI_DEFAULT

    reading = DecodedReading(
        ble_count=_u16_at(raw, 0),
        wifi_count=_u16_at(raw, 2),
        total_count=_u16_at(raw, 4),
        crowd_level=crowd_level,
        crowd_level_text=_lookup(CROWD_LEVELS, crowd_level),
        beacon_detected=_byte_at(raw, 7, 0) == 1,
        beacon_rssi=rssi,
        environment_type=environment_type,
        environment_text=_lookup(ENVIRONMENTS, environment_type),
    )
    return DecodeResult(data=reading, warnings=_length_warnings(len(raw)))


def decode_uplink(uplink: Mapping[str, Any] | None) -> dict[str, Any]:
    """Network-server formatter entry point: ``{"bytes": [...], "fPort": ..}`` in, ``{"data", "warnings"}`` out."""

    payload = (uplink or {}).get("bytes") or []
    return decode(payload).as_dict()


def payload_from_hex(text: str) -> bytes:
    cleaned = "".join((text or "").split())
    if cleaned[:2].lower() == "0x":
        cleaned = cleaned[2:]
    try:
        return bytes.fromhex(cleaned)
    except ValueError as exc:
        raise ValueError(f"Invalid hex payload: {exc}") from exc


def payload_from_base64(text: str) -> bytes:
    try:
        return base64.b64decode((text or "").strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid base64 payload: {exc}") from exc


def to_hex(payload: bytes) -> str:
    return bytes(payload).hex().upper()
