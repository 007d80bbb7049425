import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Header, HTTPException, Request, WebSocket, WebSocketDisconnect

from ..config import load_settings
from ..lorawan_decode import (
    DecodeResult,
    decode,
    payload_from_base64,
    payload_from_hex,
    to_hex,
)
from ..schemas import RawUplinkOut, UplinkIn, UplinkOut
from ..ws import broadcaster

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uplinks"])


def _parse_iso_datetime(value: str | None, field_name: str) -> datetime | None:
    if not value:
        return None
    try:
        normalized = value.strip()
        if not normalized:
            return None
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        return datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {field_name}. Use ISO-8601 format.") from exc


def _payload_from(body: UplinkIn) -> bytes | list[int]:
    # frm_payload wins over hex, hex wins over the raw byte list
    try:
        if body.frm_payload is not None:
            return payload_from_base64(body.frm_payload)
        if body.hex is not None:
            return payload_from_hex(body.hex)
    except ValueError as exc:
        logger.info("Rejected uplink: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return body.bytes


def _log_warnings(result: DecodeResult, payload: Any, sensor_id: str | None = None) -> None:
    if not result.warnings or not load_settings().log_payload_warnings:
        return
    try:
        raw_hex = to_hex(bytes(b & 0xFF for b in payload))
    except TypeError:
        raw_hex = "?"
    for warning in result.warnings:
        logger.warning("Uplink %s from %s: %s", raw_hex, sensor_id or "unknown sensor", warning)


async def _publish(message: dict) -> None:
    if not load_settings().broadcast_uplinks:
        return
    await broadcaster.broadcast_json(message)


@router.post("/decode", response_model=UplinkOut)
async def decode_json(body: UplinkIn):
    payload = _payload_from(body)
    result = decode(payload)
    _log_warnings(result, payload)

    out = result.as_dict()
    await _publish(out)
    return out


@router.post("/ingest/lorawan/raw", response_model=RawUplinkOut)
async def ingest_raw(
    request: Request,
    x_sensor_id: str | None = Header(default=None),
    x_timestamp: str | None = Header(default=None),
):
    ts = _parse_iso_datetime(x_timestamp, "X-Timestamp")
    payload = await request.body()
    result = decode(payload)
    _log_warnings(result, payload, x_sensor_id)

    out = result.as_dict()
    out["sensor_id"] = x_sensor_id
    out["ts"] = ts
    await _publish({**out, "ts": ts.isoformat() if ts else None})
    return out


@router.websocket("/ws/uplinks")
async def uplink_feed(ws: WebSocket):
    await broadcaster.connect(ws)
    try:
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await broadcaster.disconnect(ws)
