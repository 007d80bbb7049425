import asyncio
import logging
from typing import Set
from fastapi import WebSocket

logger = logging.getLogger(__name__)

class UplinkBroadcaster:
    """Live feed for decoded uplinks.

    Every message is the ``{"data", "warnings"}`` dict returned by a decode,
    plus ``sensor_id``/``ts`` for raw ingests. Clients whose send fails are
    dropped; the remaining clients keep receiving.
    """

    def __init__(self):
        self.clients: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, ws: WebSocket):
        await ws.accept()
        async with self._lock:
            self.clients.add(ws)
        logger.debug("Uplink feed client connected (%d total)", len(self.clients))

    async def disconnect(self, ws: WebSocket):
        async with self._lock:
            self.clients.discard(ws)

    async def broadcast_json(self, uplink: dict) -> int:
        """Send one decoded uplink to every client; return how many received it."""

        async with self._lock:
            targets = list(self.clients)
        if not targets:
            return 0

        dropped = []
        for ws in targets:
            try:
                await ws.send_json(uplink)
            except Exception:
                dropped.append(ws)
        for ws in dropped:
            await self.disconnect(ws)

        delivered = len(targets) - len(dropped)
        logger.debug(
            "Uplink from %s sent to %d feed client(s), %d dropped",
            uplink.get("sensor_id") or "unknown sensor",
            delivered,
            len(dropped),
        )
        return delivered

broadcaster = UplinkBroadcaster()
