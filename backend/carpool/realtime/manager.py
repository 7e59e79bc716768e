import logging
from typing import Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class RideRooms:
    """Websocket subscribers grouped by ride id."""

    def __init__(self):
        self.rooms: Dict[str, Set[WebSocket]] = {}

    async def connect(self, ride_id: str, ws: WebSocket):
        await ws.accept()
        self.rooms.setdefault(ride_id, set()).add(ws)

    def disconnect(self, ride_id: str, ws: WebSocket):
        if ride_id in self.rooms:
            self.rooms[ride_id].discard(ws)
            if not self.rooms[ride_id]:
                self.rooms.pop(ride_id, None)

    def subscribers(self, ride_id: str) -> int:
        return len(self.rooms.get(ride_id, ()))

    async def broadcast(self, ride_id: str, message: dict):
        for ws in list(self.rooms.get(ride_id, set())):
            try:
                await ws.send_json(message)
            except Exception:
                logger.debug("Dropping dead subscriber for ride %s", ride_id)
                self.disconnect(ride_id, ws)
