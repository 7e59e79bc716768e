from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from carpool.core.errors import NotFoundError
from carpool.realtime.manager import RideRooms
from carpool.routers.deps import ws_ride_service, ws_rooms
from carpool.services.rides import RideService, position_message

router = APIRouter()


@router.websocket("/ws/rides/{ride_id}")
async def ride_ws(
    ws: WebSocket,
    ride_id: str,
    service: RideService = Depends(ws_ride_service),
    rooms: RideRooms = Depends(ws_rooms),
):
    await rooms.connect(ride_id, ws)
    try:
        # last known position first, then pushes as reports arrive
        try:
            ride = await service.get_ride(ride_id)
        except NotFoundError:
            ride = None
        if ride:
            await ws.send_json(position_message(ride))

        while True:
            # keep connection alive; client can send pings
            await ws.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        rooms.disconnect(ride_id, ws)
