from fastapi import Request, WebSocket

from carpool.realtime.manager import RideRooms
from carpool.services.rides import RideService


def get_ride_service(request: Request) -> RideService:
    return request.app.state.ride_service


def ws_ride_service(websocket: WebSocket) -> RideService:
    return websocket.app.state.ride_service


def ws_rooms(websocket: WebSocket) -> RideRooms:
    return websocket.app.state.rooms
