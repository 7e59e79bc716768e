import logging
import time
from typing import List, Optional, Tuple

from carpool.core.config import Coordinate
from carpool.core.errors import NotFoundError, ValidationError
from carpool.db.store import RideStore
from carpool.realtime.manager import RideRooms
from carpool.schemas.ride import TRAVEL_TIMES, PositionMessage, RideCreate, RideDraft, RideOffer

logger = logging.getLogger(__name__)


def derive_endpoints(travel_time: str, picked: Coordinate, hub: Coordinate) -> Tuple[Coordinate, Coordinate]:
    """Return (origin, destination). Morning commutes go to the hub, evening ones leave it."""
    if travel_time == "morning":
        return picked, hub
    return hub, picked


def _check_range(lat: float, lng: float):
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lng <= 180.0:
        raise ValidationError("coordinates out of range")


class RideService:
    def __init__(self, store: RideStore, hub: Coordinate, rooms: Optional[RideRooms] = None):
        self.store = store
        self.hub = hub
        self.rooms = rooms

    async def create(self, data: RideCreate) -> RideOffer:
        driver_name = (data.driver_name or "").strip()
        phone_number = (data.phone_number or "").strip()

        # falsy counts as missing, including seats=0 and a 0.0 coordinate
        if not (
            driver_name
            and phone_number
            and data.seats_available
            and data.travel_time
            and data.picked_lat
            and data.picked_lng
        ):
            raise ValidationError("missing required field")

        if data.seats_available < 1:
            raise ValidationError("seatsAvailable must be a positive integer")
        if data.travel_time not in TRAVEL_TIMES:
            raise ValidationError("travelTime must be 'morning' or 'evening'")
        _check_range(data.picked_lat, data.picked_lng)

        picked = Coordinate(data.picked_lat, data.picked_lng)
        origin, destination = derive_endpoints(data.travel_time, picked, self.hub)

        draft = RideDraft(
            driver_name=driver_name,
            phone_number=phone_number,
            seats_available=data.seats_available,
            travel_time=data.travel_time,
            origin_lat=origin.lat,
            origin_lng=origin.lng,
            destination_lat=destination.lat,
            destination_lng=destination.lng,
            current_lat=origin.lat,
            current_lng=origin.lng,
        )
        ride = await self.store.insert(draft)
        logger.info("Ride %s offered by %s (%s)", ride.id, ride.driver_name, ride.travel_time)
        return ride

    async def list_rides(self) -> List[RideOffer]:
        return await self.store.list()

    async def get_ride(self, ride_id: str) -> RideOffer:
        ride = await self.store.get(ride_id)
        if ride is None:
            raise NotFoundError("Ride not found")
        return ride

    async def report_position(self, ride_id: str, lat: Optional[float], lng: Optional[float]) -> RideOffer:
        # (0, 0) style values are rejected as absent; existing clients rely on this
        if not lat or not lng:
            raise ValidationError("missing coordinates")
        _check_range(lat, lng)

        ride = await self.store.update_position(ride_id, lat, lng)
        logger.debug("Ride %s now at (%s, %s)", ride_id, lat, lng)

        if self.rooms is not None:
            await self.rooms.broadcast(ride_id, position_message(ride))
        return ride

    async def delete(self, ride_id: str) -> None:
        await self.store.delete(ride_id)
        logger.info("Ride %s deleted", ride_id)


def position_message(ride: RideOffer, ts_ms: Optional[int] = None) -> dict:
    msg = PositionMessage(
        id=ride.id,
        current_lat=ride.current_lat,
        current_lng=ride.current_lng,
        ts=ts_ms if ts_ms is not None else int(time.time() * 1000),
    )
    return msg.model_dump(by_alias=True)
