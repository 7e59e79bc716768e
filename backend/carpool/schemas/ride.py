from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, StrictInt
from pydantic.alias_generators import to_camel

TravelTime = Literal["morning", "evening"]
TRAVEL_TIMES = ("morning", "evening")


def _no_bool(value):
    # JSON true/false must not turn into 1.0/0.0
    if isinstance(value, bool):
        raise ValueError("expected a number")
    return value


Degrees = Annotated[float, BeforeValidator(_no_bool)]


class CamelModel(BaseModel):
    # camelCase on the wire, snake_case still accepted from older clients
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RideDraft(CamelModel):
    """A validated ride that has not been stored yet (no id, no createdAt)."""

    driver_name: str
    phone_number: str
    seats_available: int
    travel_time: TravelTime
    origin_lat: float
    origin_lng: float
    destination_lat: float
    destination_lng: float
    current_lat: float
    current_lng: float


class RideOffer(RideDraft):
    id: str
    created_at: datetime


class RideCreate(CamelModel):
    driver_name: Optional[str] = None
    phone_number: Optional[str] = None
    seats_available: Optional[StrictInt] = None
    travel_time: Optional[str] = None
    picked_lat: Optional[Degrees] = None
    picked_lng: Optional[Degrees] = None


class LocationUpdate(CamelModel):
    current_lat: Optional[Degrees] = None
    current_lng: Optional[Degrees] = None


class PositionMessage(CamelModel):
    """Pushed to websocket subscribers of a ride."""

    id: str
    current_lat: float
    current_lng: float
    ts: int
