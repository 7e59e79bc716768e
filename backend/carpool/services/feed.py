"""Presentation-side helpers over a feed snapshot. None of these touch the store."""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

from carpool.schemas.ride import RideOffer


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two lat/lon points."""

    r = 6_371_000.0  # mean Earth radius in meters
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return r * c


def filter_rides(
    rides: Iterable[RideOffer],
    travel_time: Optional[str] = None,
    min_seats: Optional[int] = None,
) -> List[RideOffer]:
    """Keep feed order, drop rides that don't match."""

    out = []
    for ride in rides:
        if travel_time and ride.travel_time != travel_time:
            continue
        if min_seats is not None and ride.seats_available < min_seats:
            continue
        out.append(ride)
    return out


def nearest_rides(
    rides: Iterable[RideOffer],
    lat: float,
    lng: float,
    limit: Optional[int] = None,
) -> List[RideOffer]:
    """Rides ordered by distance of their live position from (lat, lng)."""

    ranked = sorted(rides, key=lambda r: haversine_m(lat, lng, r.current_lat, r.current_lng))
    return ranked if limit is None else ranked[:limit]


@dataclass(frozen=True)
class FeedStats:
    total_rides: int
    morning: int
    evening: int
    seats: int


def feed_stats(rides: Iterable[RideOffer]) -> FeedStats:
    """Counts shown next to the map: rides per commute direction and seats on offer."""

    rides = list(rides)
    return FeedStats(
        total_rides=len(rides),
        morning=sum(1 for r in rides if r.travel_time == "morning"),
        evening=sum(1 for r in rides if r.travel_time == "evening"),
        seats=sum(r.seats_available for r in rides),
    )
