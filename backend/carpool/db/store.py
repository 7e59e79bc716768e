from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from carpool.schemas.ride import RideDraft, RideOffer


def new_ride_id() -> str:
    return f"ride-{uuid4().hex}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RideStore(ABC):
    """Table of ride offers keyed by ride id.

    Implementations assign ``id`` and ``created_at`` on insert and apply
    ``update_position`` as a single atomic write of both current fields.
    """

    @abstractmethod
    async def insert(self, draft: RideDraft) -> RideOffer: ...

    @abstractmethod
    async def list(self) -> List[RideOffer]:
        """All rides, newest ``created_at`` first."""

    @abstractmethod
    async def get(self, ride_id: str) -> Optional[RideOffer]: ...

    @abstractmethod
    async def update_position(self, ride_id: str, lat: float, lng: float) -> RideOffer:
        """Overwrite current_lat/current_lng. Raises NotFoundError for an unknown id."""

    @abstractmethod
    async def delete(self, ride_id: str) -> None: ...

    async def ensure_indexes(self) -> None:
        return None

    async def ping(self) -> None:
        return None

    def close(self) -> None:
        return None
