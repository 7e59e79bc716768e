import asyncio
import itertools
from typing import Dict, List, Optional, Tuple

from carpool.core.errors import NotFoundError
from carpool.db.store import RideStore, new_ride_id, utcnow
from carpool.schemas.ride import RideDraft, RideOffer

# -----------------------------
# In-memory ride table
# -----------------------------
# Volatile: resets when the process restarts. Used for local demos
# (RIDE_STORE=memory) and tests.


class InMemoryRideStore(RideStore):
    def __init__(self):
        self._rows: Dict[str, Tuple[int, RideOffer]] = {}
        self._seq = itertools.count()
        self._lock = asyncio.Lock()

    async def insert(self, draft: RideDraft) -> RideOffer:
        async with self._lock:
            ride_id = new_ride_id()
            while ride_id in self._rows:
                ride_id = new_ride_id()
            ride = RideOffer(**draft.model_dump(), id=ride_id, created_at=utcnow())
            self._rows[ride_id] = (next(self._seq), ride)
            return ride

    async def list(self) -> List[RideOffer]:
        async with self._lock:
            rows = sorted(
                self._rows.values(),
                key=lambda row: (row[1].created_at, row[0]),
                reverse=True,
            )
            return [ride for _, ride in rows]

    async def get(self, ride_id: str) -> Optional[RideOffer]:
        row = self._rows.get(ride_id)
        return row[1] if row else None

    async def update_position(self, ride_id: str, lat: float, lng: float) -> RideOffer:
        async with self._lock:
            row = self._rows.get(ride_id)
            if row is None:
                raise NotFoundError("Ride not found")
            seq, ride = row
            updated = ride.model_copy(update={"current_lat": lat, "current_lng": lng})
            self._rows[ride_id] = (seq, updated)
            return updated

    async def delete(self, ride_id: str) -> None:
        async with self._lock:
            self._rows.pop(ride_id, None)
