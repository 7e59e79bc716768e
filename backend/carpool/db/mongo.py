import logging
from typing import List, Optional

import certifi
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from carpool.core.config import Settings
from carpool.core.errors import NotFoundError, ServerError
from carpool.db.store import RideStore, new_ride_id, utcnow
from carpool.schemas.ride import RideDraft, RideOffer

logger = logging.getLogger(__name__)


def mongo_client(url: str) -> AsyncIOMotorClient:
    if not url:
        raise RuntimeError("MONGO_URL not set. Create backend/.env with MONGO_URL=...")
    kwargs = {"tz_aware": True}
    # Atlas (SRV) connections need a CA bundle
    if url.startswith("mongodb+srv://"):
        kwargs["tlsCAFile"] = certifi.where()
    return AsyncIOMotorClient(url, **kwargs)


def _to_ride(doc: dict) -> RideOffer:
    doc = dict(doc)
    doc.pop("_id", None)
    doc["id"] = doc.pop("ride_id")
    return RideOffer.model_validate(doc)


class MongoRideStore(RideStore):
    def __init__(self, collection, client: Optional[AsyncIOMotorClient] = None):
        self.collection = collection
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoRideStore":
        client = mongo_client(settings.mongo_url)
        return cls(client[settings.mongo_db].rides, client=client)

    async def ensure_indexes(self) -> None:
        try:
            await self.collection.create_index([("ride_id", 1)], unique=True)
            await self.collection.create_index([("created_at", -1)])
        except PyMongoError as exc:
            raise ServerError(f"could not create ride indexes: {exc}") from exc

    async def ping(self) -> None:
        try:
            await self.collection.find_one({}, {"_id": 1})
        except PyMongoError as exc:
            raise ServerError(f"ride store unreachable: {exc}") from exc

    async def insert(self, draft: RideDraft) -> RideOffer:
        doc = draft.model_dump()
        doc["ride_id"] = new_ride_id()
        doc["created_at"] = utcnow()
        try:
            await self.collection.insert_one(doc)
        except PyMongoError as exc:
            raise ServerError(f"failed to add ride: {exc}") from exc
        return _to_ride(doc)

    async def list(self) -> List[RideOffer]:
        cursor = self.collection.find({}, {"_id": 0}).sort([("created_at", -1), ("_id", -1)])
        try:
            docs = await cursor.to_list(length=None)
        except PyMongoError as exc:
            raise ServerError(f"failed to fetch rides: {exc}") from exc
        return [_to_ride(doc) for doc in docs]

    async def get(self, ride_id: str) -> Optional[RideOffer]:
        try:
            doc = await self.collection.find_one({"ride_id": ride_id}, {"_id": 0})
        except PyMongoError as exc:
            raise ServerError(f"failed to fetch ride: {exc}") from exc
        return _to_ride(doc) if doc else None

    async def update_position(self, ride_id: str, lat: float, lng: float) -> RideOffer:
        try:
            updated = await self.collection.find_one_and_update(
                {"ride_id": ride_id},
                {"$set": {"current_lat": lat, "current_lng": lng}},
                projection={"_id": 0},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise ServerError(f"failed to update location: {exc}") from exc

        if not updated:
            raise NotFoundError("Ride not found")
        return _to_ride(updated)

    async def delete(self, ride_id: str) -> None:
        try:
            await self.collection.delete_one({"ride_id": ride_id})
        except PyMongoError as exc:
            raise ServerError(f"failed to delete ride: {exc}") from exc

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


def build_store(settings: Settings) -> RideStore:
    if settings.ride_store == "memory":
        from carpool.db.memory import InMemoryRideStore

        logger.warning("Using the in-memory ride store; rides are lost on restart")
        return InMemoryRideStore()
    if settings.ride_store != "mongo":
        raise RuntimeError(f"Unknown RIDE_STORE {settings.ride_store!r}, use 'mongo' or 'memory'")
    return MongoRideStore.from_settings(settings)
