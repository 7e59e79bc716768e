import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo import ReturnDocument
from pymongo.errors import ServerSelectionTimeoutError

from carpool.core.config import Settings
from carpool.core.errors import NotFoundError, ServerError
from carpool.db.memory import InMemoryRideStore
from carpool.db.mongo import MongoRideStore, build_store
from carpool.schemas.ride import RideDraft


def run(coro):
    return asyncio.run(coro)


def draft(name="Asha"):
    return RideDraft(
        driver_name=name,
        phone_number="+911234567890",
        seats_available=2,
        travel_time="morning",
        origin_lat=17.40,
        origin_lng=78.40,
        destination_lat=17.3805,
        destination_lng=78.3824,
        current_lat=17.40,
        current_lng=78.40,
    )


def mongo_doc(ride_id="ride-1", **extra):
    doc = draft().model_dump()
    doc.update(ride_id=ride_id, created_at=datetime(2026, 1, 5, 8, 30, tzinfo=timezone.utc), _id="oid")
    doc.update(extra)
    return doc


# -----------------------------
# In-memory store
# -----------------------------
def test_memory_insert_assigns_unique_ids():
    store = InMemoryRideStore()
    rides = [run(store.insert(draft(str(i)))) for i in range(20)]
    assert len({r.id for r in rides}) == 20


def test_memory_list_newest_first():
    store = InMemoryRideStore()
    ids = [run(store.insert(draft(str(i)))).id for i in range(5)]

    listed = run(store.list())

    assert [r.id for r in listed] == list(reversed(ids))
    assert all(a.created_at >= b.created_at for a, b in zip(listed, listed[1:]))


def test_memory_update_unknown_raises():
    store = InMemoryRideStore()
    with pytest.raises(NotFoundError):
        run(store.update_position("ride-nope", 1.0, 2.0))
    assert run(store.list()) == []


def test_memory_concurrent_updates_keep_both_fields_together():
    store = InMemoryRideStore()
    ride = run(store.insert(draft()))

    async def burst():
        await asyncio.gather(*(store.update_position(ride.id, 10.0 + i, 20.0 + i) for i in range(50)))
        return await store.get(ride.id)

    latest = run(burst())
    assert latest.current_lng - latest.current_lat == pytest.approx(10.0)


# -----------------------------
# Mongo store (collection mocked)
# -----------------------------
def test_mongo_insert_sets_id_and_created_at():
    coll = MagicMock()
    coll.insert_one = AsyncMock()
    store = MongoRideStore(coll)

    ride = run(store.insert(draft()))

    stored = coll.insert_one.await_args.args[0]
    assert stored["ride_id"] == ride.id
    assert stored["created_at"] == ride.created_at
    assert stored["current_lat"] == 17.40


def test_mongo_list_sorts_by_created_at_desc():
    coll = MagicMock()
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[mongo_doc("ride-2"), mongo_doc("ride-1")])
    coll.find.return_value = cursor
    store = MongoRideStore(coll)

    rides = run(store.list())

    assert [r.id for r in rides] == ["ride-2", "ride-1"]
    assert cursor.sort.call_args.args[0][0] == ("created_at", -1)


def test_mongo_update_position_is_a_single_set():
    coll = MagicMock()
    coll.find_one_and_update = AsyncMock(return_value=mongo_doc(current_lat=17.41, current_lng=78.41))
    store = MongoRideStore(coll)

    ride = run(store.update_position("ride-1", 17.41, 78.41))

    args, kwargs = coll.find_one_and_update.await_args
    assert args == ({"ride_id": "ride-1"}, {"$set": {"current_lat": 17.41, "current_lng": 78.41}})
    assert kwargs["return_document"] == ReturnDocument.AFTER
    assert (ride.current_lat, ride.current_lng) == (17.41, 78.41)


def test_mongo_update_unknown_ride():
    coll = MagicMock()
    coll.find_one_and_update = AsyncMock(return_value=None)

    with pytest.raises(NotFoundError):
        run(MongoRideStore(coll).update_position("ride-x", 17.41, 78.41))


def test_mongo_errors_become_server_errors():
    coll = MagicMock()
    coll.delete_one = AsyncMock(side_effect=ServerSelectionTimeoutError("no primary"))

    with pytest.raises(ServerError, match="failed to delete ride"):
        run(MongoRideStore(coll).delete("ride-1"))


def test_build_store_requires_mongo_url():
    with pytest.raises(RuntimeError, match="MONGO_URL"):
        build_store(Settings(ride_store="mongo", mongo_url=""))
    assert isinstance(build_store(Settings(ride_store="memory")), InMemoryRideStore)
