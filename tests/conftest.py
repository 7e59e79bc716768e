import pytest
from fastapi.testclient import TestClient

from carpool.core.config import Coordinate, Settings
from carpool.db.memory import InMemoryRideStore
from carpool.realtime.manager import RideRooms
from carpool.server import create_app
from carpool.services.rides import RideService

HUB = Coordinate(17.3805, 78.3824)

ASHA = {
    "driverName": "Asha",
    "phoneNumber": "+911234567890",
    "seatsAvailable": 2,
    "travelTime": "morning",
    "pickedLat": 17.40,
    "pickedLng": 78.40,
}


@pytest.fixture
def settings():
    return Settings(ride_store="memory", hub_lat=HUB.lat, hub_lng=HUB.lng)


@pytest.fixture
def store():
    return InMemoryRideStore()


@pytest.fixture
def rooms():
    return RideRooms()


@pytest.fixture
def service(store, rooms):
    return RideService(store, hub=HUB, rooms=rooms)


@pytest.fixture
def app(settings, store):
    return create_app(settings, store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
