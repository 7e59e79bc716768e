import os
from dataclasses import dataclass
from typing import NamedTuple

from dotenv import load_dotenv

DEFAULT_CORS_ORIGIN_REGEX = r"^http://(localhost|127\.0\.0\.1)(:\d+)?$"


class Coordinate(NamedTuple):
    lat: float
    lng: float


# The college campus every commute starts or ends at.
DEFAULT_HUB = Coordinate(17.3805, 78.3824)


@dataclass(frozen=True)
class Settings:
    mongo_url: str = ""
    mongo_db: str = "carpool"
    ride_store: str = "mongo"
    hub_lat: float = DEFAULT_HUB.lat
    hub_lng: float = DEFAULT_HUB.lng
    api_base_url: str = "http://localhost:8000"
    poll_interval_s: float = 5.0
    http_timeout_s: float = 10.0
    cors_origin_regex: str = DEFAULT_CORS_ORIGIN_REGEX
    log_level: str = "INFO"

    @property
    def hub(self) -> Coordinate:
        return Coordinate(self.hub_lat, self.hub_lng)


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        mongo_url=os.getenv("MONGO_URL", "").strip(),
        mongo_db=os.getenv("MONGO_DB", "carpool").strip(),
        ride_store=os.getenv("RIDE_STORE", "mongo").strip().lower(),
        hub_lat=float(os.getenv("HUB_LAT", str(DEFAULT_HUB.lat))),
        hub_lng=float(os.getenv("HUB_LNG", str(DEFAULT_HUB.lng))),
        api_base_url=os.getenv("API_BASE_URL", "http://localhost:8000").strip().rstrip("/"),
        poll_interval_s=float(os.getenv("POLL_INTERVAL_S", "5")),
        http_timeout_s=float(os.getenv("HTTP_TIMEOUT_S", "10")),
        cors_origin_regex=os.getenv("CORS_ORIGIN_REGEX", DEFAULT_CORS_ORIGIN_REGEX),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip(),
    )
