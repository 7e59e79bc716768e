from typing import Any, List, Optional

import requests

from carpool.core.errors import ServerError, error_for_status
from carpool.schemas.ride import RideCreate, RideOffer


class RideApiClient:
    """Blocking HTTP client for the rides API."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise ServerError(f"{method} {path} failed: {exc}") from exc

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("detail") if isinstance(body, dict) else None
            raise error_for_status(response.status_code, str(detail or response.text))

        try:
            return response.json()
        except ValueError as exc:
            raise ServerError(f"{method} {path} returned a non-JSON body") from exc

    def _ride(self, payload: Any, path: str) -> RideOffer:
        try:
            return RideOffer.model_validate(payload)
        except ValueError as exc:
            raise ServerError(f"unexpected ride payload from {path}: {exc}") from exc

    def list_rides(self) -> List[RideOffer]:
        payload = self._request("GET", "/rides")
        if not isinstance(payload, list):
            raise ServerError("GET /rides did not return a list")
        return [self._ride(item, "/rides") for item in payload]

    def create_ride(
        self,
        driver_name: str,
        phone_number: str,
        seats_available: int,
        travel_time: str,
        picked_lat: float,
        picked_lng: float,
    ) -> RideOffer:
        body = RideCreate(
            driver_name=driver_name,
            phone_number=phone_number,
            seats_available=seats_available,
            travel_time=travel_time,
            picked_lat=picked_lat,
            picked_lng=picked_lng,
        ).model_dump(by_alias=True)
        return self._ride(self._request("POST", "/rides", json=body), "/rides")

    def report_position(self, ride_id: str, lat: float, lng: float) -> RideOffer:
        body = {"currentLat": lat, "currentLng": lng}
        path = f"/rides/{ride_id}/location"
        return self._ride(self._request("PUT", path, json=body), path)

    def delete_ride(self, ride_id: str) -> None:
        self._request("DELETE", f"/rides/{ride_id}")

    def close(self):
        self.session.close()
