import logging
import threading
from typing import Callable, List, Optional, Protocol

from carpool.core.errors import RideError, ServerError
from carpool.schemas.ride import RideOffer

logger = logging.getLogger(__name__)


class RideView(Protocol):
    def show_rides(self, rides: List[RideOffer]) -> None: ...

    def show_focus(self, ride: Optional[RideOffer]) -> None: ...


class RideMapController:
    """Owns the ride snapshot and the selected ride for one view."""

    def __init__(self, view: RideView):
        self.view = view
        self.rides: List[RideOffer] = []
        self.selected: Optional[RideOffer] = None
        self._lock = threading.Lock()

    @property
    def selected_id(self) -> Optional[str]:
        return self.selected.id if self.selected else None

    def select(self, ride_id: str) -> Optional[RideOffer]:
        with self._lock:
            ride = next((r for r in self.rides if r.id == ride_id), None)
            if ride is None:
                return None
            self.selected = ride
        self.view.show_focus(ride)
        return ride

    def clear_selection(self):
        with self._lock:
            self.selected = None
        self.view.show_focus(None)

    def apply_snapshot(self, rides: List[RideOffer]):
        focus = None
        with self._lock:
            self.rides = list(rides)
            if self.selected is not None:
                fresh = next((r for r in self.rides if r.id == self.selected.id), None)
                # a ride missing from the feed keeps its last known reference
                if fresh is not None:
                    self.selected = fresh
                    focus = fresh
            snapshot = self.rides
        self.view.show_rides(snapshot)
        if focus is not None:
            self.view.show_focus(focus)


def _log_error(exc: RideError):
    logger.warning("Ride feed fetch failed (%s): %s", exc.kind, exc.message)


class RidePoller:
    """Refreshes a controller from the feed on a fixed interval in a background thread.

    Failures go to ``on_error`` and never stop the loop; the controller keeps
    its last good snapshot. There is no backoff.
    """

    def __init__(
        self,
        client,
        controller: RideMapController,
        interval: float = 5.0,
        on_error: Callable[[RideError], None] = _log_error,
    ):
        self.client = client
        self.controller = controller
        self.interval = interval
        self.on_error = on_error
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> bool:
        try:
            rides = self.client.list_rides()
        except RideError as exc:
            self.on_error(exc)
            return False
        self.controller.apply_snapshot(rides)
        return True

    def _run(self):
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception as exc:
                logger.exception("Ride feed refresh failed")
                self.on_error(ServerError(f"feed refresh failed: {exc}"))
            if self._stop.wait(self.interval):
                break

    def start(self):
        if self.running:
            if not self._stop.is_set():
                return
            # a previous stop() timed out; let that thread finish first
            self._thread.join()
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="ride-poller", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if not self._thread.is_alive():
                self._thread = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()
        return False
