"""Forward device position samples for one ride to the location endpoint."""

import csv
import itertools
import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from carpool.core.errors import RideError, ServerError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionSample:
    lat: float
    lng: float
    timestamp: float


SampleCallback = Callable[[PositionSample], None]


class PositionSource(Protocol):
    def subscribe(self, callback: SampleCallback) -> int: ...

    def unsubscribe(self, handle: int) -> None: ...


class ReplayPositionSource:
    """Emits a fixed list of samples, one every ``interval`` seconds, per subscriber."""

    def __init__(self, samples: Iterable[PositionSample], interval: float = 3.0):
        self.samples = list(samples)
        self.interval = interval
        self._subs: Dict[int, Tuple[threading.Event, threading.Thread]] = {}
        self._handles = itertools.count(1)

    def subscribe(self, callback: SampleCallback) -> int:
        handle = next(self._handles)
        stop = threading.Event()
        thread = threading.Thread(
            target=self._replay, args=(callback, stop), name=f"replay-{handle}", daemon=True
        )
        self._subs[handle] = (stop, thread)
        thread.start()
        return handle

    def unsubscribe(self, handle: int) -> None:
        sub = self._subs.pop(handle, None)
        if sub is None:
            return
        stop, thread = sub
        stop.set()
        if thread is not threading.current_thread():
            thread.join()

    def wait(self, handle: int, timeout: Optional[float] = None) -> bool:
        """Block until the replay for ``handle`` has emitted every sample."""
        sub = self._subs.get(handle)
        if sub is None:
            return True
        sub[1].join(timeout)
        return not sub[1].is_alive()

    def _replay(self, callback: SampleCallback, stop: threading.Event):
        for i, sample in enumerate(self.samples):
            if stop.is_set():
                return
            if i and stop.wait(self.interval):
                return
            callback(sample)


def load_samples_csv(csv_path) -> List[PositionSample]:
    """Read a track CSV with ``latitude``/``longitude`` and optional ``timestamp`` columns.

    Rows that fail to parse are skipped.
    """
    samples = []
    skipped = 0
    with Path(csv_path).open("r", encoding="utf-8", newline="") as f:
        for row in csv.DictReader(f):
            try:
                ts = row.get("timestamp")
                samples.append(
                    PositionSample(
                        lat=float(row["latitude"].strip()),
                        lng=float(row["longitude"].strip()),
                        timestamp=float(ts) if ts else time.time(),
                    )
                )
            except (KeyError, ValueError, AttributeError):
                skipped += 1
    if skipped:
        logger.warning("Skipped %d unreadable rows in %s", skipped, csv_path)
    return samples


class PositionReporter:
    """Reports each sample from ``source`` as the live position of one ride.

    Failed reports are logged and reporting carries on.
    """

    def __init__(self, client, source: PositionSource, on_error: Optional[Callable[[RideError], None]] = None):
        self.client = client
        self.source = source
        self.on_error = on_error or self._log_error
        self.ride_id: Optional[str] = None
        self.handle: Optional[int] = None
        self.reported = 0

    def start(self, ride_id: str) -> int:
        if not ride_id:
            raise ValueError("a ride must be created before tracking starts")
        if self.handle is not None:
            raise RuntimeError(f"already reporting for ride {self.ride_id}")
        self.ride_id = ride_id
        self.handle = self.source.subscribe(self._on_sample)
        logger.info("Tracking started for ride %s", ride_id)
        return self.handle

    def stop(self):
        if self.handle is None:
            return
        handle, self.handle = self.handle, None
        self.source.unsubscribe(handle)
        logger.info("Tracking stopped for ride %s after %d reports", self.ride_id, self.reported)

    def _on_sample(self, sample: PositionSample):
        try:
            self.client.report_position(self.ride_id, sample.lat, sample.lng)
        except RideError as exc:
            self.on_error(exc)
            return
        except Exception as exc:
            logger.exception("Position report for ride %s raised", self.ride_id)
            self.on_error(ServerError(f"position report failed: {exc}"))
            return
        self.reported += 1

    def _log_error(self, exc: RideError):
        logger.warning("Position report for ride %s failed (%s): %s", self.ride_id, exc.kind, exc.message)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.stop()
        return False
