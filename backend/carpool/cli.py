"""Command-line entry points.

Run:
    python -m carpool serve
    python -m carpool offer --name Asha --phone +911234567890 --seats 2 --time morning --at 17.40,78.40
    python -m carpool watch --focus ride-...
"""

import argparse
import sys
import time
from typing import List, Optional

from carpool.client.api import RideApiClient
from carpool.client.poller import RideMapController, RidePoller
from carpool.client.reporter import PositionReporter, ReplayPositionSource, load_samples_csv
from carpool.core.config import Settings, load_settings
from carpool.core.errors import RideError
from carpool.core.logging import setup_logging
from carpool.schemas.ride import TRAVEL_TIMES, RideOffer
from carpool.services.feed import feed_stats, filter_rides, nearest_rides


def _parse_point(value: str):
    try:
        lat, lng = (float(v) for v in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError("expected LAT,LNG")
    return lat, lng


def _fmt_ride(ride: RideOffer) -> str:
    return (
        f"{ride.id}  {ride.driver_name:<16} {ride.phone_number:<15} seats={ride.seats_available} "
        f"{ride.travel_time:<7} now=({ride.current_lat:.5f}, {ride.current_lng:.5f})"
    )


class ConsoleView:
    def __init__(self, travel_time: Optional[str] = None, near=None, limit: Optional[int] = None, out=sys.stdout):
        self.travel_time = travel_time
        self.near = near
        self.limit = limit
        self.out = out

    def show_rides(self, rides: List[RideOffer]) -> None:
        stats = feed_stats(rides)
        rides = filter_rides(rides, travel_time=self.travel_time)
        if self.near:
            rides = nearest_rides(rides, *self.near, limit=self.limit)
        print(f"--- {len(rides)} ride(s) at {time.strftime('%H:%M:%S')}", file=self.out)
        print(
            f"    total={stats.total_rides} morning={stats.morning} evening={stats.evening} seats={stats.seats}",
            file=self.out,
        )
        for ride in rides:
            print(_fmt_ride(ride), file=self.out)

    def show_focus(self, ride: Optional[RideOffer]) -> None:
        if ride is None:
            print(">>> no ride selected", file=self.out)
        else:
            print(f">>> {_fmt_ride(ride)}", file=self.out)


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    from carpool.server import create_app

    uvicorn.run(create_app(settings), host=args.host, port=args.port)
    return 0


def _cmd_offer(args: argparse.Namespace, settings: Settings) -> int:
    client = RideApiClient(settings.api_base_url, timeout=settings.http_timeout_s)
    try:
        ride = client.create_ride(args.name, args.phone, args.seats, args.time, *args.at)
    except RideError as exc:
        print(f"Failed to offer ride: {exc.message}", file=sys.stderr)
        return 1
    print(_fmt_ride(ride))

    if not args.track:
        return 0

    samples = load_samples_csv(args.track)
    source = ReplayPositionSource(samples, interval=args.every)
    with PositionReporter(client, source) as reporter:
        handle = reporter.start(ride.id)
        try:
            source.wait(handle)
        except KeyboardInterrupt:
            pass
        print(f"Reported {reporter.reported}/{len(samples)} positions for {ride.id}")
    return 0


def _cmd_watch(args: argparse.Namespace, settings: Settings) -> int:
    client = RideApiClient(settings.api_base_url, timeout=settings.http_timeout_s)
    controller = RideMapController(ConsoleView(args.travel_time, args.near, args.limit))
    poller = RidePoller(client, controller, interval=args.interval or settings.poll_interval_s)

    if args.focus:
        poller.poll_once()
        if controller.select(args.focus) is None:
            print(f"Ride {args.focus} not in the feed", file=sys.stderr)

    with poller:
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            pass
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="carpool")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_srv = sub.add_parser("serve", help="run the rides API")
    p_srv.add_argument("--host", default="0.0.0.0")
    p_srv.add_argument("--port", type=int, default=8000)
    p_srv.set_defaults(func=_cmd_serve)

    p_off = sub.add_parser("offer", help="offer a ride, optionally replaying a GPS track for it")
    p_off.add_argument("--name", required=True)
    p_off.add_argument("--phone", required=True)
    p_off.add_argument("--seats", type=int, required=True)
    p_off.add_argument("--time", choices=TRAVEL_TIMES, required=True)
    p_off.add_argument("--at", type=_parse_point, required=True, help="picked point as LAT,LNG")
    p_off.add_argument("--track", help="CSV with latitude,longitude[,timestamp] columns")
    p_off.add_argument("--every", type=float, default=3.0, help="seconds between replayed samples")
    p_off.set_defaults(func=_cmd_offer)

    p_w = sub.add_parser("watch", help="poll the ride feed and print it")
    p_w.add_argument("--focus", help="ride id to follow")
    p_w.add_argument("--travel-time", choices=TRAVEL_TIMES)
    p_w.add_argument("--near", type=_parse_point, help="sort by distance from LAT,LNG")
    p_w.add_argument("--limit", type=int)
    p_w.add_argument("--interval", type=float, help="seconds between polls")
    p_w.set_defaults(func=_cmd_watch)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(settings.log_level)
    return args.func(args, settings)
