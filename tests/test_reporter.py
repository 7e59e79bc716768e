from unittest.mock import MagicMock

import pytest

from carpool.client.reporter import (
    PositionReporter,
    PositionSample,
    ReplayPositionSource,
    load_samples_csv,
)
from carpool.core.errors import NotFoundError

SAMPLES = [PositionSample(17.40 + i / 100, 78.40 + i / 100, 1700000000 + i) for i in range(4)]


def test_reporter_forwards_every_sample():
    client = MagicMock()
    source = ReplayPositionSource(SAMPLES, interval=0.001)

    with PositionReporter(client, source) as reporter:
        handle = reporter.start("ride-1")
        assert source.wait(handle, timeout=2)

    sent = [c.args for c in client.report_position.call_args_list]
    assert sent == [("ride-1", s.lat, s.lng) for s in SAMPLES]
    assert reporter.reported == 4
    assert reporter.handle is None


def test_report_failures_do_not_stop_reporting():
    client = MagicMock()
    client.report_position.side_effect = [None, NotFoundError("Ride not found"), None, None]
    errors = []
    source = ReplayPositionSource(SAMPLES, interval=0.001)
    reporter = PositionReporter(client, source, on_error=errors.append)

    handle = reporter.start("ride-1")
    source.wait(handle, timeout=2)
    reporter.stop()

    assert client.report_position.call_count == 4
    assert reporter.reported == 3
    assert len(errors) == 1


def test_tracking_needs_a_ride_id():
    reporter = PositionReporter(MagicMock(), ReplayPositionSource(SAMPLES))
    with pytest.raises(ValueError):
        reporter.start("")
    assert reporter.handle is None


def test_stop_releases_the_subscription():
    source = MagicMock()
    source.subscribe.return_value = 7
    reporter = PositionReporter(MagicMock(), source)

    reporter.start("ride-1")
    with pytest.raises(RuntimeError):
        reporter.start("ride-2")
    reporter.stop()
    reporter.stop()

    source.unsubscribe.assert_called_once_with(7)


def test_load_samples_csv_skips_bad_rows(tmp_path):
    path = tmp_path / "track.csv"
    path.write_text(
        "latitude,longitude,timestamp\n"
        "17.40,78.40,1700000000\n"
        "oops,78.41,1700000003\n"
        "17.42,78.42,\n",
        encoding="utf-8",
    )

    samples = load_samples_csv(path)

    assert [(s.lat, s.lng) for s in samples] == [(17.40, 78.40), (17.42, 78.42)]
    assert samples[0].timestamp == 1700000000


def test_unreadable_responses_do_not_stop_reporting():
    from carpool.client.api import RideApiClient

    resp = MagicMock()
    resp.status_code = 200
    resp.json.side_effect = ValueError("not json")
    session = MagicMock()
    session.request.return_value = resp
    errors = []
    source = ReplayPositionSource(SAMPLES, interval=0.001)
    reporter = PositionReporter(RideApiClient("http://api.local", session=session), source, on_error=errors.append)

    handle = reporter.start("ride-1")
    assert source.wait(handle, timeout=2)
    reporter.stop()

    assert session.request.call_count == 4
    assert len(errors) == 4
    assert reporter.reported == 0


def test_unexpected_client_errors_are_reported():
    client = MagicMock()
    client.report_position.side_effect = [KeyError("boom"), None, None, None]
    errors = []
    source = ReplayPositionSource(SAMPLES, interval=0.001)
    reporter = PositionReporter(client, source, on_error=errors.append)

    source.wait(reporter.start("ride-1"), timeout=2)
    reporter.stop()

    assert client.report_position.call_count == 4
    assert reporter.reported == 3
    assert errors[0].kind == "server"
