import logging

from carpool.core.logging import QuietAccessFilter


def access_record(line, level=logging.INFO):
    return logging.LogRecord("uvicorn.access", level, __file__, 1, line, None, None)


def test_quiet_access_filter_hides_repetitive_lines():
    f = QuietAccessFilter()

    assert not f.filter(access_record('127.0.0.1:5000 - "GET /health HTTP/1.1" 200'))
    assert not f.filter(access_record('127.0.0.1:5000 - "PUT /rides/ride-1/location HTTP/1.1" 200'))
    assert f.filter(access_record('127.0.0.1:5000 - "GET /rides HTTP/1.1" 200'))
    assert f.filter(access_record('127.0.0.1:5000 - "POST /rides HTTP/1.1" 201'))


def test_quiet_access_filter_keeps_warnings():
    f = QuietAccessFilter()
    assert f.filter(access_record('127.0.0.1:5000 - "PUT /rides/ride-1/location HTTP/1.1" 500', logging.WARNING))
