import threading

import pytest
import requests


class FakeResponse:
    def __init__(self, status_code=200, payload=None, bad_json=False):
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeHttp:
    """Stands in for the requests module; records every get() call."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self._lock = threading.Lock()

    def get(self, url, params=None, headers=None, timeout=None):
        with self._lock:
            self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def modis_record(lat, lng, value, calendar_date, band="250m_16_days_NDVI", modis_date="A2024193"):
    return {
        "modis_date": modis_date,
        "band": band,
        "calendar_date": calendar_date,
        "latitude": lat,
        "longitude": lng,
        "value": value,
    }


def write_csv(path, rows, header="date,latitude,longitude,NDVI"):
    lines = [header] + [",".join(str(v) for v in row) for row in rows]
    path.write_text("\n".join(lines) + "\n")
    return str(path)


@pytest.fixture
def failing_http():
    return FakeHttp(response=FakeResponse(status_code=503))


@pytest.fixture
def three_month_rows():
    return [
        ("2025-07-15", 50.0, 21.0, 0.6),
        ("2025-08-15", 50.0, 21.0, 0.65),
        ("2025-09-15", 50.0, 21.0, 0.7),
    ]
