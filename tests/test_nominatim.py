import pytest

from tolqin.models import Coordinates, Location
from tolqin.vendors import nominatim


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []
        self.response = DummyResponse()

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params, headers, timeout))
        return self.response


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(nominatim, "_SESSION", session)
    return session


def test_reverse_geocode_success(patch_session):
    patch_session.response = DummyResponse(
        payload={"address": {"country_code": "id", "state": "Bali", "village": "Canggu"}}
    )
    coordinates = Coordinates(-8.65, 115.13)

    location = nominatim.reverse_geocode(coordinates, "https://nominatim.example/", timeout=5)

    assert location == Location(locality="Canggu", country_code="id", coordinates=coordinates)
    url, params, headers, timeout = patch_session.calls[0]
    assert url == "https://nominatim.example/reverse"
    assert params == {"lat": "-8.65", "lon": "115.13", "format": "json"}
    assert headers == {"Accept-Language": "en"}
    assert timeout == 5


@pytest.mark.parametrize(
    "address, expected",
    [
        ({"hamlet": "H", "village": "V", "city": "C"}, "H"),
        ({"town": "T", "city": "C"}, "T"),
        ({"city_district": "D", "county": "Co"}, "D"),
        ({"municipality": "M", "state": "S"}, "M"),
        ({"territory": "Te", "region": "R"}, "Te"),
        ({"region": "R"}, "R"),
        ({}, ""),
    ],
)
def test_reverse_geocode_picks_most_specific_locality(patch_session, address, expected):
    patch_session.response = DummyResponse(payload={"address": dict(address, country_code="pt")})

    location = nominatim.reverse_geocode(Coordinates(1, 2), "https://nominatim.example")

    assert location.locality == expected


def test_reverse_geocode_location_not_found(patch_session):
    patch_session.response = DummyResponse(payload={"error": "Unable to geocode"})

    with pytest.raises(nominatim.LocationNotFoundError):
        nominatim.reverse_geocode(Coordinates(0, 0), "https://nominatim.example")


def test_reverse_geocode_unsuccessful_response(patch_session):
    patch_session.response = DummyResponse(status_code=503, text="unavailable")

    with pytest.raises(nominatim.NominatimError) as excinfo:
        nominatim.reverse_geocode(Coordinates(0, 0), "https://nominatim.example")

    assert "503" in str(excinfo.value)
