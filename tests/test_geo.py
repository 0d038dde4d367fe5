import math

import pytest

from tolqin.core import geo


@pytest.mark.parametrize("value", [-90, -45.5, 0, 89.999, 90])
def test_is_latitude_accepts_range(value):
    assert geo.is_latitude(value) is True


@pytest.mark.parametrize("value", [-90.0001, 91, math.inf, math.nan])
def test_is_latitude_rejects_out_of_range(value):
    assert geo.is_latitude(value) is False


@pytest.mark.parametrize("value", [-180, 0, 179.5, 180])
def test_is_longitude_accepts_range(value):
    assert geo.is_longitude(value) is True


@pytest.mark.parametrize("value", [-180.1, 181, -math.inf, math.nan])
def test_is_longitude_rejects_out_of_range(value):
    assert geo.is_longitude(value) is False


@pytest.mark.parametrize("code", ["kz", "KZ", "id", "us", "gb", "pt"])
def test_is_country_accepts_iso2_codes(code):
    assert geo.is_country(code) is True


@pytest.mark.parametrize("code", ["long", "", "zz", "12", "k"])
def test_is_country_rejects_unknown_codes(code):
    assert geo.is_country(code) is False


def test_country_codes_are_two_lowercase_letters():
    assert len(geo.COUNTRY_CODES) == 249
    assert all(len(code) == 2 and code.islower() for code in geo.COUNTRY_CODES)
