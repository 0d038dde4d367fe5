import pytest

from tolqin.core.errors import EntryValidationError
from tolqin.etl import transform
from tolqin.models import Coordinates, Location, SpotEntry


def make_entry(name="Spot 1", locality="Locality 1", country_code="kz", latitude=1.23, longitude=3.21):
    return SpotEntry(
        name=name,
        location=Location(
            locality=locality,
            country_code=country_code,
            coordinates=Coordinates(latitude=latitude, longitude=longitude),
        ),
    )


def test_sanitize_entry_trims_text_fields():
    entry = make_entry(name="  Spot 1  ", locality=" Locality 1\t", country_code=" kz ")

    sanitized = transform.sanitize_entry(entry)

    assert sanitized.name == "Spot 1"
    assert sanitized.location.locality == "Locality 1"
    assert sanitized.location.country_code == "kz"
    assert sanitized.location.coordinates == entry.location.coordinates
    assert entry.name == "  Spot 1  "


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"name": ""}, "invalid spot name"),
        ({"locality": ""}, "invalid locality"),
        ({"country_code": ""}, "invalid country code"),
        ({"country_code": "zz"}, "invalid country code"),
        ({"latitude": 91}, "invalid latitude"),
        ({"latitude": -90.5}, "invalid latitude"),
        ({"longitude": 180.5}, "invalid longitude"),
    ],
)
def test_validate_entry_reports_violated_field(overrides, expected):
    assert transform.validate_entry(make_entry(**overrides)) == expected


def test_validate_entry_accepts_valid_entry():
    assert transform.validate_entry(make_entry()) is None


def test_validate_entry_is_deterministic():
    invalid = make_entry(latitude=91)
    valid = make_entry()
    assert transform.validate_entry(invalid) == transform.validate_entry(invalid)
    assert transform.validate_entry(valid) is transform.validate_entry(valid) is None


def test_prepare_entries_sanitizes_before_validating():
    entries = transform.prepare_entries([make_entry(name="  Spot 1  ", country_code=" kz ")])

    assert entries == [make_entry(name="Spot 1", country_code="kz")]


def test_prepare_entries_whitespace_name_is_invalid():
    with pytest.raises(EntryValidationError) as excinfo:
        transform.prepare_entries([make_entry(name="   ")])

    assert "invalid spot name" in str(excinfo.value)


def test_prepare_entries_stops_at_first_invalid_entry():
    entries = [make_entry(), make_entry(latitude=91), make_entry(locality="")]

    with pytest.raises(EntryValidationError) as excinfo:
        transform.prepare_entries(entries)

    assert str(excinfo.value) == "invalid entry #2: invalid latitude"
    assert excinfo.value.errors == ["invalid entry #2: invalid latitude"]
    assert excinfo.value.stage == "validate"


def test_prepare_entries_collects_all_problems():
    entries = [make_entry(), make_entry(latitude=91), make_entry(locality="")]

    with pytest.raises(EntryValidationError) as excinfo:
        transform.prepare_entries(entries, collect_all=True)

    assert excinfo.value.errors == [
        "invalid entry #2: invalid latitude",
        "invalid entry #3: invalid locality",
    ]
    assert str(excinfo.value).startswith("2 invalid entries")


def test_prepare_entries_empty_input():
    assert transform.prepare_entries([]) == []
