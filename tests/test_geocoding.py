from pinAlbum.errors import GeoError
from pinAlbum.infrastructure.services import ReverseGeocoderNamer
from pinAlbum.utils import geocoding

import pytest


class _StubGeocoder:
    def __init__(self, result):
        self.result = result
        self.queries = []

    def query(self, coords):
        self.queries.append(coords)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def test_resolve_location_name_accepts_strings(monkeypatch):
    stub = _StubGeocoder([{"name": "London", "admin1": "England"}])
    monkeypatch.setattr(geocoding, "_geocoder", lambda: stub)

    result = geocoding.resolve_location_name("51.5074", "-0.1278")

    assert result == "London, England"
    assert stub.queries == [[(51.5074, -0.1278)]]


def test_admin_falls_back_to_country_code(monkeypatch):
    monkeypatch.setattr(geocoding, "_geocoder", lambda: _StubGeocoder([{"name": "Nuuk", "cc": "GL"}]))
    assert geocoding.reverse_geocode(64.18, -51.72) == "Nuuk, GL"


def test_reverse_geocode_raises_on_empty_result(monkeypatch):
    monkeypatch.setattr(geocoding, "_geocoder", lambda: _StubGeocoder([]))
    with pytest.raises(GeoError):
        geocoding.reverse_geocode(0.0, 0.0)


def test_reverse_geocode_rejects_out_of_range():
    with pytest.raises(GeoError):
        geocoding.reverse_geocode(123.0, 0.0)


def test_failures_fall_back_to_unknown(monkeypatch):
    monkeypatch.setattr(geocoding, "_geocoder", lambda: _StubGeocoder(RuntimeError("no data")))
    assert geocoding.resolve_location_name(1.0, 2.0) == "Unknown"


def test_namer_delegates(monkeypatch):
    monkeypatch.setattr(geocoding, "_geocoder", lambda: _StubGeocoder([{"name": "Kyoto", "admin1": "Kyoto"}]))
    assert ReverseGeocoderNamer().display_name(35.0, 135.7) == "Kyoto, Kyoto"
