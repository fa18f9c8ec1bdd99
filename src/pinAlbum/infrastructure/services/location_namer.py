from pinAlbum.application.interfaces import ILocationNamer
from pinAlbum.utils.geocoding import resolve_location_name


class ReverseGeocoderNamer(ILocationNamer):
    """Offline reverse geocoding backed by ``reverse_geocoder``."""

    def display_name(self, latitude: float, longitude: float) -> str:
        return resolve_location_name(latitude, longitude)
