import logging
from typing import Optional

from setshaba.services.municipality_service import MunicipalityService
from setshaba.utils.geocoding import normalize_place_name
from .base import GeocodingProvider

logger = logging.getLogger(__name__)


class MunicipalityResolver:
    """
    Map coordinates to a municipality id.

    Reverse-geocodes the point, then matches the geocoder's municipality,
    city and locality names (in that order) against the municipality
    directory. When the geocoder reports a state and the municipality has a
    province, they must agree. Returns None when nothing matches; the
    provider never raises, so neither does this.
    """

    CANDIDATE_KEYS = ("municipality", "city", "locality")

    def __init__(self, provider: GeocodingProvider):
        self.provider = provider

    def resolve(self, db, latitude: float, longitude: float) -> Optional[str]:
        place = self.provider.reverse_geocode(latitude, longitude)
        candidates = [normalize_place_name(place.get(key)) for key in self.CANDIDATE_KEYS]
        candidates = [c for c in candidates if c]
        if not candidates:
            logger.info(f"No place names for ({latitude}, {longitude}) from {place.get('provider')}")
            return None

        state = normalize_place_name(place.get("state"))
        municipalities = MunicipalityService(db).list_municipalities()

        for candidate in candidates:
            for municipality in municipalities:
                if normalize_place_name(municipality.get("name")) != candidate:
                    continue
                province = normalize_place_name(municipality.get("province"))
                if state and province and state != province:
                    continue
                logger.info(f"Resolved ({latitude}, {longitude}) to municipality {municipality['id']}")
                return municipality["id"]

        logger.info(f"No municipality matched {candidates} for ({latitude}, {longitude})")
        return None
