import logging

from setshaba.core.settings import Settings
from .base import GeocodingProvider
from .google_provider import GoogleMapsProvider
from .nominatim_provider import NominatimProvider

logger = logging.getLogger(__name__)


def get_geocoding_provider(app_settings: Settings) -> GeocodingProvider:
    """
    Resolve the active geocoding provider based on settings.

    Rules:
    - Default: Nominatim (no API key required).
    - If GEOCODING_PROVIDER='google' AND GOOGLE_MAPS_API_KEY is set, use Google.
    - A 'google' setting without a key falls back to Nominatim.
    """
    provider_name = (app_settings.GEOCODING_PROVIDER or "nominatim").lower()

    if provider_name == "google":
        if app_settings.GOOGLE_MAPS_API_KEY:
            logger.info("Geocoding provider initialized: google")
            return GoogleMapsProvider(api_key=app_settings.GOOGLE_MAPS_API_KEY)
        logger.warning("GEOCODING_PROVIDER=google without GOOGLE_MAPS_API_KEY. Falling back to Nominatim.")

    logger.info("Geocoding provider initialized: nominatim")
    return NominatimProvider(user_agent=app_settings.GEOCODING_USER_AGENT)
