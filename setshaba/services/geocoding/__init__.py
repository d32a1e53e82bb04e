"""
Reverse geocoding and coordinate -> municipality resolution.
"""

from setshaba.services.geocoding.base import GeocodingProvider, empty_result
from setshaba.services.geocoding.municipality_resolver import MunicipalityResolver
from setshaba.services.geocoding.resolver import get_geocoding_provider

__all__ = [
    "GeocodingProvider",
    "MunicipalityResolver",
    "empty_result",
    "get_geocoding_provider",
]
