"""
Place-name utilities for coordinate -> municipality matching.
"""

from typing import Optional


def normalize_place_name(name: Optional[str]) -> Optional[str]:
    """
    Canonical place-name normalization for matching geocoder output against
    the municipality directory.

    - Trims and lowercases
    - Drops "City of" prefixes and "(Local|Metropolitan|District) Municipality" suffixes
    - Returns None for empty values
    """
    if not name or not isinstance(name, str):
        return None

    normalized = " ".join(name.strip().lower().split())
    if normalized.startswith("city of "):
        normalized = normalized[len("city of "):]
    for suffix in (
        " metropolitan municipality",
        " local municipality",
        " district municipality",
        " municipality",
    ):
        if normalized.endswith(suffix):
            normalized = normalized[: -len(suffix)]
            break

    return normalized.strip() or None
