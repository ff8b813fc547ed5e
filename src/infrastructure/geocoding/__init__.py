"""Infrastructure adapters for reverse geocoding."""

from .nominatim_adapter import NominatimGeocodingAdapter

__all__ = ["NominatimGeocodingAdapter"]
