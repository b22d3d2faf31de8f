from geocache.models.geocoding import (
    Location,
    ProviderResponse,
    ProviderResult,
    ReverseAddress,
    to_address,
    to_location,
)

__all__ = [
    "Location",
    "ProviderResponse",
    "ProviderResult",
    "ReverseAddress",
    "to_address",
    "to_location",
]
