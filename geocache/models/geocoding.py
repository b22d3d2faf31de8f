import logging

from pydantic import BaseModel, ConfigDict, field_validator

from geocache.clients.resilience import NoResultsError

logger = logging.getLogger(__name__)


class ProviderResult(BaseModel):
    """A single match returned by the geocoding provider."""

    latitude: float
    longitude: float
    label: str | None = None
    name: str | None = None
    country: str | None = None
    region: str | None = None
    confidence: float | None = None


class ProviderResponse(BaseModel):
    """Body of a forward or reverse geocoding response."""

    data: list[ProviderResult] = []

    @field_validator("data", mode="before")
    @classmethod
    def _drop_empty_matches(cls, value: object) -> object:
        # An empty match set is sometimes sent as [[]] instead of []
        if isinstance(value, list):
            return [item for item in value if item != []]
        return value


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class ReverseAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str


def to_location(response: ProviderResponse) -> Location:
    """Map the first provider match to a Location.

    Raises:
        NoResultsError: If there is no match or the match has no label.
    """
    if not response.data or not response.data[0].label:
        logger.error("No results found for the given address in location mapping")
        raise NoResultsError("No results found for the given address")
    first = response.data[0]
    return Location(latitude=first.latitude, longitude=first.longitude)


def to_address(response: ProviderResponse) -> ReverseAddress:
    """Map the first provider match to a ReverseAddress.

    Raises:
        NoResultsError: If there is no match or the match has no label.
    """
    if not response.data or not response.data[0].label:
        logger.error("No results found for the given coordinates in address mapping")
        raise NoResultsError("No results found for the given latitude and longitude")
    return ReverseAddress(address=response.data[0].label)
