"""Forward and reverse geocoding against a positionstack-compatible API."""

import logging

import httpx

from geocache.clients.resilience import (
    CircuitBreaker,
    TransientAPIError,
    classify_response,
    resilient_request,
    validate_provider_schema,
)
from geocache.keys import InvalidKeyError
from geocache.models.geocoding import ProviderResponse

logger = logging.getLogger(__name__)

GEOCODING_URL = "http://api.positionstack.com/v1/forward"
REVERSE_GEOCODING_URL = "http://api.positionstack.com/v1/reverse"


class GeocodingClient:
    """Async geocoding provider client with retry and circuit breaking.

    Args:
        api_key: Provider access key.
        geocoding_url: Forward geocoding endpoint.
        reverse_geocoding_url: Reverse geocoding endpoint.
        timeout: Per-request timeout in seconds.
        breaker: Circuit breaker guarding provider calls. A fresh one is
            created when omitted.
    """

    def __init__(
        self,
        api_key: str,
        geocoding_url: str = GEOCODING_URL,
        reverse_geocoding_url: str = REVERSE_GEOCODING_URL,
        timeout: float = 10.0,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self.api_key = api_key
        self.geocoding_url = geocoding_url
        self.reverse_geocoding_url = reverse_geocoding_url
        self.timeout = timeout
        self.breaker = breaker or CircuitBreaker("geocoding", fail_max=5, reset_timeout=60.0)

    @resilient_request
    async def _fetch(self, url: str, query: str) -> ProviderResponse:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    url,
                    params={"access_key": self.api_key, "query": query},
                )
        except httpx.TransportError as exc:
            raise TransientAPIError(f"Geocoding provider unreachable: {exc}") from exc

        classify_response(response)
        data = response.json()
        validate_provider_schema(data)
        return ProviderResponse.model_validate(data)

    async def geocode(self, address: str) -> ProviderResponse:
        """Look up coordinates for *address*.

        Raises:
            InvalidKeyError: If *address* is blank.
            APIError: On provider failure (see ``resilience``).
        """
        if not address or not address.strip():
            logger.error("Provided address is null or empty")
            raise InvalidKeyError("Invalid address: no address was provided")

        logger.info("Fetching geocoding data for address: %s from provider", address)
        return await self.breaker.call_async(self._fetch(self.geocoding_url, address))

    async def reverse_geocode(self, latitude: float, longitude: float) -> ProviderResponse:
        """Look up the address at (*latitude*, *longitude*)."""
        logger.info(
            "Fetching reverse geocoding data for latitude: %s and longitude: %s from provider",
            latitude, longitude,
        )
        return await self.breaker.call_async(
            self._fetch(self.reverse_geocoding_url, f"{latitude},{longitude}")
        )
