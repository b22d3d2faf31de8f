import logging

from fastmcp import FastMCP

from geocache.server import get_service
from geocache.tools.error_messages import safe_tool_wrapper

logger = logging.getLogger(__name__)


async def _geocode(address: str) -> str:
    location = await get_service().get_geocoding(address)
    return f"Latitude: {location.latitude}, Longitude: {location.longitude}"


async def _reverse_geocode(latitude: float, longitude: float) -> str:
    result = await get_service().get_reverse_geocoding(latitude, longitude)
    return result.address


def register_geocoding_tools(mcp: FastMCP) -> None:
    """Register geocoding and reverse geocoding tools on the MCP server."""

    @mcp.tool
    async def geocode(address: str) -> str:
        """Find the latitude and longitude of an address.

        Results are cached for a few minutes, so repeated lookups of the
        same address are fast.

        Args:
            address: Street address, city or place name, e.g. "Eiffel Tower, Paris".

        Returns:
            The coordinates as "Latitude: <lat>, Longitude: <lon>".
        """
        logger.info("Getting geocoding for address: %s", address)
        return await safe_tool_wrapper(
            _geocode, address, context={"query": f"'{address}'"}
        )

    @mcp.tool
    async def reverse_geocode(latitude: float, longitude: float) -> str:
        """Find the address at a latitude/longitude pair.

        Args:
            latitude: Latitude in degrees, -90 to 90.
            longitude: Longitude in degrees, -180 to 180.

        Returns:
            The address label of the closest match.
        """
        logger.info(
            "Getting reverse geocoding for latitude: %s and longitude: %s",
            latitude, longitude,
        )
        return await safe_tool_wrapper(
            _reverse_geocode,
            latitude,
            longitude,
            context={"query": f"{latitude}, {longitude}"},
        )
