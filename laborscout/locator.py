"""
Location resolution for Labor Scout.

Resolves the caller's current location and turns free-text addresses into
coordinates, degrading gracefully when no provider is configured.
"""

import asyncio
import logging

from .geo import Location
from .providers import (
    GeocodingProvider,
    LocationError,
    PositioningProvider,
    PositionUnavailable,
    ProviderStatus,
)

logger = logging.getLogger(__name__)

# Name used by search callers for a failed "where am I" lookup
LocationUnavailable = PositionUnavailable


class AddressNotFound(LocationError):
    """Forward geocoding produced no match for an address."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Unable to find location for address: '{address}'")


class LocationProvider:
    """
    Resolves locations through the configured positioning and geocoding
    providers.

    Holds no mutable state and caches nothing; every call is a fresh round
    trip to the providers.
    """

    def __init__(
        self,
        positioning: PositioningProvider,
        geocoding: GeocodingProvider,
        timeout: float = 10.0,
    ):
        """
        Initialize the location provider.

        Args:
            positioning: Backend answering "where is the caller".
            geocoding: Backend for address <-> coordinate lookups.
            timeout: Seconds to wait for a position before giving up.
        """
        self.positioning = positioning
        self.geocoding = geocoding
        self.timeout = timeout

    @property
    def status(self) -> ProviderStatus:
        """Availability of address lookups."""
        return self.geocoding.status

    async def get_current_location(self) -> Location:
        """
        Get the caller's current location with a best-effort address.

        Returns:
            Location whose address is the reverse-geocoded address, or the
            coordinate rendered as "lat, lng" when that lookup fails.

        Raises:
            PositionUnavailable: If positioning is absent, denied or times out.
        """
        try:
            coordinate = await asyncio.wait_for(
                self.positioning.get_position(), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Positioning timed out after {self.timeout}s")
            raise PositionUnavailable(
                f"Timed out after {self.timeout}s waiting for a position"
            ) from e

        address = await self.geocoding.reverse_geocode(coordinate)
        if not address:
            address = coordinate.format()

        return Location(coordinate=coordinate, address=address)

    async def geocode_address(self, address: str) -> Location:
        """
        Resolve a free-text address to a location.

        Args:
            address: Address as typed by the user.

        Returns:
            Location with the resolved coordinate and the address as given.

        Raises:
            AddressNotFound: If the provider has no match or is not configured.
        """
        cleaned = " ".join((address or "").split())
        if not cleaned:
            raise AddressNotFound(address or "")

        coordinate = await self.geocoding.forward_geocode(cleaned)
        if coordinate is None:
            logger.warning(f"Could not geocode address: {cleaned}")
            raise AddressNotFound(address)

        return Location(coordinate=coordinate, address=address)
