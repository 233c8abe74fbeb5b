"""
External location providers for Labor Scout.

Geocoding (address <-> coordinate) and positioning (where is the caller)
backends. Each provider reports a ProviderStatus decided once at build time,
so callers branch on an explicit value instead of probing for a client.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

import httpx
from geopy.exc import GeocoderServiceError, GeocoderTimedOut
from geopy.geocoders import GoogleV3, Nominatim

from .config import GeocodingConfig, PositioningConfig, has_real_api_key
from .geo import Coordinate

logger = logging.getLogger(__name__)


class ProviderStatus(Enum):
    """Whether an external provider can be used."""
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class LocationError(Exception):
    """Base class for location lookup failures surfaced to callers."""


class PositionUnavailable(LocationError):
    """Positioning is absent, was denied, or timed out."""


class GeocodingProvider(ABC):
    """Abstract base class for geocoding backends.

    Both lookups return None when there is no answer; None means "use the
    fallback", never a fatal condition.
    """

    @property
    @abstractmethod
    def status(self) -> ProviderStatus:
        pass

    @abstractmethod
    async def reverse_geocode(self, coordinate: Coordinate) -> Optional[str]:
        """Resolve a coordinate to a human-readable address."""
        pass

    @abstractmethod
    async def forward_geocode(self, address: str) -> Optional[Coordinate]:
        """Resolve a free-text address to a coordinate."""
        pass


class NullGeocodingProvider(GeocodingProvider):
    """Stand-in used when no geocoding backend is configured."""

    @property
    def status(self) -> ProviderStatus:
        return ProviderStatus.UNAVAILABLE

    async def reverse_geocode(self, coordinate: Coordinate) -> Optional[str]:
        return None

    async def forward_geocode(self, address: str) -> Optional[Coordinate]:
        return None


class GeopyGeocodingProvider(GeocodingProvider):
    """
    Geocoding through a geopy geocoder (Nominatim, GoogleV3, ...).

    geopy's geocoders are blocking, so lookups run in the default executor.
    """

    def __init__(self, geocoder):
        """
        Args:
            geocoder: A geopy geocoder instance exposing geocode() and reverse().
        """
        self.geocoder = geocoder

    @property
    def status(self) -> ProviderStatus:
        return ProviderStatus.AVAILABLE

    async def reverse_geocode(self, coordinate: Coordinate) -> Optional[str]:
        result = await self._run(
            "reverse geocoding",
            coordinate.format(),
            lambda: self.geocoder.reverse(coordinate.as_tuple(), exactly_one=True),
        )
        if result is None:
            return None
        address = getattr(result, "address", None)
        return address or None

    async def forward_geocode(self, address: str) -> Optional[Coordinate]:
        result = await self._run(
            "geocoding",
            address,
            lambda: self.geocoder.geocode(address, exactly_one=True),
        )
        if result is None:
            return None

        try:
            coordinate = Coordinate(float(result.latitude), float(result.longitude))
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding invalid geocoding result for '{address}': {e}")
            return None

        logger.debug(f"Geocoded '{address}' -> ({coordinate.latitude}, {coordinate.longitude})")
        return coordinate

    async def _run(self, operation: str, subject: str, call):
        """
        Run a blocking geopy call, mapping provider faults to None.

        Args:
            operation: Name of the lookup, for log messages.
            subject: The address or coordinate being looked up.
            call: Zero-argument callable performing the lookup.

        Returns:
            geopy result or None if failed.
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, call)
        except GeocoderTimedOut:
            logger.warning(f"{operation.capitalize()} timeout for: {subject}")
            return None
        except GeocoderServiceError as e:
            logger.error(f"{operation.capitalize()} service error for '{subject}': {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected {operation} error for '{subject}': {e}")
            return None


def build_geocoding_provider(config: GeocodingConfig) -> GeocodingProvider:
    """
    Create the geocoding provider described by the configuration.

    A missing or placeholder Google key is a recognized degraded mode, not an
    error: it yields a NullGeocodingProvider and a single warning.
    """
    if config.provider == "none":
        logger.info("Geocoding disabled by configuration")
        return NullGeocodingProvider()

    if config.provider == "google":
        if not has_real_api_key(config.api_key):
            logger.warning(
                "Google geocoding API key not configured. Using fallback location services."
            )
            return NullGeocodingProvider()
        geocoder = GoogleV3(api_key=config.api_key, timeout=config.timeout)
    else:
        geocoder = Nominatim(user_agent=config.user_agent, timeout=config.timeout)

    logger.info(f"Geocoding provider initialized: {config.provider} (timeout={config.timeout}s)")
    return GeopyGeocodingProvider(geocoder)


class PositioningProvider(ABC):
    """Abstract base class for "where am I" backends."""

    @property
    @abstractmethod
    def status(self) -> ProviderStatus:
        pass

    @abstractmethod
    async def get_position(self) -> Coordinate:
        """
        Get the caller's current coordinate.

        Raises:
            PositionUnavailable: If no position can be determined.
        """
        pass


class NullPositioningProvider(PositioningProvider):
    """No positioning capability at all."""

    @property
    def status(self) -> ProviderStatus:
        return ProviderStatus.UNAVAILABLE

    async def get_position(self) -> Coordinate:
        raise PositionUnavailable("No positioning provider is configured")


class StaticPositioningProvider(PositioningProvider):
    """Always reports a fixed, configured coordinate."""

    def __init__(self, coordinate: Coordinate):
        self.coordinate = coordinate

    @property
    def status(self) -> ProviderStatus:
        return ProviderStatus.AVAILABLE

    async def get_position(self) -> Coordinate:
        return self.coordinate


class IPPositioningProvider(PositioningProvider):
    """
    Approximate positioning from the caller's public IP address.

    Expects a JSON endpoint returning "latitude" and "longitude" fields
    (ipapi.co style); "lat"/"lon" (ip-api.com style) are accepted too.
    """

    def __init__(
        self,
        lookup_url: str = "https://ipapi.co/json/",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            lookup_url: IP geolocation endpoint.
            timeout: Request timeout in seconds.
            client: Optional shared HTTP client (a new one is made per call otherwise).
        """
        self.lookup_url = lookup_url
        self.timeout = timeout
        self.client = client

    @property
    def status(self) -> ProviderStatus:
        return ProviderStatus.AVAILABLE

    async def get_position(self) -> Coordinate:
        try:
            if self.client is not None:
                response = await self.client.get(self.lookup_url, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.lookup_url)
        except httpx.HTTPError as e:
            logger.warning(f"IP positioning request failed: {e}")
            raise PositionUnavailable(f"IP positioning request failed: {e}") from e

        if response.status_code != 200:
            logger.warning(f"IP positioning returned HTTP {response.status_code}")
            raise PositionUnavailable(f"IP positioning returned HTTP {response.status_code}")

        try:
            data = response.json()
            latitude = data.get("latitude", data.get("lat"))
            longitude = data.get("longitude", data.get("lon"))
            return Coordinate(float(latitude), float(longitude))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"IP positioning returned an unusable payload: {e}")
            raise PositionUnavailable("IP positioning returned no usable coordinate") from e


def build_positioning_provider(config: PositioningConfig) -> PositioningProvider:
    """Create the positioning provider described by the configuration."""
    if config.provider == "static":
        coordinate = Coordinate(config.latitude, config.longitude)
        logger.info(f"Positioning provider initialized: static ({coordinate.format()})")
        return StaticPositioningProvider(coordinate)

    if config.provider == "ip":
        logger.info(f"Positioning provider initialized: ip ({config.ip_lookup_url})")
        return IPPositioningProvider(config.ip_lookup_url, timeout=config.timeout)

    logger.info("Positioning disabled by configuration")
    return NullPositioningProvider()
