#!/usr/bin/env python3
"""
Test script for location resolution and the geocoding/positioning providers.

No network access: geopy geocoders are replaced by small fakes and the IP
positioning endpoint is served by httpx.MockTransport.
"""

import asyncio
import logging
import os
import sys
from types import SimpleNamespace

import httpx
import pytest
from geopy.exc import GeocoderServiceError, GeocoderTimedOut

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from laborscout.config import GeocodingConfig, PositioningConfig
from laborscout.geo import Coordinate
from laborscout.locator import AddressNotFound, LocationProvider, LocationUnavailable
from laborscout.providers import (
    GeopyGeocodingProvider,
    IPPositioningProvider,
    NullGeocodingProvider,
    NullPositioningProvider,
    PositionUnavailable,
    ProviderStatus,
    StaticPositioningProvider,
    build_geocoding_provider,
    build_positioning_provider,
)

from fixtures import ORIGIN, FakeGeocoder, FakePositioning


class StubGeopy:
    """Mimics the parts of a geopy geocoder the provider uses."""

    def __init__(self, geocode_result=None, reverse_result=None, error=None):
        self.geocode_result = geocode_result
        self.reverse_result = reverse_result
        self.error = error

    def geocode(self, query, exactly_one=True):
        if self.error:
            raise self.error
        return self.geocode_result

    def reverse(self, query, exactly_one=True):
        if self.error:
            raise self.error
        return self.reverse_result


class SlowPositioning(FakePositioning):
    async def get_position(self):
        await asyncio.sleep(5)
        return ORIGIN


# Location provider

def test_current_location_with_address():
    locator = LocationProvider(FakePositioning(ORIGIN), FakeGeocoder(reverse="Times Square"))
    location = asyncio.run(locator.get_current_location())
    assert location.coordinate == ORIGIN
    assert location.address == "Times Square"


def test_current_location_falls_back_to_coordinate_text():
    locator = LocationProvider(FakePositioning(ORIGIN), NullGeocodingProvider())
    location = asyncio.run(locator.get_current_location())
    assert location.address == "40.7580, -73.9855"


def test_current_location_unavailable():
    locator = LocationProvider(NullPositioningProvider(), NullGeocodingProvider())
    with pytest.raises(LocationUnavailable):
        asyncio.run(locator.get_current_location())


def test_current_location_times_out():
    locator = LocationProvider(SlowPositioning(ORIGIN), NullGeocodingProvider(), timeout=0.05)
    with pytest.raises(PositionUnavailable):
        asyncio.run(locator.get_current_location())


def test_geocode_address_keeps_typed_address():
    geocoder = FakeGeocoder(addresses={"1 Main St": ORIGIN})
    locator = LocationProvider(NullPositioningProvider(), geocoder)
    location = asyncio.run(locator.geocode_address("  1   Main St "))
    assert location.coordinate == ORIGIN
    assert location.address == "  1   Main St "
    assert geocoder.forward_calls == ["1 Main St"]


def test_geocode_without_provider_never_returns_origin():
    locator = LocationProvider(NullPositioningProvider(), NullGeocodingProvider())
    assert locator.status == ProviderStatus.UNAVAILABLE
    with pytest.raises(AddressNotFound) as excinfo:
        asyncio.run(locator.geocode_address("1 Main St"))
    assert excinfo.value.address == "1 Main St"


def test_geocode_blank_address():
    locator = LocationProvider(NullPositioningProvider(), FakeGeocoder())
    with pytest.raises(AddressNotFound):
        asyncio.run(locator.geocode_address("   "))


# geopy provider

def test_geopy_forward_geocode():
    stub = StubGeopy(geocode_result=SimpleNamespace(latitude=40.7580, longitude=-73.9855))
    provider = GeopyGeocodingProvider(stub)
    assert asyncio.run(provider.forward_geocode("Times Square")) == ORIGIN


def test_geopy_reverse_geocode():
    stub = StubGeopy(reverse_result=SimpleNamespace(address="Times Square, Manhattan"))
    provider = GeopyGeocodingProvider(stub)
    assert asyncio.run(provider.reverse_geocode(ORIGIN)) == "Times Square, Manhattan"


def test_geopy_no_match_is_none():
    provider = GeopyGeocodingProvider(StubGeopy())
    assert asyncio.run(provider.forward_geocode("Atlantis")) is None
    assert asyncio.run(provider.reverse_geocode(ORIGIN)) is None


@pytest.mark.parametrize("error", [
    GeocoderTimedOut("timed out"),
    GeocoderServiceError("quota exceeded"),
    RuntimeError("boom"),
])
def test_geopy_errors_become_none(error):
    provider = GeopyGeocodingProvider(StubGeopy(error=error))
    assert asyncio.run(provider.forward_geocode("Times Square")) is None
    assert asyncio.run(provider.reverse_geocode(ORIGIN)) is None


def test_geopy_invalid_result_discarded():
    stub = StubGeopy(geocode_result=SimpleNamespace(latitude=123.0, longitude=0.0))
    provider = GeopyGeocodingProvider(stub)
    assert asyncio.run(provider.forward_geocode("Nowhere")) is None


# Provider construction

def test_build_geocoding_none():
    provider = build_geocoding_provider(GeocodingConfig(provider="none"))
    assert provider.status == ProviderStatus.UNAVAILABLE


@pytest.mark.parametrize("api_key", [None, "", "demo_google_maps_key"])
def test_build_google_without_real_key_degrades(api_key):
    provider = build_geocoding_provider(GeocodingConfig(provider="google", api_key=api_key))
    assert isinstance(provider, NullGeocodingProvider)


def test_unconfigured_google_warns_once(caplog):
    with caplog.at_level(logging.WARNING):
        geocoding = build_geocoding_provider(GeocodingConfig(provider="google"))
        LocationProvider(NullPositioningProvider(), geocoding)
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "API key not configured" in warnings[0].getMessage()


def test_build_nominatim():
    provider = build_geocoding_provider(GeocodingConfig(provider="nominatim"))
    assert isinstance(provider, GeopyGeocodingProvider)
    assert provider.status == ProviderStatus.AVAILABLE


def test_build_static_positioning():
    config = PositioningConfig(provider="static", latitude=40.7580, longitude=-73.9855)
    provider = build_positioning_provider(config)
    assert isinstance(provider, StaticPositioningProvider)
    assert asyncio.run(provider.get_position()) == ORIGIN


def test_build_default_positioning_is_null():
    provider = build_positioning_provider(PositioningConfig())
    assert provider.status == ProviderStatus.UNAVAILABLE


# IP positioning

def ip_provider(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return IPPositioningProvider("https://ip.example/json", timeout=1.0, client=client)


def test_ip_positioning_ipapi_payload():
    provider = ip_provider(
        lambda request: httpx.Response(200, json={"latitude": 40.758, "longitude": -73.9855})
    )
    assert asyncio.run(provider.get_position()) == Coordinate(40.758, -73.9855)


def test_ip_positioning_lat_lon_payload():
    provider = ip_provider(
        lambda request: httpx.Response(200, json={"lat": 51.5, "lon": -0.12})
    )
    assert asyncio.run(provider.get_position()) == Coordinate(51.5, -0.12)


def test_ip_positioning_http_error():
    provider = ip_provider(lambda request: httpx.Response(429, json={"error": True}))
    with pytest.raises(PositionUnavailable):
        asyncio.run(provider.get_position())


def test_ip_positioning_bad_payload():
    provider = ip_provider(lambda request: httpx.Response(200, json={"city": "Springfield"}))
    with pytest.raises(PositionUnavailable):
        asyncio.run(provider.get_position())


def test_ip_positioning_connection_error():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    provider = ip_provider(handler)
    with pytest.raises(PositionUnavailable):
        asyncio.run(provider.get_position())


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
