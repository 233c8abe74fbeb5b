"""
Shared builders for the Labor Scout test scripts.
"""

import os
import sys
from datetime import datetime, timedelta
from typing import Optional

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from laborscout.database import JobCategory, JobListing, JobStatus, PayType
from laborscout.geo import Coordinate, Location
from laborscout.providers import (
    GeocodingProvider,
    PositioningProvider,
    PositionUnavailable,
    ProviderStatus,
)

# Times Square
ORIGIN = Coordinate(40.7580, -73.9855)

BASE_TIME = datetime(2024, 3, 1, 9, 0, 0)


def make_job(
    job_id: str,
    title: str,
    latitude: float = 40.7590,
    longitude: float = -73.9845,
    category: JobCategory = JobCategory.OTHER,
    description: str = "",
    requirements=(),
    status: JobStatus = JobStatus.OPEN,
    urgent: bool = False,
    age_hours: int = 0,
    address: str = "",
    pay_rate: float = 20.0,
    pay_type: PayType = PayType.HOURLY,
) -> JobListing:
    """Build a job; larger age_hours means an older listing."""
    return JobListing(
        id=job_id,
        title=title,
        description=description,
        category=category,
        location=Location(Coordinate(latitude, longitude), address),
        pay_rate=pay_rate,
        pay_type=pay_type,
        requirements=tuple(requirements),
        status=status,
        urgent=urgent,
        created_at=BASE_TIME - timedelta(hours=age_hours),
    )


class FakeGeocoder(GeocodingProvider):
    """Answers from a fixed address book."""

    def __init__(self, addresses: Optional[dict] = None, reverse: Optional[str] = None):
        self.addresses = addresses or {}
        self.reverse = reverse
        self.forward_calls = []

    @property
    def status(self) -> ProviderStatus:
        return ProviderStatus.AVAILABLE

    async def reverse_geocode(self, coordinate: Coordinate) -> Optional[str]:
        return self.reverse

    async def forward_geocode(self, address: str) -> Optional[Coordinate]:
        self.forward_calls.append(address)
        return self.addresses.get(address)


class FakePositioning(PositioningProvider):
    """Returns a fixed coordinate, or raises when none is set."""

    def __init__(self, coordinate: Optional[Coordinate] = None):
        self.coordinate = coordinate

    @property
    def status(self) -> ProviderStatus:
        if self.coordinate is None:
            return ProviderStatus.UNAVAILABLE
        return ProviderStatus.AVAILABLE

    async def get_position(self) -> Coordinate:
        if self.coordinate is None:
            raise PositionUnavailable("permission denied")
        return self.coordinate
