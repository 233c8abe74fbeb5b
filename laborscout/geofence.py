"""
Geofence module for Labor Scout.

Keeps the job listings that lie within a radius of an origin coordinate and
annotates each with its Haversine distance.
"""

import logging
from typing import Iterable, Optional

from .database import JobListing, ScoredJob
from .geo import Coordinate, haversine_distance_km

logger = logging.getLogger(__name__)


def distance_to_job(origin: Coordinate, job: JobListing) -> float:
    """Distance in kilometers from the origin to a job's location."""
    return haversine_distance_km(origin, job.coordinate)


def within_radius(
    origin: Optional[Coordinate],
    radius_km: float,
    candidates: Iterable[JobListing],
    sort_by_distance: bool = False,
) -> list[ScoredJob]:
    """
    Filter jobs to those within a radius of the origin.

    Proximity is a filter, not a ranker: survivors keep the order of
    `candidates` unless `sort_by_distance` is requested.

    Args:
        origin: Search origin. Must be a concrete coordinate.
        radius_km: Maximum distance in kilometers (inclusive).
        candidates: Jobs to consider.
        sort_by_distance: Order the result nearest-first instead.

    Returns:
        List of ScoredJob with distance_km attached.

    Raises:
        ValueError: If no origin is given.
    """
    if origin is None:
        raise ValueError("within_radius requires an origin coordinate")

    if radius_km <= 0:
        return []

    scored = []
    total = 0
    for job in candidates:
        total += 1
        distance = distance_to_job(origin, job)
        if distance <= radius_km:
            scored.append(ScoredJob.from_listing(job, distance))

    if sort_by_distance:
        scored.sort(key=lambda j: j.distance_km)

    logger.debug(
        f"Geographic filter: {len(scored)}/{total} jobs within {radius_km} km "
        f"of ({origin.format()})"
    )
    return scored
