"""
Job search for Labor Scout.

Combines the status gate, category filter, free-text filter and proximity
filter into one order-preserving pipeline, and wires it to a job repository
and the caller's location.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Union

from .database import JobCategory, JobListing, JobRepository, JobStatus, ScoredJob
from .geo import Coordinate, Location
from .geofence import within_radius
from .locator import LocationProvider, PositionUnavailable

logger = logging.getLogger(__name__)

SearchHit = Union[JobListing, ScoredJob]


@dataclass(frozen=True)
class SearchCriteria:
    """Parameters of a single search call."""
    free_text: str = ""
    category: Optional[JobCategory] = None
    origin: Optional[Coordinate] = None
    radius_km: Optional[float] = None
    sort_by_distance: bool = False

    @property
    def uses_proximity(self) -> bool:
        return self.origin is not None and self.radius_km is not None


@dataclass
class SearchResult:
    """Outcome of a search, possibly empty."""
    jobs: list[SearchHit]
    criteria: SearchCriteria

    @property
    def is_empty(self) -> bool:
        return not self.jobs

    def __len__(self) -> int:
        return len(self.jobs)


def matches_text(job: JobListing, text: str) -> bool:
    """
    Case-insensitive substring match against title, description and
    requirements. No tokenizing or scoring.
    """
    needle = text.lower()
    if needle in job.title.lower() or needle in job.description.lower():
        return True
    return any(needle in requirement.lower() for requirement in job.requirements)


class SearchEngine:
    """Stateless filter pipeline over a candidate list of jobs."""

    def search(
        self,
        all_jobs: Sequence[JobListing],
        criteria: SearchCriteria,
    ) -> list[SearchHit]:
        """
        Run the search pipeline.

        Stages, each applied only when its criteria field is set:
        1. status gate (always): only open listings
        2. category
        3. free text
        4. proximity (needs both origin and radius; attaches distance_km)

        Every stage is stable, so the result keeps the order of `all_jobs`.

        Args:
            all_jobs: Candidate jobs, usually newest first from the repository.
            criteria: What to search for.

        Returns:
            Matching jobs; ScoredJob entries when proximity was applied.
        """
        jobs: list[JobListing] = [j for j in all_jobs if j.status == JobStatus.OPEN]

        if criteria.category is not None:
            jobs = [j for j in jobs if j.category == criteria.category]

        if criteria.free_text:
            jobs = [j for j in jobs if matches_text(j, criteria.free_text)]

        if criteria.uses_proximity:
            return within_radius(
                criteria.origin,
                criteria.radius_km,
                jobs,
                sort_by_distance=criteria.sort_by_distance,
            )

        return jobs


def search_jobs(all_jobs: Sequence[JobListing], criteria: SearchCriteria) -> list[SearchHit]:
    """Module-level shortcut for SearchEngine().search()."""
    return SearchEngine().search(all_jobs, criteria)


class JobSearchService:
    """
    Location-aware job search over a repository.

    Repository reads and location lookups are I/O; filtering is not.
    """

    def __init__(
        self,
        repository: JobRepository,
        locator: LocationProvider,
        engine: Optional[SearchEngine] = None,
        default_radius_km: float = 50.0,
    ):
        """
        Args:
            repository: Source of job listings.
            locator: Resolves the caller's location and typed addresses.
            engine: Search pipeline (a fresh SearchEngine by default).
            default_radius_km: Radius used when a location is known but no
                radius was asked for.
        """
        self.repository = repository
        self.locator = locator
        self.engine = engine or SearchEngine()
        self.default_radius_km = default_radius_km

    async def find_jobs(self, criteria: SearchCriteria) -> SearchResult:
        """
        Fetch candidate jobs and run the search pipeline.

        Args:
            criteria: What to search for.

        Returns:
            SearchResult, possibly empty.
        """
        loop = asyncio.get_running_loop()
        candidates = await loop.run_in_executor(
            None,
            lambda: self.repository.list_open_jobs(category=criteria.category),
        )

        jobs = self.engine.search(candidates, criteria)
        logger.info(f"Search matched {len(jobs)}/{len(candidates)} open jobs")
        return SearchResult(jobs=jobs, criteria=criteria)

    async def find_jobs_near_me(
        self,
        free_text: str = "",
        category: Optional[JobCategory] = None,
        radius_km: Optional[float] = None,
        sort_by_distance: bool = False,
    ) -> tuple[SearchResult, Optional[Location]]:
        """
        Search around the caller's current location.

        Without a position the search still runs, just without the
        proximity stage.

        Returns:
            Tuple of (SearchResult, Location or None if unavailable).
        """
        criteria = SearchCriteria(
            free_text=free_text,
            category=category,
            sort_by_distance=sort_by_distance,
        )

        try:
            location = await self.locator.get_current_location()
        except PositionUnavailable as e:
            logger.warning(f"Location unavailable, searching without distance filter: {e}")
            return await self.find_jobs(criteria), None

        criteria = replace(
            criteria,
            origin=location.coordinate,
            radius_km=radius_km if radius_km is not None else self.default_radius_km,
        )
        return await self.find_jobs(criteria), location

    async def find_jobs_near_address(
        self,
        address: str,
        free_text: str = "",
        category: Optional[JobCategory] = None,
        radius_km: Optional[float] = None,
        sort_by_distance: bool = False,
    ) -> tuple[SearchResult, Location]:
        """
        Search around a typed address.

        Raises:
            AddressNotFound: If the address cannot be geocoded.
        """
        location = await self.locator.geocode_address(address)
        criteria = SearchCriteria(
            free_text=free_text,
            category=category,
            origin=location.coordinate,
            radius_km=radius_km if radius_km is not None else self.default_radius_km,
            sort_by_distance=sort_by_distance,
        )
        return await self.find_jobs(criteria), location
