"""
Presentation boundary for Labor Scout.

Turns search results into a map view model, or into a short static list when
the mapping provider cannot be used. Rendering itself belongs to the UI; the
views here are plain data. Also holds the display formatting shared by list
and map output.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from .config import MapConfig, has_real_api_key
from .database import JobCategory, JobListing, PayType, ScoredJob
from .geo import Coordinate, format_distance
from .providers import ProviderStatus

logger = logging.getLogger(__name__)

URGENT_MARKER_COLOR = "#DC2626"
DEFAULT_MARKER_COLOR = "#059669"

CATEGORY_COLORS = {
    JobCategory.CONSTRUCTION: "#F97316",
    JobCategory.AGRICULTURE: "#059669",
    JobCategory.HOUSEHOLD: "#2563EB",
    JobCategory.TRANSPORTATION: "#7C3AED",
    JobCategory.OTHER: "#6B7280",
}

PAY_TYPE_SUFFIX = {
    PayType.HOURLY: "hr",
    PayType.DAILY: "day",
    PayType.FIXED: "job",
}

FALLBACK_NOTICE = "Configure a maps API key to see job locations on an interactive map."


def category_color(category: JobCategory) -> str:
    return CATEGORY_COLORS.get(category, CATEGORY_COLORS[JobCategory.OTHER])


def format_pay_rate(rate: float, pay_type: PayType) -> str:
    """Format a pay rate for display, e.g. "$15/hr" or "$22.5/day"."""
    return f"${rate:g}/{PAY_TYPE_SUFFIX[pay_type]}"


def directions_url(origin: Coordinate, job: JobListing) -> str:
    """Google Maps driving directions link from the origin to a job."""
    destination = job.coordinate
    return (
        "https://www.google.com/maps/dir/"
        f"{origin.latitude},{origin.longitude}/"
        f"{destination.latitude},{destination.longitude}"
    )


def detect_map_status(config: MapConfig) -> ProviderStatus:
    """Decide once whether the interactive map can be initialized."""
    if has_real_api_key(config.api_key):
        return ProviderStatus.AVAILABLE
    logger.warning("Maps API key not configured. Map view will fall back to a job list.")
    return ProviderStatus.UNAVAILABLE


def distance_text(job: JobListing) -> Optional[str]:
    if isinstance(job, ScoredJob):
        return format_distance(job.distance_km)
    return None


@dataclass
class MapMarker:
    """A pin on the map."""
    job_id: Optional[str]
    title: str
    coordinate: Coordinate
    color: str


@dataclass
class MapBounds:
    """Smallest box containing every marker."""
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def around(cls, coordinates: Sequence[Coordinate]) -> "MapBounds":
        return cls(
            south=min(c.latitude for c in coordinates),
            west=min(c.longitude for c in coordinates),
            north=max(c.latitude for c in coordinates),
            east=max(c.longitude for c in coordinates),
        )


@dataclass
class MapView:
    """Interactive map view model."""
    center: Coordinate
    zoom: int
    markers: list[MapMarker] = field(default_factory=list)
    user_marker: Optional[MapMarker] = None
    bounds: Optional[MapBounds] = None


@dataclass
class ListEntry:
    """One row of the static fallback list."""
    job_id: str
    title: str
    address: str
    color: str
    distance: Optional[str] = None


@dataclass
class StaticListView:
    """Degraded presentation used when no map can be shown."""
    entries: list[ListEntry]
    notice: str = FALLBACK_NOTICE
    total_jobs: int = 0


View = Union[MapView, StaticListView]


class MapPresenter:
    """
    Builds the map or fallback view for a set of search results.

    present() never raises: any failure building the map degrades to the
    static list.
    """

    def __init__(self, status: ProviderStatus, config: Optional[MapConfig] = None):
        self.status = status
        self.config = config or MapConfig()

    @classmethod
    def from_config(cls, config: MapConfig) -> "MapPresenter":
        return cls(detect_map_status(config), config)

    def present(
        self,
        jobs: Sequence[JobListing],
        user_coordinate: Optional[Coordinate] = None,
    ) -> View:
        """
        Build the view for the given jobs.

        Args:
            jobs: Search results in display order.
            user_coordinate: Caller's position, if known.

        Returns:
            MapView when the mapping provider is available, else StaticListView.
        """
        if self.status == ProviderStatus.AVAILABLE:
            try:
                return self._build_map(jobs, user_coordinate)
            except Exception as e:
                logger.error(f"Error building map view, falling back to list: {e}")

        return self._build_fallback(jobs)

    def _build_map(
        self,
        jobs: Sequence[JobListing],
        user_coordinate: Optional[Coordinate],
    ) -> MapView:
        center = user_coordinate or Coordinate(
            self.config.default_latitude, self.config.default_longitude
        )

        markers = [
            MapMarker(
                job_id=job.id,
                title=job.title,
                coordinate=job.coordinate,
                color=URGENT_MARKER_COLOR if job.urgent else DEFAULT_MARKER_COLOR,
            )
            for job in jobs
        ]

        user_marker = None
        if user_coordinate is not None:
            user_marker = MapMarker(
                job_id=None,
                title="Your Location",
                coordinate=user_coordinate,
                color="#2563EB",
            )

        bounds = None
        if markers:
            points = [m.coordinate for m in markers]
            if user_coordinate is not None:
                points.append(user_coordinate)
            bounds = MapBounds.around(points)

        return MapView(
            center=center,
            zoom=self.config.zoom,
            markers=markers,
            user_marker=user_marker,
            bounds=bounds,
        )

    def _build_fallback(self, jobs: Sequence[JobListing]) -> StaticListView:
        shown = list(jobs)[: self.config.fallback_list_size]
        entries = [
            ListEntry(
                job_id=job.id,
                title=job.title,
                address=job.location.address,
                color=category_color(job.category),
                distance=distance_text(job),
            )
            for job in shown
        ]
        return StaticListView(entries=entries, total_jobs=len(jobs))


def render_job_line(job: JobListing) -> str:
    """One-line plain-text summary of a job."""
    parts = [
        job.title,
        job.category.value.capitalize(),
        format_pay_rate(job.pay_rate, job.pay_type),
        job.location.address or job.coordinate.format(),
    ]
    distance = distance_text(job)
    if distance:
        parts.append(distance)
    line = " | ".join(parts)
    if job.urgent:
        line = f"[URGENT] {line}"
    return line


def render_text(view_or_jobs: Union[View, Sequence[JobListing]]) -> str:
    """
    Plain-text rendering of a list of jobs or a view, for the CLI.

    Args:
        view_or_jobs: A MapView, StaticListView or list of jobs.

    Returns:
        Printable text. Empty results render an explicit "No jobs found".
    """
    if isinstance(view_or_jobs, MapView):
        view = view_or_jobs
        if not view.markers:
            return "No jobs found"
        lines = [
            f"Map centered on {view.center.format()} (zoom {view.zoom}), "
            f"{len(view.markers)} markers"
        ]
        for marker in view.markers:
            lines.append(f"  * {marker.title} @ {marker.coordinate.format()}")
        return "\n".join(lines)

    if isinstance(view_or_jobs, StaticListView):
        view = view_or_jobs
        if view.total_jobs == 0:
            return "No jobs found"
        lines = [view.notice]
        for entry in view.entries:
            line = f"  - {entry.title} ({entry.address})"
            if entry.distance:
                line += f" {entry.distance}"
            lines.append(line)
        if view.total_jobs > len(view.entries):
            lines.append(f"  ... and {view.total_jobs - len(view.entries)} more")
        return "\n".join(lines)

    jobs = list(view_or_jobs)
    if not jobs:
        return "No jobs found"
    lines = [f"{len(jobs)} jobs found"]
    lines.extend(f"  - {render_job_line(job)}" for job in jobs)
    return "\n".join(lines)
