#!/usr/bin/env python3
"""
Labor Scout - Location-Aware Job Matching

Main entry point. Wires configuration, location providers, the job
repository and the search pipeline together behind a small CLI.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

import yaml

from laborscout.config import Config, load_config, generate_example_config
from laborscout.database import JobCategory, SQLiteJobRepository, load_jobs_file
from laborscout.locator import AddressNotFound, LocationProvider
from laborscout.posting import JobDraft, JobPoster
from laborscout.presentation import MapPresenter, directions_url, render_text
from laborscout.providers import build_geocoding_provider, build_positioning_provider
from laborscout.search import JobSearchService, SearchCriteria
from laborscout.session import Session, SessionStore, UserRole, new_user_id


# Configure logging
def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )

    # Reduce noise from external libraries
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('geopy').setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


class LaborScoutApp:
    """
    Application container for Labor Scout.

    Builds every component from configuration once; provider availability is
    decided here and not re-checked at call sites.
    """

    def __init__(self, config: Config):
        """
        Initialize the application.

        Args:
            config: Application configuration.
        """
        self.config = config

        self.repository = SQLiteJobRepository(config.database.db_path)
        self.locator = LocationProvider(
            positioning=build_positioning_provider(config.positioning),
            geocoding=build_geocoding_provider(config.geocoding),
            timeout=config.positioning.timeout,
        )
        self.search_service = JobSearchService(
            self.repository,
            self.locator,
            default_radius_km=config.search.default_radius_km,
        )
        self.presenter = MapPresenter.from_config(config.map)
        self.sessions = SessionStore(config.session.path)

        logger.info("Labor Scout initialized")

    async def search(
        self,
        query: str = "",
        category: Optional[JobCategory] = None,
        near: Optional[str] = None,
        here: bool = False,
        radius_km: Optional[float] = None,
        sort_by_distance: bool = False,
        view: str = "list",
    ) -> str:
        """
        Run a search and render the results as text.

        Args:
            query: Free text to match.
            category: Category to restrict to.
            near: Address to search around.
            here: Search around the caller's current position.
            radius_km: Search radius; the configured default when omitted.
            sort_by_distance: Nearest-first ordering.
            view: "list" or "map".

        Returns:
            Rendered output.

        Raises:
            AddressNotFound: If `near` cannot be geocoded.
        """
        sort_by_distance = sort_by_distance or self.config.search.sort_by_distance
        origin_location = None

        if near:
            result, origin_location = await self.search_service.find_jobs_near_address(
                near, free_text=query, category=category,
                radius_km=radius_km, sort_by_distance=sort_by_distance,
            )
        elif here:
            result, origin_location = await self.search_service.find_jobs_near_me(
                free_text=query, category=category,
                radius_km=radius_km, sort_by_distance=sort_by_distance,
            )
            if origin_location is None:
                print("Location unavailable - showing jobs from everywhere.")
        else:
            result = await self.search_service.find_jobs(
                SearchCriteria(free_text=query, category=category)
            )

        origin = origin_location.coordinate if origin_location else None
        if origin_location:
            print(f"Searching near: {origin_location.address}")

        if view == "map":
            return render_text(self.presenter.present(result.jobs, origin))

        output = render_text(result.jobs)
        if origin and not result.is_empty:
            links = [f"  {job.title}: {directions_url(origin, job)}" for job in result.jobs]
            output += "\n\nDirections:\n" + "\n".join(links)
        return output

    def import_jobs(self, path: str) -> int:
        """Load job fixtures from a YAML file into the database."""
        jobs = load_jobs_file(path)
        for job in jobs:
            self.repository.create_job(job)
        logger.info(f"Imported {len(jobs)} jobs into {self.config.database.db_path}")
        return len(jobs)

    async def post_job(self, path: str) -> str:
        """
        Post a job described in a YAML file as the signed-in employer.

        Returns:
            ID of the new job.

        Raises:
            PermissionError: If no employer is signed in.
            AddressNotFound: If the job's address cannot be geocoded.
        """
        session = self.sessions.load()
        if session is None:
            raise PermissionError("No user is signed in")

        with open(path, "r") as f:
            draft = JobDraft.from_dict(yaml.safe_load(f) or {})

        poster = JobPoster(self.repository, self.locator)
        job = await poster.post(session, draft)
        return job.id

    def sign_in(self, name: str, role: UserRole) -> Session:
        """Start a session for a user and persist it."""
        session = Session(user_id=new_user_id(), name=name, role=role)
        self.sessions.save(session)
        logger.info(f"Signed in {name} as {role.value}")
        return session

    def sign_out(self) -> None:
        self.sessions.clear()

    def print_stats(self) -> None:
        """Print database statistics."""
        stats = self.repository.get_stats()

        print("\n" + "=" * 40)
        print("LABOR SCOUT DATABASE STATISTICS")
        print("=" * 40)
        print(f"Total jobs: {stats['total_jobs']}")
        print(f"Urgent open jobs: {stats['urgent_open_jobs']}")

        print("\nJobs by status:")
        for status, count in stats.get('by_status', {}).items():
            print(f"  {status}: {count}")

        print("\nOpen jobs by category:")
        for category, count in stats.get('open_by_category', {}).items():
            print(f"  {category}: {count}")

        print("=" * 40 + "\n")


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Labor Scout - Location-Aware Job Matching",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --query garden                 Search open jobs by text
  %(prog)s --category construction --here Construction jobs near you
  %(prog)s --near "Times Square, NY" --radius 5 --view map
  %(prog)s --import-jobs jobs.yaml        Load job fixtures
  %(prog)s --post-job job.yaml            Post a job as the signed-in employer
  %(prog)s --stats                        Show database statistics
  %(prog)s --init-config                  Generate example config file
        """
    )

    parser.add_argument(
        '-c', '--config',
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--log-file',
        help='Write logs to file'
    )

    parser.add_argument(
        '--query',
        default='',
        help='Text to match in job titles, descriptions and requirements'
    )

    parser.add_argument(
        '--category',
        choices=[c.value for c in JobCategory],
        help='Only show jobs in this category'
    )

    location_group = parser.add_mutually_exclusive_group()
    location_group.add_argument(
        '--near',
        metavar='ADDRESS',
        help='Search around this address'
    )
    location_group.add_argument(
        '--here',
        action='store_true',
        help='Search around your current location'
    )

    parser.add_argument(
        '--radius',
        type=float,
        help='Search radius in km (default from config)'
    )

    parser.add_argument(
        '--sort-distance',
        action='store_true',
        help='Show nearest jobs first instead of newest first'
    )

    parser.add_argument(
        '--view',
        choices=['list', 'map'],
        default='list',
        help='Result presentation (default: list)'
    )

    parser.add_argument(
        '--import-jobs',
        metavar='PATH',
        help='Import job listings from a YAML file'
    )

    parser.add_argument(
        '--post-job',
        metavar='PATH',
        help='Post the job described in a YAML file'
    )

    parser.add_argument(
        '--sign-in',
        metavar='NAME',
        help='Start a session under this name (see --role)'
    )

    parser.add_argument(
        '--role',
        choices=[r.value for r in UserRole],
        default=UserRole.LABORER.value,
        help='Role for --sign-in (default: laborer)'
    )

    parser.add_argument(
        '--sign-out',
        action='store_true',
        help='End the current session'
    )

    parser.add_argument(
        '--stats',
        action='store_true',
        help='Show database statistics'
    )

    parser.add_argument(
        '--init-config',
        action='store_true',
        help='Generate example configuration file'
    )

    args = parser.parse_args()

    # Set up logging
    setup_logging(verbose=args.verbose, log_file=args.log_file)

    # Handle init-config separately
    if args.init_config:
        generate_example_config()
        return

    # Load configuration
    try:
        config = load_config(args.config)
        logger.info(f"Loaded configuration from: {args.config}")
    except FileNotFoundError as e:
        logger.error(str(e))
        logger.info("Run with --init-config to generate an example configuration file")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    app = LaborScoutApp(config)

    if args.stats:
        app.print_stats()
        return

    if args.sign_in:
        session = app.sign_in(args.sign_in, UserRole(args.role))
        print(f"Signed in as {session.name} ({session.role.value})")
        return

    if args.sign_out:
        app.sign_out()
        print("Signed out")
        return

    if args.import_jobs:
        count = app.import_jobs(args.import_jobs)
        print(f"Imported {count} jobs")
        return

    if args.post_job:
        try:
            job_id = await app.post_job(args.post_job)
        except (AddressNotFound, PermissionError, ValueError) as e:
            logger.error(f"Job not posted: {e}")
            sys.exit(1)
        print(f"Job posted: {job_id}")
        return

    try:
        output = await app.search(
            query=args.query,
            category=JobCategory(args.category) if args.category else None,
            near=args.near,
            here=args.here,
            radius_km=args.radius,
            sort_by_distance=args.sort_distance,
            view=args.view,
        )
    except AddressNotFound as e:
        logger.error(str(e))
        sys.exit(1)

    print(output)


if __name__ == "__main__":
    asyncio.run(main())
