"""
Database layer for Labor Scout.

Job listing models plus the repository seam the search core reads from:
a SQLite-backed store and an in-memory store for fixtures and demos.
"""

import json
import logging
import sqlite3
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Generator, Iterable, Optional, Union

import yaml

from .geo import Coordinate, Location

logger = logging.getLogger(__name__)


class JobCategory(Enum):
    """Kind of work a listing offers."""
    CONSTRUCTION = "construction"
    AGRICULTURE = "agriculture"
    HOUSEHOLD = "household"
    TRANSPORTATION = "transportation"
    OTHER = "other"


class PayType(Enum):
    """How the pay rate is applied."""
    HOURLY = "hourly"
    DAILY = "daily"
    FIXED = "fixed"


class JobStatus(Enum):
    """Lifecycle state of a job listing. Only OPEN listings are searchable."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class JobListing:
    """Represents a job posting."""
    id: str
    title: str
    description: str
    category: JobCategory
    location: Location
    pay_rate: float
    pay_type: PayType
    requirements: tuple[str, ...] = ()
    status: JobStatus = JobStatus.OPEN
    urgent: bool = False
    created_at: Optional[datetime] = None
    start_date: Optional[datetime] = None
    employer_id: Optional[str] = None
    duration: str = ""
    end_date: Optional[datetime] = None
    assigned_to: Optional[str] = None

    def __post_init__(self):
        if self.pay_rate <= 0:
            raise ValueError(f"pay_rate must be positive, got {self.pay_rate}")
        # Accept lists from callers but keep the stored value immutable
        if not isinstance(self.requirements, tuple):
            object.__setattr__(self, "requirements", tuple(self.requirements))

    @property
    def coordinate(self) -> Coordinate:
        return self.location.coordinate


@dataclass(frozen=True)
class ScoredJob(JobListing):
    """A job listing annotated with its distance from a search origin."""
    distance_km: float = 0.0

    @classmethod
    def from_listing(cls, job: JobListing, distance_km: float) -> "ScoredJob":
        values = {f.name: getattr(job, f.name) for f in fields(JobListing)}
        return cls(**values, distance_km=distance_km)


def new_job_id() -> str:
    return str(uuid.uuid4())


class JobRepository(ABC):
    """Storage seam for job listings."""

    @abstractmethod
    def list_open_jobs(
        self,
        category: Optional[JobCategory] = None,
        text_query: Optional[str] = None,
    ) -> list[JobListing]:
        """
        List open jobs, newest first.

        Args:
            category: Only include jobs of this category.
            text_query: Case-insensitive substring of the title or description.
        """
        pass

    @abstractmethod
    def create_job(self, job: JobListing) -> str:
        """Store a new job and return its ID."""
        pass

    @abstractmethod
    def get_job_by_id(self, job_id: str) -> Optional[JobListing]:
        pass

    @abstractmethod
    def list_jobs_by_employer(self, employer_id: str) -> list[JobListing]:
        pass

    @abstractmethod
    def update_job_status(
        self,
        job_id: str,
        status: JobStatus,
        assigned_to: Optional[str] = None,
    ) -> bool:
        """Change a job's status. Returns False if the job does not exist."""
        pass


def _newest_first(jobs: Iterable[JobListing]) -> list[JobListing]:
    return sorted(jobs, key=lambda j: j.created_at or datetime.min, reverse=True)


class InMemoryJobRepository(JobRepository):
    """Job repository backed by a plain list, for fixtures and demos."""

    def __init__(self, jobs: Optional[Iterable[JobListing]] = None):
        self._jobs: dict[str, JobListing] = {}
        for job in jobs or ():
            self._jobs[job.id] = job

    def list_open_jobs(
        self,
        category: Optional[JobCategory] = None,
        text_query: Optional[str] = None,
    ) -> list[JobListing]:
        needle = (text_query or "").strip().lower()
        result = []
        for job in self._jobs.values():
            if job.status != JobStatus.OPEN:
                continue
            if category and job.category != category:
                continue
            if needle and needle not in job.title.lower() and needle not in job.description.lower():
                continue
            result.append(job)
        return _newest_first(result)

    def create_job(self, job: JobListing) -> str:
        self._jobs[job.id] = job
        return job.id

    def get_job_by_id(self, job_id: str) -> Optional[JobListing]:
        return self._jobs.get(job_id)

    def list_jobs_by_employer(self, employer_id: str) -> list[JobListing]:
        return _newest_first(j for j in self._jobs.values() if j.employer_id == employer_id)

    def update_job_status(
        self,
        job_id: str,
        status: JobStatus,
        assigned_to: Optional[str] = None,
    ) -> bool:
        job = self._jobs.get(job_id)
        if job is None:
            return False
        values = {f.name: getattr(job, f.name) for f in fields(JobListing)}
        values["status"] = status
        if assigned_to is not None:
            values["assigned_to"] = assigned_to
        self._jobs[job_id] = JobListing(**values)
        return True


class SQLiteJobRepository(JobRepository):
    """SQLite database manager for job listings."""

    def __init__(self, db_path: str = "jobs.db"):
        """
        Initialize database connection.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._init_database()

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _init_database(self) -> None:
        """Initialize the database schema."""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS jobs (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    category TEXT NOT NULL,
                    employer_id TEXT,
                    location_lat REAL NOT NULL,
                    location_lng REAL NOT NULL,
                    location_address TEXT NOT NULL DEFAULT '',
                    pay_rate REAL NOT NULL,
                    pay_type TEXT NOT NULL,
                    duration TEXT NOT NULL DEFAULT '',
                    requirements TEXT NOT NULL DEFAULT '[]',
                    status TEXT NOT NULL DEFAULT 'open',
                    urgent BOOLEAN DEFAULT FALSE,
                    assigned_to TEXT,
                    created_at TIMESTAMP NOT NULL,
                    start_date TIMESTAMP,
                    end_date TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_jobs_category ON jobs(category)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_jobs_created ON jobs(created_at)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_jobs_employer ON jobs(employer_id)
            """)

            conn.commit()

    def create_job(self, job: JobListing) -> str:
        """
        Insert a new job into the database.

        Args:
            job: The job to insert. A missing created_at is set to now.

        Returns:
            The ID of the inserted job.
        """
        created_at = job.created_at or datetime.now()

        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO jobs (
                    id, title, description, category, employer_id,
                    location_lat, location_lng, location_address,
                    pay_rate, pay_type, duration, requirements, status, urgent,
                    assigned_to, created_at, start_date, end_date
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                job.id, job.title, job.description, job.category.value, job.employer_id,
                job.location.latitude, job.location.longitude, job.location.address,
                job.pay_rate, job.pay_type.value, job.duration,
                json.dumps(list(job.requirements)), job.status.value, job.urgent,
                job.assigned_to, created_at.isoformat(),
                job.start_date.isoformat() if job.start_date else None,
                job.end_date.isoformat() if job.end_date else None,
            ))
            conn.commit()

        logger.debug(f"Stored job {job.id} '{job.title}'")
        return job.id

    def get_job_by_id(self, job_id: str) -> Optional[JobListing]:
        """
        Get a job by its ID.

        Args:
            job_id: The ID of the job.

        Returns:
            The JobListing, or None if not found.
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM jobs WHERE id = ?", (job_id,))
            row = cursor.fetchone()
            return self._row_to_job(row) if row else None

    def list_open_jobs(
        self,
        category: Optional[JobCategory] = None,
        text_query: Optional[str] = None,
    ) -> list[JobListing]:
        """
        Get open jobs with optional category and text filtering.

        Args:
            category: Filter by job category.
            text_query: Case-insensitive substring of title or description.

        Returns:
            List of JobListing objects, newest first.
        """
        clauses = ["status = ?"]
        params: list = [JobStatus.OPEN.value]

        if category:
            clauses.append("category = ?")
            params.append(category.value)

        needle = (text_query or "").strip().lower()
        if needle:
            clauses.append("(instr(lower(title), ?) > 0 OR instr(lower(description), ?) > 0)")
            params.extend([needle, needle])

        query = f"""
            SELECT * FROM jobs
            WHERE {' AND '.join(clauses)}
            ORDER BY created_at DESC
        """

        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [self._row_to_job(row) for row in cursor.fetchall()]

    def list_jobs_by_employer(self, employer_id: str) -> list[JobListing]:
        """Get every job posted by an employer, newest first."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM jobs
                WHERE employer_id = ?
                ORDER BY created_at DESC
            """, (employer_id,))
            return [self._row_to_job(row) for row in cursor.fetchall()]

    def update_job_status(
        self,
        job_id: str,
        status: JobStatus,
        assigned_to: Optional[str] = None,
    ) -> bool:
        """
        Update a job's status, e.g. when an application is accepted.

        Args:
            job_id: The ID of the job to update.
            status: The new status.
            assigned_to: Laborer the job was given to, if any.

        Returns:
            True if a job was updated.
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            if assigned_to is not None:
                cursor.execute("""
                    UPDATE jobs SET status = ?, assigned_to = ? WHERE id = ?
                """, (status.value, assigned_to, job_id))
            else:
                cursor.execute("""
                    UPDATE jobs SET status = ? WHERE id = ?
                """, (status.value, job_id))
            conn.commit()
            return cursor.rowcount > 0

    def get_stats(self) -> dict:
        """
        Get database statistics.

        Returns:
            Dictionary with various statistics.
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()

            stats = {}

            cursor.execute("SELECT COUNT(*) FROM jobs")
            stats["total_jobs"] = cursor.fetchone()[0]

            cursor.execute("""
                SELECT status, COUNT(*)
                FROM jobs
                GROUP BY status
            """)
            stats["by_status"] = dict(cursor.fetchall())

            cursor.execute("""
                SELECT category, COUNT(*)
                FROM jobs
                WHERE status = 'open'
                GROUP BY category
            """)
            stats["open_by_category"] = dict(cursor.fetchall())

            cursor.execute("SELECT COUNT(*) FROM jobs WHERE status = 'open' AND urgent")
            stats["urgent_open_jobs"] = cursor.fetchone()[0]

            return stats

    def _row_to_job(self, row: sqlite3.Row) -> JobListing:
        """Convert a database row to a JobListing."""
        return JobListing(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            category=JobCategory(row["category"]),
            location=Location(
                coordinate=Coordinate(row["location_lat"], row["location_lng"]),
                address=row["location_address"],
            ),
            pay_rate=row["pay_rate"],
            pay_type=PayType(row["pay_type"]),
            requirements=tuple(json.loads(row["requirements"] or "[]")),
            status=JobStatus(row["status"]),
            urgent=bool(row["urgent"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            start_date=datetime.fromisoformat(row["start_date"]) if row["start_date"] else None,
            employer_id=row["employer_id"],
            duration=row["duration"],
            end_date=datetime.fromisoformat(row["end_date"]) if row["end_date"] else None,
            assigned_to=row["assigned_to"],
        )


def parse_datetime(value) -> Optional[datetime]:
    """
    Parse a datetime from YAML or user input.

    Aware values are converted to UTC and made naive so every stored
    timestamp compares with every other.
    """
    if value is None:
        return None
    if not isinstance(value, datetime):
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def job_from_dict(data: dict) -> JobListing:
    """
    Build a JobListing from a plain mapping (e.g. a YAML fixture record).

    Raises:
        KeyError: If a required field is missing.
        ValueError: If a field holds an invalid value.
    """
    location_data = data["location"]
    return JobListing(
        id=str(data.get("id") or new_job_id()),
        title=data["title"],
        description=data.get("description", ""),
        category=JobCategory(data.get("category", "other")),
        location=Location(
            coordinate=Coordinate(
                float(location_data["latitude"]),
                float(location_data["longitude"]),
            ),
            address=location_data.get("address", ""),
        ),
        pay_rate=float(data["pay_rate"]),
        pay_type=PayType(data.get("pay_type", "hourly")),
        requirements=tuple(data.get("requirements") or ()),
        status=JobStatus(data.get("status", "open")),
        urgent=bool(data.get("urgent", False)),
        created_at=parse_datetime(data.get("created_at")) or datetime.now(),
        start_date=parse_datetime(data.get("start_date")),
        employer_id=data.get("employer_id"),
        duration=data.get("duration", ""),
        end_date=parse_datetime(data.get("end_date")),
        assigned_to=data.get("assigned_to"),
    )


def load_jobs_file(path: Union[str, Path]) -> list[JobListing]:
    """
    Load job listings from a YAML file holding a list of job records.

    Args:
        path: Path to the YAML file.

    Returns:
        List of JobListing objects in file order.
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("jobs", [])

    jobs = [job_from_dict(record) for record in data]
    logger.info(f"Loaded {len(jobs)} jobs from {path}")
    return jobs
