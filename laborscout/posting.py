"""
Job posting for Labor Scout.

An employer's draft becomes a stored listing only once its address has been
geocoded; a posting is never stored with a guessed location.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .database import (
    JobCategory,
    JobListing,
    JobRepository,
    JobStatus,
    PayType,
    new_job_id,
    parse_datetime,
)
from .locator import LocationProvider
from .session import Session

logger = logging.getLogger(__name__)


@dataclass
class JobDraft:
    """Job details as entered by an employer."""
    title: str
    description: str
    category: JobCategory
    address: str
    pay_rate: float
    pay_type: PayType = PayType.HOURLY
    duration: str = ""
    requirements: list[str] = field(default_factory=list)
    urgent: bool = False
    start_date: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict) -> "JobDraft":
        return cls(
            title=data["title"],
            description=data.get("description", ""),
            category=JobCategory(data.get("category", "other")),
            address=data["address"],
            pay_rate=float(data["pay_rate"]),
            pay_type=PayType(data.get("pay_type", "hourly")),
            duration=data.get("duration", ""),
            requirements=list(data.get("requirements") or []),
            urgent=bool(data.get("urgent", False)),
            start_date=parse_datetime(data.get("start_date")),
        )


class JobPoster:
    """Validates, geocodes and stores new job postings."""

    def __init__(self, repository: JobRepository, locator: LocationProvider):
        self.repository = repository
        self.locator = locator

    async def post(self, session: Session, draft: JobDraft) -> JobListing:
        """
        Publish a job posting for the signed-in employer.

        Args:
            session: The signed-in user; must be an employer.
            draft: The job details.

        Returns:
            The stored JobListing.

        Raises:
            PermissionError: If the session is not an employer's.
            ValueError: If the title is empty or the pay rate is not positive.
            AddressNotFound: If the address cannot be geocoded. Nothing is stored.
        """
        if not session.is_employer:
            raise PermissionError("Only employers can post jobs")

        title = draft.title.strip()
        if not title:
            raise ValueError("Job title must not be empty")
        if draft.pay_rate <= 0:
            raise ValueError(f"pay_rate must be positive, got {draft.pay_rate}")

        location = await self.locator.geocode_address(draft.address)

        now = datetime.now()
        job = JobListing(
            id=new_job_id(),
            title=title,
            description=draft.description.strip(),
            category=draft.category,
            location=location,
            pay_rate=draft.pay_rate,
            pay_type=draft.pay_type,
            requirements=tuple(r.strip() for r in draft.requirements if r.strip()),
            status=JobStatus.OPEN,
            urgent=draft.urgent,
            created_at=now,
            start_date=draft.start_date or now,
            employer_id=session.user_id,
            duration=draft.duration,
        )

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.repository.create_job, job)

        logger.info(f"Employer {session.user_id} posted job {job.id} '{job.title}'")
        return job
