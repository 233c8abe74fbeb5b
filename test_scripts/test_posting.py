#!/usr/bin/env python3
"""
Test script for sessions and job posting.
"""

import asyncio
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from laborscout.config import Config, DatabaseConfig, SessionConfig
from laborscout.database import InMemoryJobRepository, JobCategory, JobStatus, PayType
from laborscout.geo import Location
from laborscout.locator import AddressNotFound, LocationProvider
from laborscout.posting import JobDraft, JobPoster
from laborscout.providers import NullPositioningProvider
from laborscout.session import Session, SessionStore, UserRole, new_user_id

from fixtures import ORIGIN, FakeGeocoder
from main import LaborScoutApp

EMPLOYER = Session(user_id="emp-1", name="Rosa", role=UserRole.EMPLOYER)
LABORER = Session(user_id="lab-1", name="Sam", role=UserRole.LABORER)


def make_poster(addresses=None):
    repository = InMemoryJobRepository()
    locator = LocationProvider(NullPositioningProvider(), FakeGeocoder(addresses=addresses))
    return JobPoster(repository, locator), repository


def draft(**overrides):
    values = dict(
        title="  Paint fence ",
        description="Two coats, white",
        category=JobCategory.HOUSEHOLD,
        address="1 Main St",
        pay_rate=25,
        pay_type=PayType.HOURLY,
        requirements=["Brushes", "  "],
    )
    values.update(overrides)
    return JobDraft(**values)


def test_employer_posts_job():
    poster, repository = make_poster({"1 Main St": ORIGIN})
    job = asyncio.run(poster.post(EMPLOYER, draft()))

    assert job.title == "Paint fence"
    assert job.status == JobStatus.OPEN
    assert job.coordinate == ORIGIN
    assert job.location.address == "1 Main St"
    assert job.requirements == ("Brushes",)
    assert job.employer_id == "emp-1"
    assert job.created_at is not None
    assert job.start_date == job.created_at
    assert repository.get_job_by_id(job.id) == job


def test_laborer_cannot_post():
    poster, repository = make_poster({"1 Main St": ORIGIN})
    with pytest.raises(PermissionError):
        asyncio.run(poster.post(LABORER, draft()))
    assert repository.list_open_jobs() == []


def test_unresolvable_address_stores_nothing():
    poster, repository = make_poster({})
    with pytest.raises(AddressNotFound):
        asyncio.run(poster.post(EMPLOYER, draft()))
    assert repository.list_open_jobs() == []


@pytest.mark.parametrize("overrides", [{"title": "   "}, {"pay_rate": 0}, {"pay_rate": -3}])
def test_invalid_drafts_rejected(overrides):
    poster, repository = make_poster({"1 Main St": ORIGIN})
    with pytest.raises(ValueError):
        asyncio.run(poster.post(EMPLOYER, draft(**overrides)))
    assert repository.list_open_jobs() == []


def test_draft_from_dict():
    job_draft = JobDraft.from_dict({
        "title": "Move boxes",
        "category": "transportation",
        "address": "5 Elm St",
        "pay_rate": "90",
        "pay_type": "fixed",
        "urgent": True,
        "start_date": "2024-05-01T08:00:00",
    })
    assert job_draft.category == JobCategory.TRANSPORTATION
    assert job_draft.pay_rate == 90.0
    assert job_draft.pay_type == PayType.FIXED
    assert job_draft.urgent is True
    assert job_draft.start_date.month == 5
    assert job_draft.requirements == []


def test_session_store_round_trip(tmp_path):
    store = SessionStore(str(tmp_path / "session.json"))
    assert store.load() is None

    session = Session("emp-1", "Rosa", UserRole.EMPLOYER, Location(ORIGIN, "Times Square"))
    store.save(session)
    assert store.load() == session
    assert store.load().is_employer

    store.clear()
    assert store.load() is None


def test_new_user_ids_are_unique():
    first, second = new_user_id(), new_user_id()
    assert first != second
    assert len(first) == 36


def test_app_sign_in_persists_session(tmp_path):
    config = Config(
        database=DatabaseConfig(db_path=str(tmp_path / "jobs.db")),
        session=SessionConfig(path=str(tmp_path / "session.json")),
    )
    app = LaborScoutApp(config)
    session = app.sign_in("Rosa", UserRole.EMPLOYER)

    assert app.sessions.load() == session
    assert session.is_employer

    app.sign_out()
    assert app.sessions.load() is None


def test_session_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json")
    assert SessionStore(str(path)).load() is None


def test_session_store_ignores_unknown_role(tmp_path):
    path = tmp_path / "session.json"
    path.write_text('{"user_id": "x", "name": "X", "role": "admin"}')
    assert SessionStore(str(path)).load() is None


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
