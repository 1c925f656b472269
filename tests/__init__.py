#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests run against an in-memory SQLite database; no external services
are needed.

    python -m pytest tests/ -v
    python -m pytest tests/unit/pipeline -v
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.models import Base, Candidate, CandidateMatrix, Company, Job, JobMatrix


def make_session_factory():
    """Fresh in-memory database with all tables, shared by every session."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


def seed_parties(session_factory, candidate_user: bool = True) -> Dict[str, Any]:
    """One company with a user, one job, one candidate. Returns their ids."""
    session = session_factory()
    company = Company(name="Acme", user_id=uuid.uuid4())
    candidate = Candidate(name="Ada Lovelace", user_id=uuid.uuid4() if candidate_user else None)
    session.add_all([company, candidate])
    session.flush()
    job = Job(company_id=company.id, title="Backend Engineer")
    session.add(job)
    session.commit()
    ids = {
        'company_id': company.id,
        'company_user_id': company.user_id,
        'candidate_id': candidate.id,
        'candidate_user_id': candidate.user_id,
        'job_id': job.id,
    }
    session.close()
    return ids


def add_candidate(session_factory, name: str = "Grace Hopper", with_user: bool = True) -> uuid.UUID:
    session = session_factory()
    candidate = Candidate(name=name, user_id=uuid.uuid4() if with_user else None)
    session.add(candidate)
    session.commit()
    candidate_id = candidate.id
    session.close()
    return candidate_id


def add_job(session_factory, company_id, title: str = "Data Engineer") -> uuid.UUID:
    session = session_factory()
    job = Job(company_id=company_id, title=title)
    session.add(job)
    session.commit()
    job_id = job.id
    session.close()
    return job_id


def add_candidate_matrix(
    session_factory,
    candidate_id,
    skills=("Go", "SQL", "Kubernetes"),
    years: int = 7,
    domains=("fintech",),
    city: Optional[str] = "Berlin",
    country: Optional[str] = "DE",
    confidence: Optional[int] = 90,
    generated_at: Optional[datetime] = None
) -> uuid.UUID:
    session = session_factory()
    matrix = CandidateMatrix(
        candidate_id=candidate_id,
        skills=[{'name': skill} for skill in skills],
        total_years_experience=years,
        domains=list(domains),
        location_signals={'city': city, 'country': country},
        confidence=confidence,
        generated_at=generated_at or datetime.now(timezone.utc),
    )
    session.add(matrix)
    session.commit()
    matrix_id = matrix.id
    session.close()
    return matrix_id


def add_job_matrix(
    session_factory,
    job_id,
    required=("Go", "SQL"),
    preferred=(),
    weights=(3, 1, 1),
    min_years: Optional[int] = 5,
    domains=("fintech",),
    city: Optional[str] = "Berlin",
    country: Optional[str] = "DE"
) -> uuid.UUID:
    """``weights`` is (experience, domain, location)."""
    experience_weight, domain_weight, location_weight = weights
    session = session_factory()
    matrix = JobMatrix(
        job_id=job_id,
        required_skills=list(required),
        preferred_skills=list(preferred),
        experience_weight=experience_weight,
        domain_weight=domain_weight,
        location_weight=location_weight,
        min_years_experience=min_years,
        domains=list(domains),
        location={'city': city, 'country': country, 'location_type': 'onsite'},
    )
    session.add(matrix)
    session.commit()
    matrix_id = matrix.id
    session.close()
    return matrix_id


def minutes_ago(minutes: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=minutes)


class RecordingNotifier:
    """Notifier stand-in that keeps what the unit of work dispatched."""

    def __init__(self):
        self.messages = []

    def dispatch_all(self, messages):
        self.messages.extend(messages)
        return [None for _ in messages]

    def types(self):
        return [message.type for message in self.messages]
