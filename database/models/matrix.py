import uuid

from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base, JSONType, UUIDType, utcnow


class CandidateMatrix(Base):
    """
    Signals extracted from one CV revision by the external generator.

    Rows are never updated. Regenerating from a new CV inserts a new row;
    the most recently generated row is the candidate's current matrix.

    JSON shapes:
    - skills: [{"name": "Go", "level": "expert", "years": 4}] or ["Go", ...]
    - roles: [{"title": "Backend Engineer", "years": 3}]
    - domains: ["fintech", ...]
    - location_signals: {"country", "city", "preferred_countries", "preferred_cities",
                         "remote_affinity", "willing_to_relocate"}
    - evidence: [{"category": "skill", "text": "...", "source": "page 1"}]
    """
    __tablename__ = 'candidate_matrix'

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    candidate_id = Column(UUIDType, ForeignKey('candidate.id', ondelete='CASCADE'), nullable=False)
    cv_file_id = Column(UUIDType, nullable=True)

    skills = Column(JSONType, nullable=False, default=list)
    roles = Column(JSONType, nullable=False, default=list)
    total_years_experience = Column(Integer, nullable=False, default=0)
    domains = Column(JSONType, nullable=False, default=list)
    education = Column(JSONType, nullable=False, default=list)
    languages = Column(JSONType, nullable=False, default=list)
    location_signals = Column(JSONType, nullable=False, default=dict)

    confidence = Column(Integer, nullable=True)  # 0-100, null for legacy rows
    evidence = Column(JSONType, nullable=False, default=list)

    model_version = Column(Text, nullable=True)
    generated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    candidate = relationship("Candidate", back_populates="matrices")

    __table_args__ = (
        Index('idx_candidate_matrix_candidate', 'candidate_id', 'generated_at'),
    )


class JobMatrix(Base):
    """
    Signals extracted from a job posting. One row per job, replaced wholesale
    when the posting is edited.

    JSON shapes:
    - required_skills / preferred_skills: ["Go", {"skill": "SQL", "weight": 80}]
    - domains: ["fintech"]
    - location: {"country": "DE", "city": "Berlin", "location_type": "onsite|hybrid|remote"}
    """
    __tablename__ = 'job_matrix'

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    job_id = Column(UUIDType, ForeignKey('job.id', ondelete='CASCADE'), nullable=False, unique=True)

    required_skills = Column(JSONType, nullable=False, default=list)
    preferred_skills = Column(JSONType, nullable=False, default=list)

    # Relative magnitudes matter, not the absolute scale
    experience_weight = Column(Integer, nullable=False, default=0)
    location_weight = Column(Integer, nullable=False, default=0)
    domain_weight = Column(Integer, nullable=False, default=0)

    min_years_experience = Column(Integer, nullable=True)
    domains = Column(JSONType, nullable=False, default=list)
    location = Column(JSONType, nullable=False, default=dict)

    model_version = Column(Text, nullable=True)
    generated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    job = relationship("Job", back_populates="matrix")
