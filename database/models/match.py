import uuid

from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from .base import Base, JSONType, UUIDType, utcnow

MATCH_STATUSES = ('pending', 'shortlisted', 'rejected')


class Match(Base):
    """
    Scored compatibility between one candidate and one job.

    At most one row per (candidate, job); recomputation overwrites the score,
    breakdown and evidence in place and keeps the recruiter's decision.
    """
    __tablename__ = 'match'

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    candidate_id = Column(UUIDType, ForeignKey('candidate.id', ondelete='CASCADE'), nullable=False)
    job_id = Column(UUIDType, ForeignKey('job.id', ondelete='CASCADE'), nullable=False)

    score = Column(Integer, nullable=False)
    breakdown = Column(JSONType, nullable=False, default=dict)  # {"skills", "experience", "domain", "location"}
    evidence = Column(JSONType, nullable=False, default=list)

    status = Column(Text, nullable=False, default='pending')  # pending|shortlisted|rejected

    # Source matrix versions the score was computed from
    candidate_matrix_id = Column(UUIDType, nullable=True)
    job_matrix_id = Column(UUIDType, nullable=True)

    calculated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    candidate = relationship("Candidate")
    job = relationship("Job")

    __table_args__ = (
        UniqueConstraint('candidate_id', 'job_id', name='uq_match_candidate_job'),
        Index('idx_match_job_score', 'job_id', 'score'),
        Index('idx_match_candidate', 'candidate_id'),
        Index('idx_match_status', 'status'),
    )
