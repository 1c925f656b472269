import uuid

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base, UUIDType, utcnow


class Company(Base):
    """
    Hiring company. Owns its pipeline stage registry.

    Only the columns the matching and pipeline engine reads are mapped here;
    profile data lives with the CRUD layer.
    """
    __tablename__ = 'company'

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    user_id = Column(UUIDType, nullable=False)  # account that receives company notifications
    name = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    jobs = relationship("Job", back_populates="company")
    stages = relationship("PipelineStage", back_populates="company", order_by="PipelineStage.order")


class Candidate(Base):
    __tablename__ = 'candidate'

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    user_id = Column(UUIDType, nullable=True)  # null for sourced candidates without an account
    name = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    matrices = relationship("CandidateMatrix", back_populates="candidate", cascade="all, delete-orphan")


class Job(Base):
    __tablename__ = 'job'

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    company_id = Column(UUIDType, ForeignKey('company.id', ondelete='CASCADE'), nullable=False)
    title = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    company = relationship("Company", back_populates="jobs")
    matrix = relationship("JobMatrix", back_populates="job", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_job_company', 'company_id'),
    )
