import uuid

from sqlalchemy import Column, Integer, Text, TIMESTAMP, ForeignKey, Boolean, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from .base import Base, UUIDType, utcnow


class PipelineStage(Base):
    """
    One named step of a company's hiring workflow.

    `order` is unique within a company and `is_default` is set on exactly one
    stage per company. Both are cross-row invariants checked by the registry's
    mutating operations rather than by constraints, so reorders can rewrite
    every order value inside one transaction.
    """
    __tablename__ = 'pipeline_stage'

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    company_id = Column(UUIDType, ForeignKey('company.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    order = Column(Integer, nullable=False, default=0)
    color = Column(Text, nullable=False, default='#6B7280')
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    company = relationship("Company", back_populates="stages")

    __table_args__ = (
        Index('idx_pipeline_stage_company_order', 'company_id', 'order'),
    )


class Application(Base):
    __tablename__ = 'application'

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    candidate_id = Column(UUIDType, ForeignKey('candidate.id', ondelete='CASCADE'), nullable=False)
    job_id = Column(UUIDType, ForeignKey('job.id', ondelete='CASCADE'), nullable=False)
    match_id = Column(UUIDType, ForeignKey('match.id', ondelete='SET NULL'), nullable=True)
    current_stage_id = Column(UUIDType, ForeignKey('pipeline_stage.id'), nullable=False)
    applied_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    candidate = relationship("Candidate")
    job = relationship("Job")
    current_stage = relationship("PipelineStage")
    history = relationship(
        "ApplicationHistory",
        back_populates="application",
        order_by="ApplicationHistory.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint('candidate_id', 'job_id', name='uq_application_candidate_job'),
        Index('idx_application_stage', 'current_stage_id'),
        Index('idx_application_job', 'job_id'),
    )


class ApplicationHistory(Base):
    """
    Append-only audit trail of stage transitions.

    The integer id is monotonic and defines insertion order. Rows are written
    in the same transaction as the stage change they describe and are never
    updated or deleted while the application exists.
    """
    __tablename__ = 'application_history'

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(UUIDType, ForeignKey('application.id', ondelete='CASCADE'), nullable=False)
    from_stage_id = Column(UUIDType, nullable=True)  # null for the entry row
    to_stage_id = Column(UUIDType, nullable=False)
    from_stage_name = Column(Text, nullable=True)
    to_stage_name = Column(Text, nullable=False)
    actor = Column(Text, nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    application = relationship("Application", back_populates="history")

    __table_args__ = (
        Index('idx_application_history_app', 'application_id', 'id'),
    )
