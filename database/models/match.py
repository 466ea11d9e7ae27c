from sqlalchemy import Column, Integer, Numeric, TIMESTAMP, ForeignKey, Index, func

from .base import Base


class CandidateScore(Base):
    """
    One row of a subject's current candidate set.

    The whole set for a subject is replaced by each recompute; rows are also
    removed by dismissal and by connection.
    """
    __tablename__ = 'candidate_scores'

    subject_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), primary_key=True)
    candidate_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), primary_key=True)

    score = Column(Numeric(5, 2), nullable=False)
    sector_score = Column(Numeric(5, 2), nullable=False, default=0)
    target_group_score = Column(Numeric(5, 2), nullable=False, default=0)
    budget_score = Column(Numeric(5, 2), nullable=False, default=0)
    timeline_score = Column(Numeric(5, 2), nullable=False, default=0)
    stage_score = Column(Numeric(5, 2), nullable=False, default=0)

    computed_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_candidate_scores_subject_score', 'subject_id', 'score'),
        Index('idx_candidate_scores_candidate', 'candidate_id'),
    )
