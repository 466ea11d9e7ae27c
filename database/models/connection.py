from sqlalchemy import Column, Integer, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint, Index, func

from .base import Base


class Connection(Base):
    """
    Accepted connection between a provider and a recipient.

    Stored once, in the direction it was created; both parties observe it.
    A connected pair is excluded from candidate generation in both directions.
    """
    __tablename__ = 'connections'

    id = Column(Integer, primary_key=True, autoincrement=True)
    initiator_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)
    target_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('initiator_id', 'target_id', name='uq_connections_pair'),
        CheckConstraint('initiator_id <> target_id', name='ck_connections_not_self'),
        Index('idx_connections_initiator', 'initiator_id'),
        Index('idx_connections_target', 'target_id'),
    )


class Dismissal(Base):
    """
    A candidate permanently rejected by a subject.

    Never deleted by the matching core.
    """
    __tablename__ = 'dismissed_matches'

    subject_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), primary_key=True)
    candidate_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), primary_key=True)
    dismissed_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
