from sqlalchemy import (
    Column, Integer, Text, Boolean, Numeric, TIMESTAMP, ForeignKey,
    CheckConstraint, Index, func
)
from sqlalchemy.orm import relationship

from .base import Base, TagList


class Organization(Base):
    """
    A grant provider or grant recipient account.

    Role is fixed at creation. Status is derived from the profile and
    role-specific data (see core.status) and rewritten on every mutation.
    """
    __tablename__ = 'organizations'

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(Text, nullable=False, unique=True)
    role = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default='inactive')  # active|inactive

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    profile = relationship("Profile", back_populates="organization", uselist=False, cascade="all, delete-orphan")
    provider_data = relationship("ProviderData", back_populates="organization", uselist=False, cascade="all, delete-orphan")
    recipient_data = relationship("RecipientData", back_populates="organization", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("role IN ('provider', 'recipient')", name='ck_organizations_role'),
        Index('idx_organizations_role_status', 'role', 'status'),
    )


class Profile(Base):
    """Shared organization profile: identity, address, and matching tags."""
    __tablename__ = 'profiles'

    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, unique=True)

    organization_name = Column(Text, nullable=False, default='')
    profile_picture_url = Column(Text)
    mission_statement = Column(Text)
    location = Column(Text)  # High-level region, e.g. "North America"
    state = Column(Text)
    city = Column(Text)
    zip_code = Column(Text)
    ein = Column(Text)
    language = Column(Text)
    applicant_type = Column(Text)
    sectors = Column(TagList, nullable=False, default=list)
    target_groups = Column(TagList, nullable=False, default=list)
    project_stage = Column(Text)
    website_url = Column(Text)
    contact_email = Column(Text)
    chat_opt_in = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="profile")


class ProviderData(Base):
    """Funding offered by a grant provider."""
    __tablename__ = 'provider_data'

    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, unique=True)

    funding_type = Column(Text)
    amount_offered = Column(Numeric(12, 2))
    region_scope = Column(Text)
    location_notes = Column(Text)
    eligibility_notes = Column(Text)
    deadline = Column(TIMESTAMP(timezone=True))  # NULL = open-ended
    application_link = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="provider_data")

    __table_args__ = (
        CheckConstraint('amount_offered IS NULL OR amount_offered >= 0', name='ck_provider_amount_non_negative'),
    )


class RecipientData(Base):
    """Funding need declared by a grant recipient."""
    __tablename__ = 'recipient_data'

    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, unique=True)

    needs = Column(TagList, nullable=False, default=list)
    budget_requested = Column(Numeric(12, 2))
    team_size = Column(Integer)
    timeline = Column(Text)
    prior_funding = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="recipient_data")

    __table_args__ = (
        CheckConstraint('budget_requested IS NULL OR budget_requested >= 0', name='ck_recipient_budget_non_negative'),
    )
