#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests
    python -m pytest tests/ -v

    # Run only tests that need no database
    python -m pytest tests/ -v -m "not db"

    # Using unittest
    python -m unittest discover tests -v

Database tests run against an in-memory SQLite database built from the ORM
metadata. A single shared connection (StaticPool) lets every session, and
every TestClient worker thread, see the same data.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.models import OrganizationSnapshot, ROLE_PROVIDER, ROLE_RECIPIENT, STATUS_ACTIVE
from core.utils import tag_set

# Fixed evaluation time for deterministic deadline checks
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database with all tables created."""
    from database.models import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autoflush=False, bind=engine)


def create_provider(
    session_factory: sessionmaker,
    email: str,
    sectors: Iterable[str] = ("education",),
    target_groups: Iterable[str] = ("youth",),
    name: Optional[str] = None,
    funding_type: Optional[str] = "seed",
    amount_offered=Decimal("50000"),
    deadline: Optional[datetime] = None,
) -> int:
    """Insert a provider with profile and funding data. Returns its id."""
    from database.repositories import OrganizationRepository

    session = session_factory()
    try:
        repo = OrganizationRepository(session)
        org = repo.create_organization(email=email, role=ROLE_PROVIDER)
        repo.update_profile(
            org,
            {
                'organization_name': name or email.split('@')[0],
                'sectors': list(sectors),
                'target_groups': list(target_groups),
                'state': 'CA',
                'city': 'Oakland',
                'zip_code': '94612',
            },
            {
                'funding_type': funding_type,
                'amount_offered': amount_offered,
                'deadline': deadline,
            },
        )
        session.commit()
        return org.id
    finally:
        session.close()


def create_recipient(
    session_factory: sessionmaker,
    email: str,
    sectors: Iterable[str] = ("education",),
    target_groups: Iterable[str] = ("youth",),
    name: Optional[str] = None,
    project_stage: Optional[str] = "Early Stage",
    budget_requested=Decimal("20000"),
    timeline: Optional[str] = "3-6 months",
    complete: bool = True,
) -> int:
    """Insert a recipient. `complete=False` leaves the address empty (inactive)."""
    from database.repositories import OrganizationRepository

    session = session_factory()
    try:
        repo = OrganizationRepository(session)
        org = repo.create_organization(email=email, role=ROLE_RECIPIENT)
        profile = {
            'organization_name': name or email.split('@')[0],
            'sectors': list(sectors),
            'target_groups': list(target_groups),
            'project_stage': project_stage,
        }
        if complete:
            profile.update({'state': 'CA', 'city': 'Fresno', 'zip_code': '93701'})
        repo.update_profile(
            org,
            profile,
            {'budget_requested': budget_requested, 'timeline': timeline},
        )
        session.commit()
        return org.id
    finally:
        session.close()


def provider_snapshot(org_id: int = 1, **overrides) -> OrganizationSnapshot:
    """Active provider snapshot for pure scoring tests."""
    fields = dict(
        id=org_id,
        role=ROLE_PROVIDER,
        status=STATUS_ACTIVE,
        has_profile=True,
        organization_name=f"Provider {org_id}",
        sectors=tag_set(["education", "health"]),
        target_groups=tag_set(["youth"]),
        state="CA",
        city="Oakland",
        zip_code="94612",
        has_provider_data=True,
        funding_type="seed",
        amount_offered=Decimal("50000"),
        deadline=None,
    )
    fields.update(overrides)
    return OrganizationSnapshot(**fields)


def recipient_snapshot(org_id: int = 2, **overrides) -> OrganizationSnapshot:
    """Active recipient snapshot for pure scoring tests."""
    fields = dict(
        id=org_id,
        role=ROLE_RECIPIENT,
        status=STATUS_ACTIVE,
        has_profile=True,
        organization_name=f"Recipient {org_id}",
        sectors=tag_set(["education"]),
        target_groups=tag_set(["youth"]),
        state="CA",
        city="Fresno",
        zip_code="93701",
        project_stage="Early Stage",
        budget_requested=Decimal("20000"),
        timeline="3-6 months",
    )
    fields.update(overrides)
    return OrganizationSnapshot(**fields)
