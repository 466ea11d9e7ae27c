#!/usr/bin/env python3
"""
Organization domain model shared by status derivation, scoring and storage.

OrganizationSnapshot is a detached, read-only view of an organization and its
profile, so the scoring engine never touches ORM state or a session.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import FrozenSet, Optional

ROLE_PROVIDER = 'provider'
ROLE_RECIPIENT = 'recipient'
ROLES = (ROLE_PROVIDER, ROLE_RECIPIENT)

STATUS_ACTIVE = 'active'
STATUS_INACTIVE = 'inactive'


def opposite_role(role: str) -> str:
    if role == ROLE_PROVIDER:
        return ROLE_RECIPIENT
    if role == ROLE_RECIPIENT:
        return ROLE_PROVIDER
    raise ValueError(f"Unknown role: {role!r}")


@dataclass(frozen=True)
class OrganizationSnapshot:
    """Organization identity, role, and the profile fields scoring reads."""
    id: int
    role: str
    status: str = STATUS_INACTIVE
    email: str = ""

    has_profile: bool = False
    organization_name: str = ""
    profile_picture_url: Optional[str] = None
    sectors: FrozenSet[str] = field(default_factory=frozenset)
    target_groups: FrozenSet[str] = field(default_factory=frozenset)
    state: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    project_stage: Optional[str] = None

    # Provider data
    has_provider_data: bool = False
    funding_type: Optional[str] = None
    amount_offered: Optional[Decimal] = None
    deadline: Optional[datetime] = None
    region_scope: Optional[str] = None

    # Recipient data
    needs: FrozenSet[str] = field(default_factory=frozenset)
    budget_requested: Optional[Decimal] = None
    timeline: Optional[str] = None

    @property
    def is_provider(self) -> bool:
        return self.role == ROLE_PROVIDER
