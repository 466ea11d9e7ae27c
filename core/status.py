#!/usr/bin/env python3
"""
Lifecycle status derivation.

The single place that decides whether an organization is `active`. Called on
every profile / role-data mutation and again by the eligibility gate at
scoring time, so a provider whose deadline elapsed since its last edit is
never treated as active.
"""

from datetime import datetime
from typing import Optional

from core.models import (
    OrganizationSnapshot,
    ROLE_PROVIDER,
    STATUS_ACTIVE,
    STATUS_INACTIVE,
)
from core.utils import ensure_utc, utcnow


def is_profile_complete(org: OrganizationSnapshot) -> bool:
    """Name, at least one sector and target group, and a full address."""
    return bool(
        org.has_profile
        and org.organization_name
        and org.sectors
        and org.target_groups
        and org.state
        and org.city
        and org.zip_code
    )


def derive_status(org: OrganizationSnapshot, now: Optional[datetime] = None) -> str:
    """
    Derive an organization's lifecycle status.

    Providers stay active until their funding deadline passes; no deadline
    (or no provider data yet) is open-ended. Recipients are active once their
    profile is complete.
    """
    if org.role == ROLE_PROVIDER:
        if org.deadline is None:
            return STATUS_ACTIVE
        now = ensure_utc(now or utcnow())
        if ensure_utc(org.deadline) < now:
            return STATUS_INACTIVE
        return STATUS_ACTIVE

    return STATUS_ACTIVE if is_profile_complete(org) else STATUS_INACTIVE
