#!/usr/bin/env python3
"""
Profile service - business logic for organization profiles and status.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from core.config_loader import MatchingConfig
from core.exceptions import OrganizationNotFound
from core.matcher import CandidateSetManager
from database.models import Organization
from database.repositories import OrganizationRepository
from database.repositories.organization import PROFILE_FIELDS
from ..models.requests import ProfileUpdate
from ..models.responses import ProfileDetail, StatusResponse
from ..utils import safe_datetime_iso, safe_float

logger = logging.getLogger(__name__)

# Columns that reject NULL; an explicit null in the request leaves them as-is
NON_NULLABLE_FIELDS = {'organization_name', 'sectors', 'target_groups', 'chat_opt_in', 'needs', 'prior_funding'}


class ProfileService:
    """Service for reading and updating organization profiles."""

    def __init__(
        self,
        db: Session,
        manager: Optional[CandidateSetManager] = None,
        config: Optional[MatchingConfig] = None
    ):
        self.db = db
        self.repo = OrganizationRepository(db)
        self.manager = manager
        self.config = config or MatchingConfig()

    def _get_org(self, org_id: int) -> Organization:
        org = self.repo.get_by_id(org_id)
        if org is None:
            raise OrganizationNotFound(f"Organization {org_id} not found")
        return org

    def get_profile(self, org_id: int) -> ProfileDetail:
        return self._to_profile_detail(self._get_org(org_id))

    def update_profile(self, org_id: int, update: ProfileUpdate) -> ProfileDetail:
        """
        Merge a partial update, re-derive status, and refresh the caller's matches.

        Raises:
            OrganizationNotFound: If the organization does not exist.
        """
        fields = {
            key: value
            for key, value in update.model_dump(exclude_unset=True).items()
            if value is not None or key not in NON_NULLABLE_FIELDS
        }
        profile_fields = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
        role_fields = {k: v for k, v in fields.items() if k not in PROFILE_FIELDS}

        try:
            org = self._get_org(org_id)
            self.repo.update_profile(org, profile_fields, role_fields)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Profile updated for organization {org_id}: status={org.status}")

        if self.manager is not None and self.config.recompute_on_profile_change:
            self.manager.recompute(org_id)

        return self.get_profile(org_id)

    def get_status(self, org_id: int) -> StatusResponse:
        org = self._get_org(org_id)
        return StatusResponse(
            user_id=org.id,
            role=org.role,
            status=org.status,
            last_update=safe_datetime_iso(org.updated_at),
        )

    def _to_profile_detail(self, org: Organization) -> ProfileDetail:
        profile = org.profile
        detail: Dict[str, Any] = {
            'user_id': org.id,
            'email': org.email,
            'role': org.role,
            'status': org.status,
        }
        if profile is not None:
            for field in PROFILE_FIELDS:
                value = getattr(profile, field)
                if value is not None:
                    detail[field] = value

        if org.provider_data is not None:
            p = org.provider_data
            detail['provider_data'] = {
                'funding_type': p.funding_type,
                'amount_offered': safe_float(p.amount_offered) if p.amount_offered is not None else None,
                'region_scope': p.region_scope,
                'location_notes': p.location_notes,
                'eligibility_notes': p.eligibility_notes,
                'deadline': safe_datetime_iso(p.deadline),
                'application_link': p.application_link,
            }
        if org.recipient_data is not None:
            r = org.recipient_data
            detail['recipient_data'] = {
                'needs': list(r.needs or []),
                'budget_requested': safe_float(r.budget_requested) if r.budget_requested is not None else None,
                'team_size': r.team_size,
                'timeline': r.timeline,
                'prior_funding': r.prior_funding,
            }
        return ProfileDetail(**detail)
