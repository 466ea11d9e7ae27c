import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from core.models import OrganizationSnapshot, ROLES, ROLE_PROVIDER, STATUS_ACTIVE
from core.status import derive_status
from core.utils import tag_set, to_decimal
from database.models import Organization, Profile, ProviderData, RecipientData
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    'organization_name', 'profile_picture_url', 'mission_statement', 'location',
    'state', 'city', 'zip_code', 'ein', 'language', 'applicant_type', 'sectors',
    'target_groups', 'project_stage', 'website_url', 'contact_email', 'chat_opt_in',
)
PROVIDER_FIELDS = (
    'funding_type', 'amount_offered', 'region_scope', 'location_notes',
    'eligibility_notes', 'deadline', 'application_link',
)
RECIPIENT_FIELDS = (
    'needs', 'budget_requested', 'team_size', 'timeline', 'prior_funding',
)


def to_snapshot(org: Organization) -> OrganizationSnapshot:
    """Detach an Organization and its profile rows into a scoring snapshot."""
    profile = org.profile
    provider = org.provider_data
    recipient = org.recipient_data

    return OrganizationSnapshot(
        id=org.id,
        role=org.role,
        status=org.status,
        email=org.email or "",
        has_profile=profile is not None,
        organization_name=(profile.organization_name or "") if profile else "",
        profile_picture_url=profile.profile_picture_url if profile else None,
        sectors=tag_set(profile.sectors) if profile else frozenset(),
        target_groups=tag_set(profile.target_groups) if profile else frozenset(),
        state=profile.state if profile else None,
        city=profile.city if profile else None,
        zip_code=profile.zip_code if profile else None,
        project_stage=profile.project_stage if profile else None,
        has_provider_data=provider is not None,
        funding_type=provider.funding_type if provider else None,
        amount_offered=to_decimal(provider.amount_offered) if provider else None,
        deadline=provider.deadline if provider else None,
        region_scope=provider.region_scope if provider else None,
        needs=tag_set(recipient.needs) if recipient else frozenset(),
        budget_requested=to_decimal(recipient.budget_requested) if recipient else None,
        timeline=recipient.timeline if recipient else None,
    )


class OrganizationRepository(BaseRepository):
    """Profile Store access: organizations, profiles and role-specific data."""

    def _with_profile(self):
        return select(Organization).options(
            selectinload(Organization.profile),
            selectinload(Organization.provider_data),
            selectinload(Organization.recipient_data),
        )

    def get_by_id(self, org_id: Any) -> Optional[Organization]:
        stmt = self._with_profile().where(Organization.id == org_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_snapshot(self, org_id: Any) -> Optional[OrganizationSnapshot]:
        org = self.get_by_id(org_id)
        return to_snapshot(org) if org else None

    def lock_for_update(self, org_id: Any) -> Optional[Organization]:
        """Row-lock the organization for the rest of the transaction.

        Serializes candidate-set writers for the same subject across processes.
        FOR UPDATE is ignored on backends without row locks (SQLite).
        """
        stmt = select(Organization).where(Organization.id == org_id).with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def list_active_by_role(self, role: str) -> List[OrganizationSnapshot]:
        """Bulk read of organizations with a stored `active` status.

        Callers re-derive status at evaluation time; stored status only
        prefilters, since an active status can go stale (provider deadline)
        but an inactive one cannot become active without a mutation.
        """
        stmt = self._with_profile().where(
            Organization.role == role,
            Organization.status == STATUS_ACTIVE
        ).order_by(Organization.id)
        return [to_snapshot(org) for org in self.db.execute(stmt).scalars().all()]

    def list_active_ids(self) -> List[int]:
        stmt = select(Organization.id).where(
            Organization.status == STATUS_ACTIVE
        ).order_by(Organization.id)
        return list(self.db.execute(stmt).scalars().all())

    def list_all(self) -> List[Organization]:
        stmt = self._with_profile().order_by(Organization.id)
        return list(self.db.execute(stmt).scalars().all())

    def get_summaries(self, org_ids: Iterable[int]) -> Dict[int, Dict[str, Any]]:
        """Display fields for a batch of organizations, keyed by id."""
        ids = set(org_ids)
        if not ids:
            return {}

        stmt = (
            select(Organization.id, Organization.email, Profile.organization_name, Profile.profile_picture_url)
            .outerjoin(Profile, Profile.organization_id == Organization.id)
            .where(Organization.id.in_(list(ids)))
        )
        return {
            org_id: {
                'email': email or '',
                'organization_name': name or '',
                'profile_picture_url': picture,
            }
            for org_id, email, name, picture in self.db.execute(stmt).all()
        }

    def create_organization(self, email: str, role: str) -> Organization:
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        org = Organization(email=email, role=role)
        self.db.add(org)
        self.db.flush()  # Generate ID
        org.status = derive_status(to_snapshot(org))
        return org

    def update_profile(
        self,
        org: Organization,
        profile_fields: Optional[Dict[str, Any]] = None,
        role_fields: Optional[Dict[str, Any]] = None
    ) -> Organization:
        """Merge partial updates into the profile and role data, then re-derive status.

        Keys absent from the dicts are left untouched. Role fields are routed
        to provider_data or recipient_data according to the organization's role.
        """
        profile_fields = {k: v for k, v in (profile_fields or {}).items() if k in PROFILE_FIELDS}
        role_fields = role_fields or {}

        if org.profile is None:
            org.profile = Profile(organization_name='', sectors=[], target_groups=[])
        for key, value in profile_fields.items():
            setattr(org.profile, key, value)

        if org.role == ROLE_PROVIDER:
            allowed = PROVIDER_FIELDS
            if org.provider_data is None and any(k in allowed for k in role_fields):
                org.provider_data = ProviderData()
            target = org.provider_data
        else:
            allowed = RECIPIENT_FIELDS
            if org.recipient_data is None and any(k in allowed for k in role_fields):
                org.recipient_data = RecipientData(needs=[])
            target = org.recipient_data

        ignored = [k for k in role_fields if k not in allowed]
        if ignored:
            logger.warning(f"Ignoring fields not valid for {org.role} {org.id}: {ignored}")
        if target is not None:
            for key, value in role_fields.items():
                if key in allowed:
                    setattr(target, key, value)

        self.db.flush()
        self.refresh_status(org)
        return org

    def refresh_status(self, org: Organization, now: Optional[datetime] = None) -> bool:
        """Re-derive and store status. Returns True if it changed."""
        new_status = derive_status(to_snapshot(org), now)
        if new_status == org.status:
            return False
        logger.info(f"Organization {org.id} status {org.status} -> {new_status}")
        org.status = new_status
        return True

    def refresh_statuses(self, now: Optional[datetime] = None) -> List[int]:
        """Re-derive every stored status. Returns ids whose status changed."""
        changed = [org.id for org in self.list_all() if self.refresh_status(org, now)]
        self.db.flush()
        return changed
