#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

# Keys of core.scorer.factors.TIMELINE_HORIZON_MONTHS
TimelineBucket = Literal[
    '1-3 months', '3-6 months', '6-12 months', 'short_term', 'medium_term', 'long_term'
]


class ConnectionCreate(BaseModel):
    """Request to connect with another organization."""
    target_id: int = Field(..., description="Organization to connect with")


class ProfileUpdate(BaseModel):
    """
    Partial profile update.

    Only fields present in the request body are written. Provider-only and
    recipient-only fields are ignored for the other role.
    """
    organization_name: Optional[str] = None
    profile_picture_url: Optional[str] = None
    mission_statement: Optional[str] = None
    location: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    ein: Optional[str] = None
    language: Optional[str] = None
    applicant_type: Optional[str] = None
    sectors: Optional[List[str]] = None
    target_groups: Optional[List[str]] = None
    project_stage: Optional[Literal['Early Stage', 'Growth Stage', 'Mature Stage']] = None
    website_url: Optional[str] = None
    contact_email: Optional[str] = None
    chat_opt_in: Optional[bool] = None

    # Provider
    funding_type: Optional[str] = None
    amount_offered: Optional[Decimal] = Field(None, ge=0)
    region_scope: Optional[str] = None
    location_notes: Optional[str] = None
    eligibility_notes: Optional[str] = None
    deadline: Optional[datetime] = None
    application_link: Optional[str] = None

    # Recipient
    needs: Optional[List[str]] = None
    budget_requested: Optional[Decimal] = Field(None, ge=0)
    team_size: Optional[int] = Field(None, ge=0)
    timeline: Optional[TimelineBucket] = None
    prior_funding: Optional[bool] = None
