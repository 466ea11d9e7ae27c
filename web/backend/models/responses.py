#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any


class PotentialMatch(BaseModel):
    """A candidate from the caller's current candidate set."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "candidate_id": 42,
                "score": 85.0,
                "organization_name": "Riverside Youth Fund",
                "email": "grants@riverside.example.org",
                "profile_picture_url": None,
                "components": {
                    "sector": 50.0,
                    "target_group": 100.0,
                    "budget": 100.0,
                    "timeline": 100.0,
                    "stage": 100.0
                }
            }
        }
    )

    candidate_id: int
    score: float = Field(ge=0, le=100)
    organization_name: str
    email: str
    profile_picture_url: Optional[str] = None
    components: Dict[str, float] = Field(default_factory=dict)


class PotentialMatchesResponse(BaseModel):
    """Response for listing potential matches."""
    success: bool
    count: int
    matches: List[PotentialMatch]


class RecalculateResponse(BaseModel):
    """Response for an explicit recompute."""
    success: bool
    message: str
    count: int


class ConnectionSummary(BaseModel):
    """A connection as seen by the caller."""
    connection_id: int
    user_id: int
    organization_name: str
    profile_picture_url: Optional[str] = None
    direction: str = Field(description="following (caller initiated) or follower")
    created_at: Optional[str] = None


class ConnectionsResponse(BaseModel):
    """Response for listing connections."""
    success: bool
    count: int
    connections: List[ConnectionSummary]


class ConnectionResponse(BaseModel):
    """Response for a newly created connection."""
    success: bool
    connection: ConnectionSummary


class ProfileDetail(BaseModel):
    """Organization profile with its role-specific data."""
    user_id: int
    email: str
    role: str
    status: str
    organization_name: str = ""
    profile_picture_url: Optional[str] = None
    mission_statement: Optional[str] = None
    location: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    ein: Optional[str] = None
    language: Optional[str] = None
    applicant_type: Optional[str] = None
    sectors: List[str] = Field(default_factory=list)
    target_groups: List[str] = Field(default_factory=list)
    project_stage: Optional[str] = None
    website_url: Optional[str] = None
    contact_email: Optional[str] = None
    chat_opt_in: bool = False
    provider_data: Optional[Dict[str, Any]] = None
    recipient_data: Optional[Dict[str, Any]] = None


class ProfileResponse(BaseModel):
    """Response wrapping a single profile."""
    success: bool
    profile: ProfileDetail


class StatusResponse(BaseModel):
    """Lifecycle status of an organization."""
    user_id: int
    role: str
    status: str
    last_update: Optional[str] = None
